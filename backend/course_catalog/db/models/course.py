from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Float, Identity, Index, String, Text, func
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from course_catalog.db.base import Base


class Course(Base):
    __tablename__ = "courses"
    __table_args__ = (Index("ix_courses_tags", "tags", postgresql_using="gin"),)

    # Identity values are monotonic and never reused, so ordering by id is insertion order.
    id: Mapped[int] = mapped_column(BigInteger, Identity(always=False), primary_key=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, server_default="")
    price: Mapped[float] = mapped_column(Float, nullable=False, server_default="0")

    creator_name: Mapped[str] = mapped_column(String(255), nullable=False, server_default="", index=True)
    creator_user_id: Mapped[str] = mapped_column(String(255), nullable=False)

    tags: Mapped[list[str]] = mapped_column(ARRAY(Text), nullable=False, server_default="{}")
    selected_file_ref: Mapped[str | None] = mapped_column(Text, nullable=True)

    likes: Mapped[list[str]] = mapped_column(ARRAY(Text), nullable=False, server_default="{}")
    comments: Mapped[list[str]] = mapped_column(ARRAY(Text), nullable=False, server_default="{}")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
