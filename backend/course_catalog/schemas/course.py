from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

NUL = "\x00"


def _no_nul(value):
    items = value if isinstance(value, list) else [value]
    if any(v is not None and NUL in v for v in items):
        raise ValueError("text may not contain NUL characters")
    return value


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CourseCreate(_CamelModel):
    """Client-supplied course fields. Unknown keys (creatorUserId, createdAt, likes...) are ignored."""

    title: str = Field(min_length=1, max_length=255)
    description: str = ""
    price: float = Field(default=0, ge=0)
    creator_name: str = Field(default="", max_length=255)
    tags: list[str] = Field(default_factory=list)
    selected_file_ref: str | None = None

    @field_validator("title")
    @classmethod
    def _normalize_title(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Course title is required")
        return v

    @field_validator("creator_name")
    @classmethod
    def _strip_creator_name(cls, v: str) -> str:
        return (v or "").strip()

    @field_validator("title", "description", "creator_name", "tags", "selected_file_ref")
    @classmethod
    def _reject_nul(cls, v):
        return _no_nul(v)


class CourseUpdate(CourseCreate):
    # Same six fields, replaced wholesale.
    pass


class CourseRecord(_CamelModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    title: str
    description: str
    price: float
    creator_name: str
    creator_user_id: str
    tags: list[str]
    selected_file_ref: str | None = None
    likes: list[str]
    comments: list[str]
    created_at: datetime

    @field_validator("likes")
    @classmethod
    def _dedupe_likes(cls, v: list[str]) -> list[str]:
        # Masks duplicates a racing writer may have left behind.
        return list(dict.fromkeys(v))


class CoursePage(BaseModel):
    data: list[CourseRecord]
    currentPage: int
    numberOfPages: int


class CourseList(BaseModel):
    data: list[CourseRecord]


class CommentRequest(BaseModel):
    value: str

    @field_validator("value")
    @classmethod
    def _reject_nul(cls, v: str) -> str:
        return _no_nul(v)


class MessageResponse(BaseModel):
    message: str
