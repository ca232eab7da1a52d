from __future__ import annotations

import httpx
import pytest
import pytest_asyncio

from course_catalog.api.deps import get_store
from course_catalog.core.errors import StoreUnavailable
from course_catalog.core.security import create_access_token
from course_catalog.core.settings import get_settings
from course_catalog.main import app
from course_catalog.store.memory import InMemoryCourseStore


def _auth(user_id: str) -> dict[str, str]:
    settings = get_settings()
    token = create_access_token(subject=user_id, ttl_seconds=300, secret=settings.jwt_secret)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def store() -> InMemoryCourseStore:
    store = InMemoryCourseStore()
    app.dependency_overrides[get_store] = lambda: store
    yield store
    app.dependency_overrides.pop(get_store, None)


@pytest_asyncio.fixture
async def client(store: InMemoryCourseStore):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def _create(client: httpx.AsyncClient, user_id: str = "u1", **body) -> dict:
    body.setdefault("title", "Intro to Physics")
    r = await client.post("/api/v1/courses", json=body, headers=_auth(user_id))
    assert r.status_code == 201, r.text
    return r.json()


@pytest.mark.asyncio
async def test_create_returns_camel_case_record_with_server_fields(client: httpx.AsyncClient) -> None:
    data = await _create(
        client,
        title="A",
        description="Kinematics",
        price=19.99,
        creatorName="Ada",
        tags=["x", "y"],
        selectedFileRef="https://cdn.example.com/a.png",
        creatorUserId="spoofed",
        createdAt="2000-01-01T00:00:00Z",
    )

    assert data["id"]
    assert data["title"] == "A"
    assert data["price"] == 19.99
    assert data["creatorName"] == "Ada"
    assert data["creatorUserId"] == "u1"
    assert data["tags"] == ["x", "y"]
    assert data["selectedFileRef"] == "https://cdn.example.com/a.png"
    assert data["likes"] == []
    assert data["comments"] == []
    assert not data["createdAt"].startswith("2000")


@pytest.mark.asyncio
async def test_create_requires_identity_and_title(client: httpx.AsyncClient) -> None:
    anon = await client.post("/api/v1/courses", json={"title": "A"})
    assert anon.status_code == 401

    bad_token = await client.post(
        "/api/v1/courses", json={"title": "A"}, headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert bad_token.status_code == 401

    blank = await client.post("/api/v1/courses", json={"title": "   "}, headers=_auth("u1"))
    assert blank.status_code == 422


@pytest.mark.asyncio
async def test_identity_from_access_cookie(client: httpx.AsyncClient) -> None:
    settings = get_settings()
    token = create_access_token(subject="cookie-user", ttl_seconds=300, secret=settings.jwt_secret)
    r = await client.post(
        "/api/v1/courses",
        json={"title": "A"},
        headers={"Cookie": f"{settings.access_cookie_name}={token}"},
    )
    assert r.status_code == 201
    assert r.json()["creatorUserId"] == "cookie-user"


@pytest.mark.asyncio
async def test_list_pages(client: httpx.AsyncClient) -> None:
    created = [await _create(client, title=f"C{i}") for i in range(6)]

    first = await client.get("/api/v1/courses", params={"page": 1})
    assert first.status_code == 200
    body = first.json()
    assert body["currentPage"] == 1
    assert body["numberOfPages"] == 2
    assert [c["id"] for c in body["data"]] == [c["id"] for c in reversed(created)][:4]

    second = (await client.get("/api/v1/courses", params={"page": 2})).json()
    assert [c["title"] for c in second["data"]] == ["C1", "C0"]

    default = (await client.get("/api/v1/courses")).json()
    assert default["currentPage"] == 1

    beyond = (await client.get("/api/v1/courses", params={"page": 9})).json()
    assert beyond["data"] == []

    far = await client.get("/api/v1/courses", params={"page": 3 * 10**18})
    assert far.status_code == 200
    assert far.json() == {"data": [], "currentPage": 3 * 10**18, "numberOfPages": 2}

    zero = await client.get("/api/v1/courses", params={"page": 0})
    assert zero.status_code == 400
    assert zero.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_search_and_creator_filters(client: httpx.AsyncClient) -> None:
    physics = await _create(client, title="Intro to Physics", tags=["science"], creatorName="Ada")
    chem = await _create(client, title="Chemistry", tags=["science", "lab"], creatorName="Grace")
    music = await _create(client, title="Music", tags=["art"], creatorName="Ada")

    r = await client.get("/api/v1/courses/search", params={"searchQuery": "PHYS", "tags": "art"})
    assert r.status_code == 200
    assert {c["id"] for c in r.json()["data"]} == {physics["id"], music["id"]}

    without_query = await client.get("/api/v1/courses/search", params={"tags": "lab,none"})
    assert [c["id"] for c in without_query.json()["data"]] == [music["id"], chem["id"], physics["id"]]

    everything = await client.get("/api/v1/courses/search", params={"searchQuery": ""})
    assert len(everything.json()["data"]) == 3

    by_creator = await client.get("/api/v1/courses/creator", params={"name": "Ada"})
    assert {c["id"] for c in by_creator.json()["data"]} == {physics["id"], music["id"]}

    nobody = await client.get("/api/v1/courses/creator", params={"name": "Nobody"})
    assert nobody.json() == {"data": []}


@pytest.mark.asyncio
async def test_get_one(client: httpx.AsyncClient) -> None:
    created = await _create(client)

    r = await client.get(f"/api/v1/courses/{created['id']}")
    assert r.status_code == 200
    assert r.json() == created

    missing = await client.get("/api/v1/courses/424242")
    assert missing.status_code == 404
    assert missing.json()["code"] == "NOT_FOUND"

    malformed = await client.get("/api/v1/courses/not-an-id")
    assert malformed.status_code == 400
    assert malformed.json()["code"] == "INVALID_ID"


@pytest.mark.asyncio
async def test_update_keeps_write_once_fields(client: httpx.AsyncClient) -> None:
    created = await _create(client, title="Old", creatorName="Ada", tags=["x"])

    r = await client.patch(
        f"/api/v1/courses/{created['id']}",
        json={
            "title": "New",
            "description": "changed",
            "price": 5,
            "creatorName": "Grace",
            "tags": ["y"],
            "creatorUserId": "mallory",
            "createdAt": "2001-01-01T00:00:00Z",
        },
        headers=_auth("u2"),
    )
    assert r.status_code == 200
    data = r.json()
    assert data["title"] == "New"
    assert data["creatorName"] == "Grace"
    assert data["tags"] == ["y"]
    assert data["creatorUserId"] == "u1"
    assert data["createdAt"] == created["createdAt"]

    invalid = await client.patch("/api/v1/courses/xyz", json={"title": "t"}, headers=_auth("u1"))
    assert invalid.status_code == 400

    missing = await client.patch("/api/v1/courses/999", json={"title": "t"}, headers=_auth("u1"))
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_delete_then_get_is_not_found(client: httpx.AsyncClient) -> None:
    created = await _create(client)
    url = f"/api/v1/courses/{created['id']}"

    r = await client.delete(url, headers=_auth("someone-else"))
    assert r.status_code == 200
    assert r.json() == {"message": "Course is deleted successfully."}

    assert (await client.get(url)).status_code == 404
    assert (await client.delete(url, headers=_auth("u1"))).status_code == 404
    assert (await client.delete("/api/v1/courses/abc", headers=_auth("u1"))).status_code == 400


@pytest.mark.asyncio
async def test_like_toggle_and_unauthenticated_payload(client: httpx.AsyncClient) -> None:
    created = await _create(client, title="A", tags=["x", "y"])
    url = f"/api/v1/courses/{created['id']}/likeCourse"

    liked = await client.patch(url, headers=_auth("u1"))
    assert liked.status_code == 200
    assert liked.json()["likes"] == ["u1"]

    unliked = await client.patch(url, headers=_auth("u1"))
    assert unliked.json()["likes"] == []

    anon = await client.patch(url)
    assert anon.status_code == 200
    assert anon.json() == {"message": "Unauthenticated"}

    bad_token = await client.patch(url, headers={"Authorization": "Bearer broken"})
    assert bad_token.json() == {"message": "Unauthenticated"}

    missing = await client.patch("/api/v1/courses/999/likeCourse", headers=_auth("u1"))
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_comment_appends(client: httpx.AsyncClient) -> None:
    created = await _create(client)
    url = f"/api/v1/courses/{created['id']}/commentCourse"

    first = await client.post(url, json={"value": "u1: great"}, headers=_auth("u1"))
    second = await client.post(url, json={"value": "u2: agreed"}, headers=_auth("u2"))
    assert first.status_code == 200
    assert second.json()["comments"] == ["u1: great", "u2: agreed"]

    missing = await client.post("/api/v1/courses/999/commentCourse", json={"value": "x"}, headers=_auth("u1"))
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_store_fault_maps_to_503(client: httpx.AsyncClient, store: InMemoryCourseStore) -> None:
    async def broken(*args, **kwargs):
        raise StoreUnavailable("count_matching", "connection refused")

    store.count_matching = broken

    r = await client.get("/api/v1/courses")
    assert r.status_code == 503
    assert r.json()["code"] == "STORE_UNAVAILABLE"


@pytest.mark.asyncio
async def test_health(client: httpx.AsyncClient) -> None:
    assert (await client.get("/health")).json() == {"ok": True}
    await _create(client)
    assert (await client.get("/health/store")).json() == {"ok": True, "courses": 1}


@pytest.mark.asyncio
async def test_nul_characters_are_client_errors(client: httpx.AsyncClient) -> None:
    created = await _create(client)

    comment = await client.post(
        f"/api/v1/courses/{created['id']}/commentCourse", json={"value": "a\x00b"}, headers=_auth("u1")
    )
    assert comment.status_code == 422

    search = await client.get("/api/v1/courses/search", params={"searchQuery": "a\x00"})
    assert search.status_code == 400
    assert search.json()["code"] == "VALIDATION_ERROR"

    tags = await client.get("/api/v1/courses/search", params={"tags": "x\x00"})
    assert tags.status_code == 400

    title = await client.post("/api/v1/courses", json={"title": "a\x00"}, headers=_auth("u1"))
    assert title.status_code == 422

    assert (await client.get(f"/api/v1/courses/{created['id']}")).json()["comments"] == []
