"""Integration tests: forum categories, topics and replies."""

from uuid import uuid4

import pytest
from httpx import AsyncClient

from app.models.enums import ForumAuthorRole
from app.models.forum import ForumCategory, ForumTopic


@pytest.fixture
async def category(session_factory) -> ForumCategory:
    async with session_factory() as session:
        category = ForumCategory(name="Science fair", description="Projects and ideas", color="#10B981")
        session.add(category)
        await session.commit()
    return category


@pytest.fixture
async def topic(session_factory, school, category) -> ForumTopic:
    async with session_factory() as session:
        topic = ForumTopic(
            title="Volcano models",
            content="Baking soda or yeast?",
            category_id=category.id,
            author_id=school.students_9a[0].id,
            author_role=ForumAuthorRole.STUDENT,
            author_name=school.students_9a[0].full_name,
            tags=["chemistry", "models"],
        )
        session.add(topic)
        await session.commit()
    return topic


async def _reply(async_client: AsyncClient, headers: dict, topic_id, **body):
    payload = {"content": "Yeast is safer indoors."}
    payload.update(body)
    return await async_client.post(f"/forum/topics/{topic_id}/posts", headers=headers, json=payload)


@pytest.mark.asyncio
async def test_fetch_increments_views(async_client: AsyncClient, school, topic, auth_headers):
    headers = auth_headers(school.students_9a[1])

    resp = await async_client.get(f"/forum/topics/{topic.id}", headers=headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["views"] == 1
    assert data["title"] == "Volcano models"
    assert data["category"]["name"] == "Science fair"
    assert data["tags"] == ["chemistry", "models"]

    resp = await async_client.get(f"/forum/topics/{topic.id}", headers=headers)
    assert resp.json()["data"]["views"] == 2
    assert resp.json()["data"]["updated_at"] == data["updated_at"]


@pytest.mark.asyncio
async def test_unknown_topic(async_client: AsyncClient, school, auth_headers):
    resp = await async_client.get(f"/forum/topics/{uuid4()}", headers=auth_headers(school.teacher))
    assert resp.status_code == 404
    assert resp.json()["error"] == {"code": "NOT_FOUND", "message": "Topic not found"}


@pytest.mark.asyncio
async def test_malformed_topic_id_is_not_found(async_client: AsyncClient, school, auth_headers):
    resp = await async_client.get("/forum/topics/not-a-topic", headers=auth_headers(school.teacher))
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_requires_session(async_client: AsyncClient, topic):
    resp = await async_client.get(f"/forum/topics/{topic.id}")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_reply_counts_and_sets_last_reply(async_client: AsyncClient, school, topic, auth_headers):
    resp = await _reply(async_client, auth_headers(school.teacher), topic.id)
    assert resp.status_code == 201, resp.text
    data = resp.json()["data"]
    assert data["post"]["author_name"] == school.teacher.full_name
    assert data["post"]["author_role"] == "teacher"
    assert data["post"]["parent_post_id"] is None
    assert data["topic"]["replies"] == 1
    assert data["topic"]["last_reply_by_name"] == school.teacher.full_name
    assert data["topic"]["last_reply_at"] == data["post"]["created_at"]

    resp = await _reply(async_client, auth_headers(school.students_9a[1]), topic.id, content="Agreed")
    topic_data = resp.json()["data"]["topic"]
    assert topic_data["replies"] == 2
    assert topic_data["last_reply_by_name"] == school.students_9a[1].full_name
    # replies do not count as views
    assert topic_data["views"] == 0


@pytest.mark.asyncio
async def test_reply_to_locked_topic_forbidden(async_client: AsyncClient, school, topic, auth_headers, db_session):
    stored = await db_session.get(ForumTopic, topic.id)
    stored.is_locked = True
    await db_session.commit()

    resp = await _reply(async_client, auth_headers(school.teacher), topic.id)
    assert resp.status_code == 403
    assert resp.json()["error"] == {"code": "FORBIDDEN", "message": "Topic is locked"}

    resp = await async_client.get(f"/forum/topics/{topic.id}/posts", headers=auth_headers(school.teacher))
    assert resp.json()["meta"]["total"] == 0


@pytest.mark.asyncio
async def test_parent_cannot_post(async_client: AsyncClient, school, topic, auth_headers):
    resp = await _reply(async_client, auth_headers(school.parent), topic.id)
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_reply_to_unknown_topic(async_client: AsyncClient, school, auth_headers):
    resp = await _reply(async_client, auth_headers(school.teacher), uuid4())
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_posts_listed_with_nested_replies(async_client: AsyncClient, school, topic, auth_headers):
    teacher = auth_headers(school.teacher)
    student = auth_headers(school.students_9a[1])
    first = (await _reply(async_client, student, topic.id, content="First")).json()["data"]["post"]
    await _reply(async_client, teacher, topic.id, content="Second")
    resp = await _reply(async_client, teacher, topic.id, content="Reply to first", parent_post_id=first["id"])
    assert resp.status_code == 201
    assert resp.json()["data"]["topic"]["replies"] == 3

    resp = await async_client.get(f"/forum/topics/{topic.id}/posts", headers=student)
    assert resp.status_code == 200
    body = resp.json()
    assert [p["content"] for p in body["data"]] == ["First", "Second"]
    assert [r["content"] for r in body["data"][0]["replies"]] == ["Reply to first"]
    assert body["data"][1]["replies"] == []
    assert body["meta"]["total"] == 2


@pytest.mark.asyncio
async def test_reply_parent_must_belong_to_topic(async_client: AsyncClient, school, topic, auth_headers):
    resp = await _reply(async_client, auth_headers(school.teacher), topic.id, parent_post_id=str(uuid4()))
    assert resp.status_code == 404
    assert resp.json()["error"]["message"] == "Post not found"


@pytest.mark.asyncio
async def test_create_topic_and_list(async_client: AsyncClient, school, topic, category, auth_headers):
    teacher = auth_headers(school.teacher)
    resp = await async_client.post(
        "/forum/topics",
        headers=teacher,
        json={"title": "Judging rubric", "content": "Posted on the board", "category_id": str(category.id)},
    )
    assert resp.status_code == 201, resp.text
    created = resp.json()["data"]
    assert created["author_role"] == "teacher"
    assert created["replies"] == 0
    assert created["category"]["id"] == str(category.id)

    # a reply makes the older topic the most recently active one
    await _reply(async_client, teacher, topic.id)

    resp = await async_client.get("/forum/topics", headers=teacher, params={"category_id": str(category.id)})
    assert resp.status_code == 200
    body = resp.json()
    assert [t["title"] for t in body["data"]] == ["Volcano models", "Judging rubric"]
    assert body["meta"]["total"] == 2


@pytest.mark.asyncio
async def test_sticky_topics_listed_first(async_client: AsyncClient, school, topic, category, auth_headers, session_factory):
    async with session_factory() as session:
        session.add(
            ForumTopic(
                title="Read before posting",
                content="Rules",
                category_id=category.id,
                author_id=school.teacher.id,
                author_role=ForumAuthorRole.TEACHER,
                author_name=school.teacher.full_name,
                is_sticky=True,
            )
        )
        await session.commit()
    await _reply(async_client, auth_headers(school.teacher), topic.id)

    resp = await async_client.get("/forum/topics", headers=auth_headers(school.parent))
    assert [t["title"] for t in resp.json()["data"]] == ["Read before posting", "Volcano models"]


@pytest.mark.asyncio
async def test_student_blocked_from_closed_category(async_client: AsyncClient, school, auth_headers, session_factory):
    async with session_factory() as session:
        staff_room = ForumCategory(name="Staff room", allow_student_posts=False)
        session.add(staff_room)
        await session.commit()

    body = {"title": "Hello", "content": "Can I post here?", "category_id": str(staff_room.id)}
    resp = await async_client.post("/forum/topics", headers=auth_headers(school.students_9a[0]), json=body)
    assert resp.status_code == 403

    resp = await async_client.post("/forum/topics", headers=auth_headers(school.teacher), json=body)
    assert resp.status_code == 201


@pytest.mark.asyncio
async def test_create_topic_unknown_category(async_client: AsyncClient, school, auth_headers):
    resp = await async_client.post(
        "/forum/topics",
        headers=auth_headers(school.teacher),
        json={"title": "Hello", "content": "Anyone?", "category_id": str(uuid4())},
    )
    assert resp.status_code == 404
    assert resp.json()["error"]["message"] == "Category not found"


@pytest.mark.asyncio
async def test_categories_listed_by_name(async_client: AsyncClient, school, category, auth_headers, session_factory):
    async with session_factory() as session:
        session.add_all([
            ForumCategory(name="Art corner"),
            ForumCategory(name="Archived", is_active=False),
        ])
        await session.commit()

    resp = await async_client.get("/forum/categories", headers=auth_headers(school.students_9a[0]))
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [c["name"] for c in data] == ["Art corner", "Science fair"]
    assert data[0]["color"] == "#3B82F6"
    assert data[1]["allow_student_posts"] is True
