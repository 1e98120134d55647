"""PostService tests — ownership enforcement without HTTP.

Learn: The identity is just an argument to the service, so the
ownership rule can be checked directly against the database.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio

from inkpress.db.models import Post
from inkpress.errors import Unauthenticated
from inkpress.services.post_service import PostService, parse_id
from inkpress.services.user_service import UserService


@pytest_asyncio.fixture
async def users(db_session):
    svc = UserService(db_session, bcrypt_rounds=4)
    alice = await svc.signup("alice", "a@x.com", "secret1")
    bob = await svc.signup("bob", "b@x.com", "secret2")
    return alice, bob


def test_parse_id():
    value = uuid.uuid4()
    assert parse_id(value) == value
    assert parse_id(str(value)) == value
    assert parse_id("nope") is None


@pytest.mark.asyncio
async def test_create_stores_author_reference(db_session, users):
    alice, _ = users
    post = await PostService(db_session).create_post(str(alice.id), "T", "C")
    assert post.author_id == alice.id
    assert post.author.username == "alice"
    assert post.created_at.tzinfo is not None


@pytest.mark.asyncio
async def test_create_for_unknown_author(db_session, users):
    with pytest.raises(Unauthenticated):
        await PostService(db_session).create_post(str(uuid.uuid4()), "T", "C")


@pytest.mark.asyncio
async def test_update_by_non_owner_matches_nothing(database, db_session, users):
    alice, bob = users
    svc = PostService(db_session)
    post = await svc.create_post(alice.id, "Original", "Body")

    assert await svc.update_post(post.id, bob.id, "Hacked", "Hacked") is None

    await db_session.commit()
    async with database.session_factory() as fresh:
        stored = await PostService(fresh).get_post(post.id)
    assert (stored.title, stored.content) == ("Original", "Body")
    assert stored.author_id == alice.id


@pytest.mark.asyncio
async def test_update_by_owner(db_session, users):
    alice, _ = users
    svc = PostService(db_session)
    post = await svc.create_post(alice.id, "Original", "Body")
    created_at = post.created_at

    updated = await svc.update_post(str(post.id), str(alice.id), "New", "Text")
    assert updated is not None
    assert (updated.title, updated.content) == ("New", "Text")
    assert updated.author_id == alice.id
    assert updated.created_at == created_at
    assert updated.updated_at >= created_at


@pytest.mark.asyncio
async def test_update_missing_post(db_session, users):
    alice, _ = users
    svc = PostService(db_session)
    assert await svc.update_post(uuid.uuid4(), alice.id, "a", "b") is None
    assert await svc.update_post("not-a-uuid", alice.id, "a", "b") is None


@pytest.mark.asyncio
async def test_delete_by_non_owner_keeps_post(db_session, users):
    alice, bob = users
    svc = PostService(db_session)
    post = await svc.create_post(alice.id, "T", "C")

    assert await svc.delete_post(post.id, bob.id) is False
    assert await svc.get_post(post.id) is not None


@pytest.mark.asyncio
async def test_delete_by_owner(db_session, users):
    alice, _ = users
    svc = PostService(db_session)
    post_id = (await svc.create_post(alice.id, "T", "C")).id

    assert await svc.delete_post(post_id, alice.id) is True
    assert await svc.get_post(post_id) is None
    assert await svc.delete_post(post_id, alice.id) is False


@pytest.mark.asyncio
async def test_list_orders_by_stored_creation_time(db_session, users):
    """Order comes from created_at, not insertion order."""
    alice, _ = users
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    # Insert out of order on purpose.
    for title, offset in [("P2", 2), ("P1", 1), ("P3", 3)]:
        db_session.add(
            Post(
                title=title,
                content="c",
                author_id=alice.id,
                created_at=base + timedelta(minutes=offset),
            )
        )
    await db_session.commit()

    posts = await PostService(db_session).list_posts()
    assert [p.title for p in posts] == ["P3", "P2", "P1"]
    assert all(p.author.username == "alice" for p in posts)
