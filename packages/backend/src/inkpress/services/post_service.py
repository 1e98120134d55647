"""Post service — CRUD with ownership enforced by the storage filter.

Learn: Service layer separates business logic from HTTP routing.
API routes call services, services call the database.

The rule that matters here: update and delete never read the post to
check who owns it. The owner check IS the WHERE clause:

    UPDATE posts SET ... WHERE id = :id AND author_id = :me RETURNING *
    DELETE FROM posts    WHERE id = :id AND author_id = :me RETURNING id

One statement, so the database's row-level atomicity is the only
concurrency guarantee needed. Zero rows back means "doesn't exist" or
"not yours" — the service can't tell which, and the route reports both
as 403.
"""

import uuid
from typing import Optional, Union

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from inkpress.db.models import Post, utcnow
from inkpress.errors import Unauthenticated

IdLike = Union[str, uuid.UUID]


def parse_id(value: IdLike) -> Optional[uuid.UUID]:
    """Parse a resource id; None if it isn't a valid UUID."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


class PostService:
    """Business logic for posts."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Reads (public) ─────────────────────────────────

    async def list_posts(self) -> list[Post]:
        """All posts, newest first."""
        result = await self.db.execute(
            select(Post)
            .options(joinedload(Post.author))
            .order_by(Post.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_post(self, post_id: IdLike) -> Optional[Post]:
        pid = parse_id(post_id)
        if pid is None:
            return None
        result = await self.db.execute(
            select(Post).options(joinedload(Post.author)).where(Post.id == pid)
        )
        return result.scalars().first()

    # ─── Writes ─────────────────────────────────────────

    async def create_post(self, author_id: IdLike, title: str, content: str) -> Post:
        """Insert a post owned by author_id.

        The row stores only the author reference; the author profile is
        loaded afterwards for the response.
        """
        aid = parse_id(author_id)
        if aid is None:
            raise Unauthenticated("Authentication required")

        post = Post(title=title, content=content, author_id=aid)
        self.db.add(post)
        try:
            await self.db.commit()
        except IntegrityError as e:
            # Token subject no longer maps to a user row.
            await self.db.rollback()
            raise Unauthenticated("Authentication required") from e
        await self.db.refresh(post, attribute_names=["author"])
        return post

    async def update_post(
        self, post_id: IdLike, author_id: IdLike, title: str, content: str
    ) -> Optional[Post]:
        """Update title/content iff author_id owns the post.

        Returns None when no row matched (missing or not owned).
        """
        pid, aid = parse_id(post_id), parse_id(author_id)
        if pid is None or aid is None:
            return None

        result = await self.db.execute(
            update(Post)
            .where(Post.id == pid, Post.author_id == aid)
            .values(title=title, content=content, updated_at=utcnow())
            .returning(Post)
        )
        post = result.scalars().first()
        if post is None:
            return None

        await self.db.commit()
        await self.db.refresh(post, attribute_names=["author"])
        return post

    async def delete_post(self, post_id: IdLike, author_id: IdLike) -> bool:
        """Delete iff author_id owns the post. False when no row matched."""
        pid, aid = parse_id(post_id), parse_id(author_id)
        if pid is None or aid is None:
            return False

        result = await self.db.execute(
            delete(Post)
            .where(Post.id == pid, Post.author_id == aid)
            .returning(Post.id)
        )
        deleted = result.scalar_one_or_none()
        await self.db.commit()
        return deleted is not None
