"""User service — signup and credential checks."""

from functools import lru_cache
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from inkpress.auth.password import DEFAULT_ROUNDS, hash_password, verify_password
from inkpress.db.models import User
from inkpress.errors import Conflict
from inkpress.services.post_service import IdLike, parse_id

logger = structlog.get_logger()


@lru_cache
def _dummy_hash(rounds: int) -> str:
    """A throwaway hash at the configured cost, checked when no user matches."""
    return hash_password("inkpress-no-such-user", rounds=rounds)


class UserService:
    """Business logic for user accounts."""

    def __init__(self, db: AsyncSession, bcrypt_rounds: int = DEFAULT_ROUNDS):
        self.db = db
        self.bcrypt_rounds = bcrypt_rounds

    async def signup(self, username: str, email: str, password: str) -> User:
        """Create a user. Raises Conflict if username or email is taken.

        Learn: No "SELECT then INSERT" — the unique constraints on
        username/email decide, so two concurrent signups for the same
        email can't both succeed.
        """
        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password, rounds=self.bcrypt_rounds),
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise Conflict("User already exists") from e
        logger.info("users.signup", user_id=str(user.id))
        return user

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """Return the user if email/password match, else None.

        Learn: An unknown email still pays for one bcrypt check, so
        response time doesn't reveal which emails are registered.
        """
        result = await self.db.execute(select(User).where(User.email == email))
        user = result.scalars().first()
        if user is None:
            verify_password(password, _dummy_hash(self.bcrypt_rounds))
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    async def get_user(self, user_id: IdLike) -> Optional[User]:
        uid = parse_id(user_id)
        if uid is None:
            return None
        return await self.db.get(User, uid)
