"""Auth API — signup, login, current user.

Learn: Routes for user authentication:
- POST /auth/signup → create an account, returns {user, token} (auto-login)
- POST /auth/login → email/password → {user, token}
- GET /auth/me → current user's public profile

Unknown email and wrong password get the same 401 so the endpoint
doesn't reveal which emails are registered.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from inkpress.auth.dependencies import (
    AUTH_FAILED,
    CurrentIdentity,
    get_current_identity,
    get_token_codec,
)
from inkpress.auth.jwt import TokenCodec
from inkpress.db.engine import get_db
from inkpress.errors import Unauthenticated
from inkpress.schemas.user import AuthResponse, LoginRequest, SignupRequest, UserRead
from inkpress.services.user_service import UserService

router = APIRouter(prefix="/auth")


def _svc(request: Request, db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db, bcrypt_rounds=request.app.state.settings.bcrypt_rounds)


@router.post("/signup", response_model=AuthResponse, status_code=201)
async def signup(
    body: SignupRequest,
    svc: UserService = Depends(_svc),
    codec: TokenCodec = Depends(get_token_codec),
):
    """Create a new account and log it in."""
    user = await svc.signup(body.username, body.email, body.password)
    return AuthResponse(user=UserRead.model_validate(user), token=codec.issue(str(user.id)))


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    svc: UserService = Depends(_svc),
    codec: TokenCodec = Depends(get_token_codec),
):
    """Login with email and password → token."""
    user = await svc.authenticate(body.email, body.password)
    if not user:
        raise Unauthenticated("Invalid credentials")
    return AuthResponse(user=UserRead.model_validate(user), token=codec.issue(str(user.id)))


@router.get("/me", response_model=UserRead)
async def get_me(
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: UserService = Depends(_svc),
):
    """Get the current authenticated user's profile."""
    user = await svc.get_user(identity.user_id)
    if not user:
        # Valid signature, but the account is gone.
        raise Unauthenticated(AUTH_FAILED)
    return user
