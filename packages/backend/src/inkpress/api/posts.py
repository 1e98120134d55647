"""Post API routes.

Learn: Each route goes received → validated → authorized → executed →
responded:

- validated: post_input() checks the JSON body. It is declared BEFORE
  the identity dependency, and FastAPI resolves dependencies in
  declaration order, so a missing title/content is a 400 whatever the
  Authorization header says — and never touches the database.
- authorized: reads are public; create needs any valid identity; for
  update/delete the owner check is folded into the service's single
  filtered statement.
- responded: a filtered update/delete that matched nothing is a 403,
  whether the post is missing or just not yours.
"""

import structlog
from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from inkpress.auth.dependencies import CurrentIdentity, get_current_identity
from inkpress.db.engine import get_db
from inkpress.errors import BadRequest, NotAuthorized, NotFound
from inkpress.schemas.post import PostDeleted, PostInput, PostRead
from inkpress.services.post_service import PostService

logger = structlog.get_logger()

router = APIRouter(prefix="/posts")

FIELDS_REQUIRED = "Title and content required"


def _svc(db: AsyncSession = Depends(get_db)) -> PostService:
    return PostService(db)


async def post_input(request: Request) -> PostInput:
    """Parse and validate {title, content} from the request body."""
    try:
        payload = await request.json()
    except ValueError as e:
        raise BadRequest(FIELDS_REQUIRED) from e
    if not isinstance(payload, dict):
        raise BadRequest(FIELDS_REQUIRED)
    try:
        return PostInput.model_validate(payload)
    except ValidationError as e:
        raise BadRequest(FIELDS_REQUIRED) from e


# ─── Public reads ───────────────────────────────────────

@router.get("", response_model=list[PostRead])
async def list_posts(svc: PostService = Depends(_svc)):
    """All posts, newest first."""
    return await svc.list_posts()


@router.get("/{post_id}", response_model=PostRead)
async def get_post(post_id: str, svc: PostService = Depends(_svc)):
    post = await svc.get_post(post_id)
    if not post:
        raise NotFound("Post not found")
    return post


# ─── Authenticated writes ───────────────────────────────

@router.post("", response_model=PostRead, status_code=201)
async def create_post(
    body: PostInput = Depends(post_input),
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: PostService = Depends(_svc),
):
    """Create a post authored by the caller."""
    post = await svc.create_post(identity.user_id, body.title, body.content)
    logger.info("posts.created", post_id=str(post.id))
    return post


@router.put("/{post_id}", response_model=PostRead)
async def update_post(
    post_id: str,
    body: PostInput = Depends(post_input),
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: PostService = Depends(_svc),
):
    """Replace title/content. Only the author may do this."""
    post = await svc.update_post(post_id, identity.user_id, body.title, body.content)
    if not post:
        logger.info("posts.update_denied", post_id=post_id)
        raise NotAuthorized("Not authorized to update this post")
    logger.info("posts.updated", post_id=post_id)
    return post


@router.delete("/{post_id}", response_model=PostDeleted)
async def delete_post(
    post_id: str,
    identity: CurrentIdentity = Depends(get_current_identity),
    svc: PostService = Depends(_svc),
):
    """Delete a post. Only the author may do this."""
    if not await svc.delete_post(post_id, identity.user_id):
        logger.info("posts.delete_denied", post_id=post_id)
        raise NotAuthorized("Not authorized to delete this post")
    logger.info("posts.deleted", post_id=post_id)
    return PostDeleted()
