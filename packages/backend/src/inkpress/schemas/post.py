"""Pydantic schemas for posts.

Learn: Pydantic v2 models validate request/response data. Separate
"Input" schemas from "Read" schemas for clean APIs. PostRead nests the
author's public profile — never the password hash.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from inkpress.schemas.user import UserRead


class PostInput(BaseModel):
    """Body for create and update. Both fields required, non-blank."""

    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)

    model_config = {"strict": True}

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class PostRead(BaseModel):
    id: uuid.UUID
    title: str
    content: str
    author: UserRead
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PostDeleted(BaseModel):
    message: str = "Post deleted"
