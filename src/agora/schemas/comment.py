"""Comment-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CommentCreate(BaseModel):
    """Schema for creating a comment or a reply."""

    post_id: int
    body: str = Field(..., min_length=1, max_length=10000)
    parent_comment_id: int | None = Field(None, description="Comment being replied to")


class CommentUpdate(BaseModel):
    """Schema for editing the body of a comment."""

    body: str = Field(..., min_length=1, max_length=10000)


class CommentResponse(BaseModel):
    """Schema for comment information returned by the API."""

    id: int
    post_id: int
    author_id: str
    parent_comment_id: int | None
    body: str
    vote_count: int
    created_at: datetime
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
