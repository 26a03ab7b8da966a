"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PostCreate(BaseModel):
    """Schema for creating a new post."""

    community_id: int = Field(..., description="Community the post is submitted to")
    title: str = Field(..., min_length=1, max_length=300)
    body: str | None = Field(None, max_length=40000, description="Markdown content")


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: int
    community_id: int
    author_id: str
    title: str
    body: str | None
    vote_count: int
    comment_count: int
    ai_summary: str | None = None
    ai_summary_generated_at: datetime | None = None
    deleted: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
