"""Community-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CommunityCreate(BaseModel):
    """Schema for creating a new community."""

    slug: str = Field(..., min_length=1, max_length=100, pattern=r"^[a-z0-9][a-z0-9-]*$")
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=2000)


class CommunityUpdate(BaseModel):
    """Schema for editing a community; omitted fields are left unchanged."""

    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=2000)


class CommunityResponse(BaseModel):
    """Schema for community information returned by the API."""

    id: int
    slug: str
    name: str
    description: str | None
    created_by: str | None
    member_count: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
