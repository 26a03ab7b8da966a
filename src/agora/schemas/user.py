"""User-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    """Public profile of a user."""

    id: str
    username: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
