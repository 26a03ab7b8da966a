"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .comment import CommentCreate, CommentResponse, CommentUpdate
from .community import CommunityCreate, CommunityResponse, CommunityUpdate
from .post import PostCreate, PostResponse
from .user import UserResponse
from .vote import VoteCountResponse, VoteCreate, VoteResponse

__all__ = [
    "CommentCreate", "CommentResponse", "CommentUpdate",
    "CommunityCreate", "CommunityResponse", "CommunityUpdate",
    "PostCreate", "PostResponse",
    "UserResponse",
    "VoteCountResponse", "VoteCreate", "VoteResponse",
]
