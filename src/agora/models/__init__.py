"""SQLAlchemy models for the Agora application."""

from .comment import Comment
from .community import Community, CommunityContributor
from .post import Post
from .user import User
from .vote import VOTE_TARGET_COMMENT, VOTE_TARGET_POST, Vote

__all__ = [
    "Comment",
    "Community", "CommunityContributor",
    "Post",
    "User",
    "Vote", "VOTE_TARGET_COMMENT", "VOTE_TARGET_POST",
]
