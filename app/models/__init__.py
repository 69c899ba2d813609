# ORM models
from app.models.base import Base
from app.models.github_user_token import GitHubUserToken
from app.models.session import Session
from app.models.user import User

__all__ = [
    "Base",
    "GitHubUserToken",
    "Session",
    "User",
]
