# Pydantic schemas
from app.schemas.github import GitHubTokenResponse, GitHubUser
from app.schemas.health import LivenessResponse, ReadinessResponse

__all__ = [
    "GitHubTokenResponse",
    "GitHubUser",
    "LivenessResponse",
    "ReadinessResponse",
]
