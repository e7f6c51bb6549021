"""API routes."""

from .uploads import router as uploads_router
from .github import router as github_router

__all__ = [
    "uploads_router",
    "github_router",
]
