"""
Repository pattern implementation for data access layer.
"""

from .base import BaseRepository
from .post_repository import PostRepository
from .report_repository import ReportRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "PostRepository",
    "ReportRepository",
    "UserRepository",
]
