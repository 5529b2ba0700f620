"""Mentoring domain - mentor coaching and supervision hours"""

from .router import router

__all__ = ["router"]
