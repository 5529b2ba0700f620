"""Clients domain - a coach's client records"""

from .router import router

__all__ = ["router"]
