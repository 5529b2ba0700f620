"""Admin email domain - scheduled announcements and reminder campaigns"""

from .router import router

__all__ = ["router"]
