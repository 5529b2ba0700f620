"""Admin domain - user management, dashboard stats and subscriptions"""

from .router import router

__all__ = ["router"]
