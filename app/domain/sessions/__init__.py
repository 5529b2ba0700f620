"""Sessions domain - logged coaching sessions and their exports"""

from .router import router

__all__ = ["router"]
