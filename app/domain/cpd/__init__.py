"""CPD domain - continuing professional development entries"""

from .router import router

__all__ = ["router"]
