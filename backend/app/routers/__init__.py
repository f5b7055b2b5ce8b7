"""
API Routers / API 路由
"""

from .ask import router as ask_router

__all__ = [
    "ask_router",
]
