# Routes package __init__.py - re-exports routers for main.py convenience
from .auth import router as auth_router
from .cards import router as cards_router
from .review import router as review_router
from .tags import router as tags_router

__all__ = ['auth_router', 'cards_router', 'review_router', 'tags_router']
