"""
API route handlers for the Realty Portal API.
"""

from .auth import router as auth_router
from .properties import router as properties_router
from .admin import router as admin_router
from .agent import router as agent_router

__all__ = ["auth_router", "properties_router", "admin_router", "agent_router"]
