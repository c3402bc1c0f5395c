"""
User API package.

Registration, confirmation and login routes mounted under /api/users.
"""

from src.api.users.routes import router

__all__ = ["router"]
