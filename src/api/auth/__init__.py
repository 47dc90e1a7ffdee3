"""
Auth API package.

Contains the account credential and session routes, mounted at /api/auth.
"""

from src.api.auth.routes import router

__all__ = ["router"]
