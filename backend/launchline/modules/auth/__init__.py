"""
Authentication module.

This module resolves the caller's identity from bearer tokens.
"""

from .schemas import AuthContext, UserRole

__all__ = [
    "AuthContext",
    "UserRole",
]
