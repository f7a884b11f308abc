"""
Authentication schemas.

This module defines the request identity passed into handlers and services.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserRole(str, Enum):
    """Platform-level user role carried in the access token."""
    ADMIN = "ADMIN"
    WORKSPACE_ADMIN = "WORKSPACE_ADMIN"
    WORKSPACE_MEMBER = "WORKSPACE_MEMBER"


class AuthContext(BaseModel):
    """Identity of the caller, resolved from the bearer token."""

    model_config = ConfigDict(frozen=True)

    user_id: str = Field(..., description="Authenticated user ID")
    role: UserRole = Field(..., description="User role")
    email: Optional[str] = Field(None, description="User email address")
    name: Optional[str] = Field(None, description="User display name")
