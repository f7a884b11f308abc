"""
Workspace schemas.

This module defines Pydantic models for workspace requests and responses.
"""
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from .models import WorkspaceMemberRole, WorkspaceMemberStatus

T = TypeVar("T")


class WorkspaceResponse(BaseModel):
    """Schema for workspace response."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Workspace ID")
    name: str = Field(..., description="Workspace name")
    deactivated_at: Optional[datetime] = Field(None, description="Deactivation timestamp")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class WorkspaceMemberResponse(BaseModel):
    """Membership projection joined with its invite."""

    id: str = Field(..., description="Membership ID")
    user_id: str = Field(..., description="User ID")
    status: WorkspaceMemberStatus = Field(..., description="Membership status")
    role: WorkspaceMemberRole = Field(..., description="Role inside the workspace")
    email: Optional[str] = Field(None, description="Member email")
    full_name: Optional[str] = Field(None, description="Member display name")
    invited_at: Optional[datetime] = Field(None, description="When the invite was created")
    joined_at: Optional[datetime] = Field(None, description="When the invite was redeemed")
    deactivated_at: Optional[datetime] = Field(None, description="Deactivation timestamp")
    created_at: datetime = Field(..., description="Creation timestamp")


class PaginatedResponse(BaseModel, Generic[T]):
    """Envelope for cursor paginated listings."""

    items: List[T] = Field(..., description="Page items")
    has_more: bool = Field(..., description="Whether another page exists")
    next_cursor: str = Field(..., description="Cursor for the next page, empty when none")
    sync_token: str = Field(..., description="Watermark for incremental sync")


class CreateWorkspaceInvitationInput(BaseModel):
    """Schema for creating a workspace invitation."""

    role: WorkspaceMemberRole = Field(default=WorkspaceMemberRole.MEMBER, description="Role to assign")
    email_hint: Optional[EmailStr] = Field(None, description="Email the invite is pinned to")
    expires_at: Optional[datetime] = Field(None, description="Invitation expiry, defaults to two days")


class CreateWorkspaceInvitationResponse(BaseModel):
    token: str = Field(..., description="Invitation token")


class WorkspaceInvitation(BaseModel):
    """Redemption-ready invitation projection."""

    token: str = Field(..., description="Invitation token")
    workspace_id: str = Field(..., description="Workspace ID")
    workspace_name: str = Field(..., description="Workspace name")
    role: WorkspaceMemberRole = Field(..., description="Role granted on redemption")
    email_hint: Optional[str] = Field(None, description="Email the invite is pinned to")
    expires_at: datetime = Field(..., description="Invitation expiry")


class RedeemWorkspaceInvitationInput(BaseModel):
    """Schema for redeeming an invitation."""

    token: str = Field(..., min_length=1, description="Invitation token")
    email: EmailStr = Field(..., description="Redeemer email, ignored when the invite is pinned")
    full_name: Optional[str] = Field(None, max_length=255, description="Redeemer display name")

    @field_validator("full_name")
    @classmethod
    def strip_full_name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip() or None


class RedeemWorkspaceInvitationRequest(BaseModel):
    """Request body for the redeem endpoint; the token comes from the path."""

    email: EmailStr = Field(..., description="Redeemer email")
    full_name: Optional[str] = Field(None, max_length=255, description="Redeemer display name")


class CreateWorkspaceInput(BaseModel):
    """Schema for platform admins creating a workspace."""

    name: str = Field(..., min_length=1, max_length=255, description="Workspace name")
    admin_email: EmailStr = Field(..., description="Email of the first workspace admin")
    admin_name: Optional[str] = Field(None, max_length=255, description="Display name of the first admin")
    invite_expires_at: Optional[datetime] = Field(None, description="Admin invite expiry")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Workspace name cannot be empty")
        return v


class CreateWorkspaceResult(BaseModel):
    workspace_id: str = Field(..., description="Workspace ID")
    workspace_name: str = Field(..., description="Workspace name")
    invite_token: str = Field(..., description="Invitation token for the first admin")
    admin_email: str = Field(..., description="Email the admin invite is pinned to")
    invite_expires_at: datetime = Field(..., description="Admin invite expiry")


class MessageResponse(BaseModel):
    """Schema for simple message responses."""

    message: str = Field(..., description="Response message")
    success: bool = Field(default=True, description="Whether operation was successful")


class SuccessResponse(BaseModel):
    success: bool = Field(default=True, description="Whether operation was successful")
