"""
Workspace models.

This module defines the database models for workspaces, their memberships
and the invites that create memberships.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from launchline.core.models import BaseModel


class WorkspaceMemberRole(str, Enum):
    """Role of a member inside a workspace."""
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class WorkspaceMemberStatus(str, Enum):
    """Lifecycle status of a workspace membership."""
    INVITED = "INVITED"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    EXPIRED = "EXPIRED"
    REVOKED = "REVOKED"


class Workspace(BaseModel):
    """A tenant grouping users."""

    __tablename__ = "workspaces"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Workspace name"
    )

    deactivated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the workspace was deactivated"
    )

    memberships = relationship(
        "WorkspaceMembership",
        back_populates="workspace",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Workspace(id={self.id}, name='{self.name}')>"


class WorkspaceMembership(BaseModel):
    """A user's relation to a workspace, created in INVITED state by an invite."""

    __tablename__ = "workspace_memberships"

    workspace_id: Mapped[str] = mapped_column(
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Owning workspace"
    )

    user_id: Mapped[str] = mapped_column(
        String(36),
        nullable=False,
        index=True,
        comment="Member user ID (placeholder until the invite is redeemed)"
    )

    role: Mapped[WorkspaceMemberRole] = mapped_column(
        String(20),
        default=WorkspaceMemberRole.MEMBER,
        nullable=False,
        comment="Role inside the workspace"
    )

    status: Mapped[WorkspaceMemberStatus] = mapped_column(
        String(20),
        default=WorkspaceMemberStatus.INVITED,
        nullable=False,
        comment="Membership status"
    )

    email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        index=True,
        comment="Member email, pinned at invite time when an email hint is given"
    )

    full_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        comment="Member display name"
    )

    deactivated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the membership was deactivated"
    )

    workspace = relationship("Workspace", back_populates="memberships")
    invite = relationship(
        "WorkspaceInvite",
        back_populates="membership",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("workspace_id", "user_id", name="uq_workspace_membership_user"),
    )

    def __repr__(self) -> str:
        return (
            f"<WorkspaceMembership(id={self.id}, workspace_id={self.workspace_id}, "
            f"user_id={self.user_id}, status={self.status})>"
        )


class WorkspaceInvite(BaseModel):
    """Single-use redemption token bound to one membership."""

    __tablename__ = "workspace_invites"

    token: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
        comment="Opaque bearer token (128-bit, hex encoded)"
    )

    workspace_membership_id: Mapped[str] = mapped_column(
        ForeignKey("workspace_memberships.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        comment="Membership created for this invite"
    )

    created_by_user_id: Mapped[str] = mapped_column(
        String(36),
        nullable=False,
        comment="User who issued the invite"
    )

    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
        comment="Invite expiry"
    )

    consumed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True,
        comment="When the invite was redeemed"
    )

    disabled_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the invite was disabled"
    )

    membership = relationship("WorkspaceMembership", back_populates="invite")

    def __repr__(self) -> str:
        return f"<WorkspaceInvite(id={self.id}, membership_id={self.workspace_membership_id})>"
