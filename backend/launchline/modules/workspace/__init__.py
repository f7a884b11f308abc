"""
Workspace module.

This module handles workspaces, memberships and the invitation lifecycle.
"""

from .models import (
    Workspace,
    WorkspaceInvite,
    WorkspaceMemberRole,
    WorkspaceMemberStatus,
    WorkspaceMembership,
)

__all__ = [
    "Workspace",
    "WorkspaceInvite",
    "WorkspaceMemberRole",
    "WorkspaceMemberStatus",
    "WorkspaceMembership",
]
