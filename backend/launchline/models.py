"""
Import every ORM model so ``Base.metadata`` is complete.

Used by Alembic autogeneration, ``create_tables`` and the test suite.
"""
from launchline.core.models import Base
from launchline.modules.eventbus.models import OutboxEvent
from launchline.modules.workspace.models import (
    Workspace,
    WorkspaceInvite,
    WorkspaceMembership,
)

__all__ = [
    "Base",
    "OutboxEvent",
    "Workspace",
    "WorkspaceInvite",
    "WorkspaceMembership",
]
