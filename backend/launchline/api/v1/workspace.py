"""
Workspace API routes.

Routes under ``/workspace`` act on the caller's own workspace; ``/workspaces``
is reserved for platform administrators.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from launchline.core.logger import logger
from launchline.core.pagination import CursorParams
from launchline.modules.auth.dependencies import require_roles
from launchline.modules.auth.schemas import AuthContext, UserRole
from launchline.modules.workspace.dependencies import get_workspace_service
from launchline.modules.workspace.schemas import (
    CreateWorkspaceInput,
    CreateWorkspaceInvitationInput,
    CreateWorkspaceInvitationResponse,
    CreateWorkspaceResult,
    MessageResponse,
    PaginatedResponse,
    WorkspaceMemberResponse,
    WorkspaceResponse,
)
from launchline.modules.workspace.service import WorkspaceService

router = APIRouter(tags=["Workspace"])

require_workspace_admin = require_roles(UserRole.WORKSPACE_ADMIN)
require_platform_admin = require_roles(UserRole.ADMIN)


@router.get("/workspace", response_model=WorkspaceResponse)
async def get_workspace(
    auth: AuthContext = Depends(require_workspace_admin),
    service: WorkspaceService = Depends(get_workspace_service),
):
    """Get the caller's workspace."""
    workspace = await service.get_workspace(auth.user_id)
    return WorkspaceResponse.model_validate(workspace)


@router.get("/workspace/members", response_model=PaginatedResponse[WorkspaceMemberResponse])
async def list_workspace_members(
    cursor: Optional[str] = Query(None, description="Cursor returned by the previous page"),
    limit: Optional[int] = Query(None, ge=0, description="Page size"),
    sync_token: Optional[str] = Query(None, description="Only return members changed since this token"),
    auth: AuthContext = Depends(require_workspace_admin),
    service: WorkspaceService = Depends(get_workspace_service),
):
    """List members of the caller's workspace."""
    workspace = await service.get_workspace(auth.user_id)
    return await service.list_workspace_members(
        workspace.id,
        CursorParams(cursor=cursor, limit=limit, sync_token=sync_token),
    )


@router.post(
    "/workspace/invitations",
    response_model=CreateWorkspaceInvitationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_workspace_invitation(
    data: CreateWorkspaceInvitationInput,
    auth: AuthContext = Depends(require_workspace_admin),
    service: WorkspaceService = Depends(get_workspace_service),
):
    """Invite a member into the caller's workspace."""
    token = await service.create_workspace_invitation(auth, data)
    return CreateWorkspaceInvitationResponse(token=token)


@router.post("/workspace/invitations/{invite_id}/disable", response_model=MessageResponse)
async def disable_workspace_invitation(
    invite_id: str,
    auth: AuthContext = Depends(require_workspace_admin),
    service: WorkspaceService = Depends(get_workspace_service),
):
    """Disable an unconsumed invitation."""
    await service.disable_workspace_invitation(auth, invite_id)
    return MessageResponse(message="Invitation disabled")


@router.post(
    "/workspaces",
    response_model=CreateWorkspaceResult,
    status_code=status.HTTP_201_CREATED,
)
async def create_workspace(
    data: CreateWorkspaceInput,
    auth: AuthContext = Depends(require_platform_admin),
    service: WorkspaceService = Depends(get_workspace_service),
):
    """Create a workspace and invite its first admin."""
    result = await service.create_workspace(auth, data)
    logger.info("Workspace created via API", workspace_id=result.workspace_id, user_id=auth.user_id)
    return result
