"""
Public invitation routes.

These endpoints are unauthenticated: possession of the token is the
credential, so both are rate limited per client.
"""
from fastapi import APIRouter, Depends

from launchline.core.config import settings
from launchline.core.rate_limiting import rate_limit
from launchline.modules.workspace.dependencies import get_workspace_service
from launchline.modules.workspace.schemas import (
    RedeemWorkspaceInvitationInput,
    RedeemWorkspaceInvitationRequest,
    SuccessResponse,
    WorkspaceInvitation,
)
from launchline.modules.workspace.service import WorkspaceService

router = APIRouter(
    prefix="/invitations",
    tags=["Invitations"],
    dependencies=[Depends(rate_limit("invitations", settings.invitation_rate_limit_per_minute))],
)


@router.get("/{token}", response_model=WorkspaceInvitation)
async def get_workspace_invitation(
    token: str,
    service: WorkspaceService = Depends(get_workspace_service),
):
    """Validate an invitation token."""
    return await service.get_workspace_invitation(token)


@router.post("/{token}/redeem", response_model=SuccessResponse)
async def redeem_workspace_invitation(
    token: str,
    data: RedeemWorkspaceInvitationRequest,
    service: WorkspaceService = Depends(get_workspace_service),
):
    """Redeem an invitation and join its workspace."""
    await service.redeem_workspace_invitation(
        RedeemWorkspaceInvitationInput(token=token, email=data.email, full_name=data.full_name)
    )
    return SuccessResponse(success=True)
