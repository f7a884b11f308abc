"""
Workspace service.

This module provides business logic for workspaces, member listing and the
invitation lifecycle. Every mutation commits state and its domain events in
one transaction; analytics are captured only after the commit.
"""
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from launchline.core.analytics import (
    INVITATION_SENT_EVENT,
    MEMBER_JOINED_EVENT,
    AnalyticsClient,
)
from launchline.core.config import get_settings
from launchline.core.exceptions import (
    AmbiguousWorkspaceException,
    BaseAPIException,
    InvitationAlreadyConsumedException,
    InvitationDisabledException,
    InvitationEmailInUseException,
    InvitationExpiredException,
    InvitationMembershipInactiveException,
    InvitationNotFoundException,
    InvitationWorkspaceDeactivatedException,
    ValidationException,
    WorkspaceNotFoundException,
)
from launchline.core.logger import get_logger
from launchline.core.metrics import record_invitation
from launchline.core.models import ensure_utc, generate_id, utc_now
from launchline.core.pagination import CursorFieldsConfig, CursorParams, PaginationService
from launchline.core.security import generate_secure_token
from launchline.modules.auth.schemas import AuthContext
from launchline.modules.eventbus.events import (
    WorkspaceMemberInvitedEvent,
    WorkspaceMemberInvitedPayload,
    WorkspaceMemberJoinedEvent,
    WorkspaceMemberJoinedPayload,
)
from launchline.modules.eventbus.outbox import enqueue_event

from .models import (
    Workspace,
    WorkspaceInvite,
    WorkspaceMemberRole,
    WorkspaceMemberStatus,
    WorkspaceMembership,
)
from .schemas import (
    CreateWorkspaceInput,
    CreateWorkspaceInvitationInput,
    CreateWorkspaceResult,
    PaginatedResponse,
    RedeemWorkspaceInvitationInput,
    WorkspaceInvitation,
    WorkspaceMemberResponse,
)

logger = get_logger(__name__)


def generate_invite_token() -> str:
    """128-bit random token, hex encoded."""
    return generate_secure_token(16)


class WorkspaceService:
    """Service class for workspace operations."""

    def __init__(
        self,
        db: AsyncSession,
        analytics: AnalyticsClient,
        now: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.analytics = analytics
        self._now = now
        self.settings = get_settings()
        self.pagination = PaginationService(now=now, default_limit=self.settings.pagination_default_limit)

    async def get_workspace(self, user_id: str) -> Workspace:
        """
        Resolve the single workspace the user actively belongs to.

        Raises:
            WorkspaceNotFoundException: The user has no active membership
            AmbiguousWorkspaceException: The user has more than one
        """
        stmt = (
            select(Workspace)
            .join(WorkspaceMembership, WorkspaceMembership.workspace_id == Workspace.id)
            .where(
                WorkspaceMembership.user_id == user_id,
                WorkspaceMembership.deactivated_at.is_(None),
            )
        )
        result = await self.db.execute(stmt)
        workspaces = result.scalars().all()

        if len(workspaces) != 1:
            logger.error(
                "Expected exactly one workspace for user",
                user_id=user_id,
                workspaces_number=len(workspaces),
            )
            if not workspaces:
                raise WorkspaceNotFoundException(user_id)
            raise AmbiguousWorkspaceException(user_id, len(workspaces))

        return workspaces[0]

    async def list_workspace_members(
        self,
        workspace_id: str,
        params: CursorParams,
    ) -> PaginatedResponse[WorkspaceMemberResponse]:
        """
        List members that have an email, newest first.

        Args:
            workspace_id: Workspace to list
            params: Cursor, limit and sync token from the client

        Returns:
            Page envelope with the next cursor and a fresh sync token
        """
        cursor = self.pagination.create_cursor_filters(
            params,
            CursorFieldsConfig(
                created_at_field=WorkspaceMembership.created_at,
                id_field=WorkspaceMembership.id,
                updated_at_field=WorkspaceMembership.updated_at,
            ),
            max_limit=self.settings.pagination_max_limit,
        )

        stmt = (
            select(WorkspaceMembership, WorkspaceInvite)
            .outerjoin(
                WorkspaceInvite,
                WorkspaceInvite.workspace_membership_id == WorkspaceMembership.id,
            )
            .where(
                WorkspaceMembership.workspace_id == workspace_id,
                WorkspaceMembership.email.is_not(None),
            )
        )
        if cursor.cursor_filter is not None:
            stmt = stmt.where(cursor.cursor_filter)
        if cursor.sync_token_filter is not None:
            stmt = stmt.where(cursor.sync_token_filter)

        stmt = stmt.order_by(
            WorkspaceMembership.created_at.desc(),
            WorkspaceMembership.id.asc(),
        ).limit(cursor.query_limit)

        result = await self.db.execute(stmt)
        members = [self._to_member(membership, invite) for membership, invite in result.all()]

        page = self.pagination.process_pagination_result(
            members,
            cursor.effective_limit,
            id_selector=lambda member: member.id,
            date_selector=lambda member: member.created_at,
        )

        return PaginatedResponse[WorkspaceMemberResponse](
            items=page.paginated_items,
            has_more=page.has_more,
            next_cursor=page.next_cursor,
            sync_token=cursor.new_sync_token,
        )

    async def create_workspace_invitation(
        self,
        auth: AuthContext,
        data: CreateWorkspaceInvitationInput,
    ) -> str:
        """
        Invite a new member into the requester's workspace.

        Creates an INVITED membership with a placeholder user id and the
        invite that redeems it.

        Returns:
            The invitation token
        """
        workspace = await self.get_workspace(auth.user_id)
        now = self._now()
        expires_at = self._resolve_expiry(data.expires_at, now)

        try:
            membership, invite = self._add_invited_membership(
                workspace_id=workspace.id,
                created_by_user_id=auth.user_id,
                role=data.role,
                email=data.email_hint,
                full_name=None,
                expires_at=expires_at,
                now=now,
            )
            await self.db.flush()

            enqueue_event(self.db, self._invited_event(auth.user_id, membership, invite))
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        record_invitation("created")
        logger.info(
            "Workspace invitation created",
            workspace_id=workspace.id,
            invite_id=invite.id,
            invited_user_id=membership.user_id,
            created_by=auth.user_id,
            role=data.role.value,
        )

        self.analytics.capture(
            distinct_id=auth.user_id,
            event=INVITATION_SENT_EVENT,
            properties={
                "userInvited": membership.user_id,
                "workspaceId": workspace.id,
                "role": data.role.value,
                "emailHint": data.email_hint,
            },
        )

        return invite.token

    async def get_workspace_invitation(self, token: str) -> WorkspaceInvitation:
        """
        Validate an invitation token and project it for redemption.

        Checks run in order and the first failure is raised: not found,
        workspace deactivated, membership deactivated, expired, disabled,
        consumed. An invite expiring exactly now is still valid.
        """
        stmt = (
            select(WorkspaceInvite, WorkspaceMembership, Workspace)
            .join(WorkspaceMembership, WorkspaceInvite.workspace_membership_id == WorkspaceMembership.id)
            .join(Workspace, WorkspaceMembership.workspace_id == Workspace.id)
            .where(WorkspaceInvite.token == token)
        )
        result = await self.db.execute(stmt)
        row = result.first()

        if row is None:
            self._reject(InvitationNotFoundException(), "Invitation not found for token")

        invite, membership, workspace = row

        if workspace.deactivated_at is not None:
            self._reject(
                InvitationWorkspaceDeactivatedException(),
                "Invitation's workspace is deactivated",
                workspace_id=workspace.id,
            )

        if membership.deactivated_at is not None:
            self._reject(
                InvitationMembershipInactiveException(),
                "Invitation's workspace membership is inactive",
                membership_id=membership.id,
            )

        expires_at = ensure_utc(invite.expires_at)
        if expires_at < self._now():
            self._reject(
                InvitationExpiredException(),
                "Invitation has expired",
                invite_id=invite.id,
                expires_at=expires_at.isoformat(),
            )

        if invite.disabled_at is not None:
            self._reject(
                InvitationDisabledException(),
                "Invitation has been disabled",
                invite_id=invite.id,
                disabled_at=ensure_utc(invite.disabled_at).isoformat(),
            )

        if invite.consumed_at is not None:
            self._reject(
                InvitationAlreadyConsumedException(),
                "Invitation has already been consumed",
                invite_id=invite.id,
                consumed_at=ensure_utc(invite.consumed_at).isoformat(),
            )

        return WorkspaceInvitation(
            token=invite.token,
            workspace_id=workspace.id,
            workspace_name=workspace.name,
            role=membership.role,
            email_hint=membership.email,
            expires_at=expires_at,
        )

    async def redeem_workspace_invitation(self, data: RedeemWorkspaceInvitationInput) -> None:
        """
        Redeem an invitation and activate its membership.

        The invite row is locked for the transaction so that concurrent
        redemptions of one token serialize; the loser finds ``consumed_at``
        set once it acquires the lock.

        Raises:
            InvitationAlreadyConsumedException: Lost a concurrent redemption
            InvitationEmailInUseException: Another live membership in the
                workspace already owns the effective email
        """
        invitation = await self.get_workspace_invitation(data.token)

        try:
            stmt = (
                select(WorkspaceInvite)
                .where(WorkspaceInvite.token == invitation.token)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            result = await self.db.execute(stmt)
            invite = result.scalar_one_or_none()

            if invite is None:
                self._reject(InvitationNotFoundException(), "Invitation not found for token")

            if invite.consumed_at is not None:
                self._reject(
                    InvitationAlreadyConsumedException(),
                    "Invitation has already been consumed",
                    invite_id=invite.id,
                    consumed_at=ensure_utc(invite.consumed_at).isoformat(),
                )

            now = self._now()
            invite.consumed_at = now

            email = invitation.email_hint or str(data.email)

            conflict_stmt = (
                select(WorkspaceMembership.id)
                .where(
                    WorkspaceMembership.workspace_id == invitation.workspace_id,
                    WorkspaceMembership.email == email,
                    WorkspaceMembership.deactivated_at.is_(None),
                    WorkspaceMembership.status != WorkspaceMemberStatus.INVITED,
                    WorkspaceMembership.id != invite.workspace_membership_id,
                )
                .limit(1)
            )
            conflict = await self.db.execute(conflict_stmt)
            if conflict.scalar_one_or_none() is not None:
                self._reject(
                    InvitationEmailInUseException(email),
                    "Cannot redeem invitation, email already in use",
                    email=email,
                    workspace_id=invitation.workspace_id,
                )

            membership = await self.db.get(
                WorkspaceMembership,
                invite.workspace_membership_id,
                populate_existing=True,
            )
            membership.status = WorkspaceMemberStatus.ACTIVE
            membership.email = email
            if data.full_name:
                membership.full_name = data.full_name

            enqueue_event(
                self.db,
                WorkspaceMemberJoinedEvent(
                    user_id=membership.user_id,
                    payload=WorkspaceMemberJoinedPayload(
                        workspace_id=membership.workspace_id,
                        user_id=membership.user_id,
                        email=email,
                        role=membership.role,
                        full_name=data.full_name,
                        joined_at=now,
                    ),
                ),
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        record_invitation("redeemed")
        logger.info(
            "Workspace invitation redeemed",
            workspace_id=membership.workspace_id,
            membership_id=membership.id,
            user_id=membership.user_id,
        )

        self.analytics.capture(
            distinct_id=membership.user_id,
            event=MEMBER_JOINED_EVENT,
            properties={
                "workspaceId": membership.workspace_id,
                "email": email,
                "fullName": data.full_name,
                "$set": {"workspaceId": membership.workspace_id},
            },
        )

    async def create_workspace(
        self,
        auth: AuthContext,
        data: CreateWorkspaceInput,
    ) -> CreateWorkspaceResult:
        """
        Create a workspace together with an invite for its first admin.

        The admin membership is pinned to ``admin_email``.
        """
        now = self._now()
        expires_at = self._resolve_expiry(data.invite_expires_at, now)

        try:
            workspace = Workspace(id=generate_id(), name=data.name, created_at=now, updated_at=now)
            self.db.add(workspace)

            membership, invite = self._add_invited_membership(
                workspace_id=workspace.id,
                created_by_user_id=auth.user_id,
                role=WorkspaceMemberRole.ADMIN,
                email=str(data.admin_email),
                full_name=data.admin_name,
                expires_at=expires_at,
                now=now,
            )
            await self.db.flush()

            enqueue_event(self.db, self._invited_event(auth.user_id, membership, invite))
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        record_invitation("created")
        logger.info(
            "Workspace created",
            workspace_id=workspace.id,
            invite_id=invite.id,
            created_by=auth.user_id,
        )

        self.analytics.capture(
            distinct_id=auth.user_id,
            event=INVITATION_SENT_EVENT,
            properties={
                "userInvited": membership.user_id,
                "workspaceId": workspace.id,
                "role": WorkspaceMemberRole.ADMIN.value,
                "emailHint": membership.email,
            },
        )

        return CreateWorkspaceResult(
            workspace_id=workspace.id,
            workspace_name=workspace.name,
            invite_token=invite.token,
            admin_email=membership.email,
            invite_expires_at=expires_at,
        )

    async def disable_workspace_invitation(self, auth: AuthContext, invite_id: str) -> WorkspaceInvite:
        """
        Disable an unconsumed invite of the requester's workspace.

        Disabling an already disabled invite is a no-op.
        """
        workspace = await self.get_workspace(auth.user_id)

        try:
            stmt = (
                select(WorkspaceInvite)
                .join(WorkspaceMembership, WorkspaceInvite.workspace_membership_id == WorkspaceMembership.id)
                .where(
                    WorkspaceInvite.id == invite_id,
                    WorkspaceMembership.workspace_id == workspace.id,
                )
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            result = await self.db.execute(stmt)
            invite = result.scalar_one_or_none()

            if invite is None:
                self._reject(
                    InvitationNotFoundException(invite_id),
                    "Invitation not found in workspace",
                    invite_id=invite_id,
                    workspace_id=workspace.id,
                )

            if invite.consumed_at is not None:
                self._reject(
                    InvitationAlreadyConsumedException(),
                    "Cannot disable a consumed invitation",
                    invite_id=invite.id,
                )

            if invite.disabled_at is None:
                invite.disabled_at = self._now()
                await self.db.commit()
                record_invitation("disabled")
                logger.info(
                    "Workspace invitation disabled",
                    invite_id=invite.id,
                    workspace_id=workspace.id,
                    disabled_by=auth.user_id,
                )
        except Exception:
            await self.db.rollback()
            raise

        return invite

    def _resolve_expiry(self, requested: Optional[datetime], now: datetime) -> datetime:
        if requested is None:
            return now + timedelta(days=self.settings.invitation_ttl_days)

        expires_at = ensure_utc(requested)
        if expires_at <= now:
            raise ValidationException(
                "Invitation expiry must be in the future",
                details={"expires_at": expires_at.isoformat()},
            )
        return expires_at

    def _add_invited_membership(
        self,
        workspace_id: str,
        created_by_user_id: str,
        role: WorkspaceMemberRole,
        email: Optional[str],
        full_name: Optional[str],
        expires_at: datetime,
        now: datetime,
    ) -> tuple[WorkspaceMembership, WorkspaceInvite]:
        membership = WorkspaceMembership(
            id=generate_id(),
            workspace_id=workspace_id,
            user_id=generate_id(),
            role=role,
            status=WorkspaceMemberStatus.INVITED,
            email=email,
            full_name=full_name,
            created_at=now,
            updated_at=now,
        )
        invite = WorkspaceInvite(
            id=generate_id(),
            token=generate_invite_token(),
            workspace_membership_id=membership.id,
            created_by_user_id=created_by_user_id,
            expires_at=expires_at,
            created_at=now,
            updated_at=now,
        )
        self.db.add_all([membership, invite])
        return membership, invite

    def _invited_event(
        self,
        created_by_user_id: str,
        membership: WorkspaceMembership,
        invite: WorkspaceInvite,
    ) -> WorkspaceMemberInvitedEvent:
        return WorkspaceMemberInvitedEvent(
            user_id=created_by_user_id,
            payload=WorkspaceMemberInvitedPayload(
                invite_id=invite.id,
                workspace_id=membership.workspace_id,
                user_id=membership.user_id,
                email=membership.email,
                full_name=membership.full_name,
            ),
        )

    def _reject(self, exc: BaseAPIException, message: str, **context) -> None:
        """Log a rejected invitation check and raise it."""
        logger.error(message, error_code=exc.error_code, **context)
        record_invitation(f"rejected_{exc.error_code.lower()}")
        raise exc

    @staticmethod
    def _to_member(
        membership: WorkspaceMembership,
        invite: Optional[WorkspaceInvite],
    ) -> WorkspaceMemberResponse:
        return WorkspaceMemberResponse(
            id=membership.id,
            user_id=membership.user_id,
            status=membership.status,
            role=membership.role,
            email=membership.email,
            full_name=membership.full_name,
            invited_at=ensure_utc(invite.created_at) if invite else None,
            joined_at=ensure_utc(invite.consumed_at) if invite else None,
            deactivated_at=ensure_utc(membership.deactivated_at),
            created_at=ensure_utc(membership.created_at),
        )
