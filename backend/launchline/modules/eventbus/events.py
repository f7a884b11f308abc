"""
Domain events.

Events form a tagged union discriminated by ``event_type``; decoding is a
single pydantic validation against that union.
"""
import uuid
from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from launchline.core.logger import get_logger
from launchline.core.models import utc_now
from launchline.modules.workspace.models import WorkspaceMemberRole

logger = get_logger(__name__)


class Domain(str, Enum):
    AUTH = "AUTH"
    WORKSPACE = "WORKSPACE"


class EventType(str, Enum):
    WORKSPACE_MEMBER_INVITED = "WORKSPACE_MEMBER_INVITED"
    WORKSPACE_MEMBER_JOINED = "WORKSPACE_MEMBER_JOINED"


class EventVersion(str, Enum):
    V1 = "V1"


class EventPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    emitted_at: datetime = Field(default_factory=utc_now, description="When the event was produced")


class WorkspaceMemberInvitedPayload(EventPayload):
    invite_id: str
    workspace_id: str
    user_id: str = Field(..., description="Placeholder user ID of the invited membership")
    email: Optional[str] = None
    full_name: Optional[str] = None


class WorkspaceMemberJoinedPayload(EventPayload):
    workspace_id: str
    user_id: str
    email: str
    role: WorkspaceMemberRole
    full_name: Optional[str] = None
    joined_at: datetime


class DomainEventBase(BaseModel):
    """Envelope shared by every domain event."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    version: EventVersion = EventVersion.V1
    origin: Domain
    user_id: Optional[str] = Field(None, description="User who caused the event")


class WorkspaceMemberInvitedEvent(DomainEventBase):
    event_type: Literal[EventType.WORKSPACE_MEMBER_INVITED] = EventType.WORKSPACE_MEMBER_INVITED
    origin: Domain = Domain.WORKSPACE
    payload: WorkspaceMemberInvitedPayload


class WorkspaceMemberJoinedEvent(DomainEventBase):
    event_type: Literal[EventType.WORKSPACE_MEMBER_JOINED] = EventType.WORKSPACE_MEMBER_JOINED
    origin: Domain = Domain.WORKSPACE
    payload: WorkspaceMemberJoinedPayload


DomainEvent = Annotated[
    Union[WorkspaceMemberInvitedEvent, WorkspaceMemberJoinedEvent],
    Field(discriminator="event_type"),
]

_domain_event_adapter: TypeAdapter[DomainEvent] = TypeAdapter(DomainEvent)


def parse_event(raw: Union[str, bytes]) -> Optional[DomainEvent]:
    """
    Decode a serialized domain event.

    Returns None for malformed JSON, an unknown ``event_type`` or a payload
    that fails validation.
    """
    try:
        return _domain_event_adapter.validate_json(raw)
    except ValidationError as e:
        logger.debug("Discarding undecodable event", errors=e.error_count())
        return None


def topic_for(event: DomainEvent, prefix: str) -> str:
    """Build the bus channel name for ``event``."""
    return ".".join([
        prefix,
        event.origin.value,
        event.version.value,
        event.event_type.value,
        event.user_id or "system",
    ])
