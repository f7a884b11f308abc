"""
Event bus module.

Domain events, the transactional outbox and the Redis publisher.
"""

from .events import (
    DomainEvent,
    WorkspaceMemberInvitedEvent,
    WorkspaceMemberJoinedEvent,
    parse_event,
    topic_for,
)

__all__ = [
    "DomainEvent",
    "WorkspaceMemberInvitedEvent",
    "WorkspaceMemberJoinedEvent",
    "parse_event",
    "topic_for",
]
