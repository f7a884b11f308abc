"""
Cursor-based (keyset) pagination.

A page request carries an opaque ``cursor`` (base64 of ``"<iso>_<id>"``) and
optionally a ``sync_token`` (base64 of an ISO timestamp). Listing queries
order by ``created_at DESC, id ASC``, fetch ``limit + 1`` rows and hand the
rows back to :meth:`PaginationService.process_pagination_result`, which
trims the extra row and builds the next cursor.

Malformed cursors and sync tokens never raise: they are logged and the
corresponding filter is dropped, so a broken cursor yields the first page.
"""
import base64
import binascii
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Generic, List, Optional, Sequence, TypeVar

from sqlalchemy import and_, or_
from sqlalchemy.sql.elements import ColumnElement

from launchline.core.logger import get_logger
from launchline.core.models import ensure_utc

logger = get_logger(__name__)

T = TypeVar("T")

CURSOR_DELIMITER = "_"
DEFAULT_LIMIT = 20
DEFAULT_MAX_LIMIT = 100


class InvalidCursorError(ValueError):
    """Raised internally when a cursor or sync token cannot be decoded."""


@dataclass
class CursorParams:
    """Client supplied pagination parameters."""
    cursor: Optional[str] = None
    limit: Optional[int] = None
    sync_token: Optional[str] = None


@dataclass
class CursorFieldsConfig:
    """Columns the cursor and sync token are evaluated against."""
    created_at_field: Any
    id_field: Any
    updated_at_field: Optional[Any] = None


@dataclass
class CursorResult:
    """Predicates and limits derived from a page request."""
    effective_limit: int
    query_limit: int
    new_sync_token: str
    cursor_filter: Optional[ColumnElement] = None
    sync_token_filter: Optional[ColumnElement] = None


@dataclass
class PaginationResult(Generic[T]):
    """A fetched page trimmed to the requested size."""
    paginated_items: List[T]
    has_more: bool
    next_cursor: str


def format_timestamp(value: datetime) -> str:
    """Render a datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    value = ensure_utc(value)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        return ensure_utc(datetime.fromisoformat(value))
    except OverflowError as e:
        # Offsets can push edge dates outside the datetime range
        raise ValueError(f"timestamp out of range: {value!r}") from e


def b64encode_text(value: str) -> str:
    return base64.b64encode(value.encode("utf-8")).decode("ascii")


def b64decode_text(value: str) -> str:
    """Decode a base64 token to text, raising InvalidCursorError on garbage."""
    if not isinstance(value, str):
        raise InvalidCursorError(f"token must be a string, got {type(value).__name__}")
    try:
        return base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, ValueError) as e:
        raise InvalidCursorError(str(e)) from e


def decode_cursor(cursor: str) -> tuple[datetime, str]:
    """Split a cursor into its ``(created_at, id)`` pair."""
    decoded = b64decode_text(cursor)
    # ISO timestamps never contain the delimiter; everything after it is the id
    timestamp, delimiter, item_id = decoded.partition(CURSOR_DELIMITER)
    if not delimiter or not item_id:
        raise InvalidCursorError(f"cursor is missing the '{CURSOR_DELIMITER}' delimiter")
    if not item_id.isprintable():
        raise InvalidCursorError("cursor id contains control characters")
    try:
        return parse_timestamp(timestamp), item_id
    except ValueError as e:
        raise InvalidCursorError(f"invalid cursor timestamp: {timestamp!r}") from e


def decode_sync_token(sync_token: str) -> datetime:
    decoded = b64decode_text(sync_token)
    try:
        return parse_timestamp(decoded)
    except ValueError as e:
        raise InvalidCursorError(f"invalid sync token timestamp: {decoded!r}") from e


class PaginationService:
    """Builds keyset pagination filters and page envelopes."""

    def __init__(
        self,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        default_limit: int = DEFAULT_LIMIT,
    ):
        self._now = now
        self.default_limit = default_limit

    def create_cursor_filters(
        self,
        params: CursorParams,
        config: CursorFieldsConfig,
        max_limit: int = DEFAULT_MAX_LIMIT,
    ) -> CursorResult:
        """
        Translate a page request into query predicates and limits.

        Args:
            params: Cursor, limit and sync token from the client
            config: Columns to filter on
            max_limit: Upper bound applied to the requested limit

        Returns:
            CursorResult with optional cursor / sync token filters
        """
        limit = params.limit if params.limit is not None else self.default_limit
        effective_limit = min(limit, max_limit)

        result = CursorResult(
            effective_limit=effective_limit,
            query_limit=effective_limit + 1,
            new_sync_token=b64encode_text(format_timestamp(self._now())),
        )

        if params.cursor:
            try:
                cursor_date, cursor_id = decode_cursor(params.cursor)
                result.cursor_filter = or_(
                    config.created_at_field < cursor_date,
                    and_(
                        config.created_at_field == cursor_date,
                        config.id_field > cursor_id,
                    ),
                )
            except InvalidCursorError as e:
                logger.error("Invalid cursor", cursor=params.cursor, error=str(e))

        if params.sync_token and config.updated_at_field is not None:
            try:
                last_sync_time = decode_sync_token(params.sync_token)
                result.sync_token_filter = or_(
                    config.created_at_field > last_sync_time,
                    config.updated_at_field > last_sync_time,
                )
            except InvalidCursorError as e:
                logger.error("Invalid sync token", sync_token=params.sync_token, error=str(e))

        return result

    def create_next_cursor(
        self,
        last_item_id: Optional[str] = None,
        last_item_created_at: Optional[datetime] = None,
    ) -> str:
        if not last_item_id or not last_item_created_at:
            return ""

        return b64encode_text(
            f"{format_timestamp(last_item_created_at)}{CURSOR_DELIMITER}{last_item_id}"
        )

    def has_more_items(self, items_count: int, effective_limit: int) -> bool:
        return items_count > effective_limit

    def get_paginated_items(self, items: Sequence[T], effective_limit: int) -> Sequence[T]:
        if self.has_more_items(len(items), effective_limit):
            return items[:effective_limit]
        return items

    def process_pagination_result(
        self,
        items: Sequence[T],
        effective_limit: int,
        id_selector: Callable[[T], Optional[str]],
        date_selector: Callable[[T], Optional[datetime]],
    ) -> PaginationResult[T]:
        """
        Trim an over-fetched page and derive the next cursor.

        The cursor points at the last item of the trimmed page, not at the
        extra row fetched to detect ``has_more``.
        """
        has_more = self.has_more_items(len(items), effective_limit)
        paginated_items = list(self.get_paginated_items(items, effective_limit))

        next_cursor = ""
        if paginated_items:
            last_item = paginated_items[-1]
            next_cursor = self.create_next_cursor(id_selector(last_item), date_selector(last_item))

        return PaginationResult(
            paginated_items=paginated_items,
            has_more=has_more,
            next_cursor=next_cursor,
        )
