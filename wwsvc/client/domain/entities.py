"""Domain layer: session state machine and pagination cursor.

A client instance owns exactly one Session. Sessions are not synchronized;
callers must not drive one client from several threads or tasks at once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from wwsvc.common.config import Config
from wwsvc.common.exceptions import SessionStateError
from wwsvc.common.models import Credentials


class SessionStatus(str, Enum):
    UNREGISTERED = "unregistered"
    REGISTERED = "registered"
    DEREGISTERED = "deregistered"


@dataclass
class Cursor:
    """Pagination cursor. The server replaces the id on every page."""

    max_lines: int
    cursor_id: str = field(default_factory=lambda: Config().CURSOR_CREATE)
    acknowledged: bool = False

    @property
    def closed(self) -> bool:
        return self.cursor_id == Config().CURSOR_CLOSED


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable view of a Session taken at the start of one call."""

    status: SessionStatus
    credentials: Credentials | None
    request_id: int
    result_max_lines: int
    cursor_id: str | None = None
    cursor_max_lines: int | None = None

    @property
    def ticket(self) -> str | None:
        return self.credentials.service_pass if self.credentials else None

    @property
    def max_lines(self) -> int:
        if self.cursor_max_lines is not None:
            return self.cursor_max_lines
        return self.result_max_lines

    def require_registered(self, operation: str) -> Credentials:
        if self.status is not SessionStatus.REGISTERED or self.credentials is None:
            msg = f"Cannot {operation}: client is {self.status.value}"
            raise SessionStateError(msg, self.status.value, operation)
        return self.credentials


class Session:
    """Mutable authentication state: Unregistered -> Registered -> Deregistered."""

    def __init__(self, result_max_lines: int) -> None:
        self._status = SessionStatus.UNREGISTERED
        self._credentials: Credentials | None = None
        self.request_id = 0
        self.last_timestamp: str | None = None
        self.result_max_lines = result_max_lines
        self.cursor: Cursor | None = None
        self.cursor_suspended = False

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def credentials(self) -> Credentials | None:
        return self._credentials

    def snapshot(self) -> SessionSnapshot:
        cursor_id = None
        cursor_max_lines = None
        if self.cursor is not None and not self.cursor_suspended and not self.cursor.closed:
            cursor_id = self.cursor.cursor_id
            cursor_max_lines = self.cursor.max_lines
        return SessionSnapshot(
            status=self._status,
            credentials=self._credentials,
            request_id=self.request_id,
            result_max_lines=self.result_max_lines,
            cursor_id=cursor_id,
            cursor_max_lines=cursor_max_lines,
        )

    def require_unregistered(self, operation: str) -> None:
        if self._status is not SessionStatus.UNREGISTERED:
            msg = f"Cannot {operation}: client is already {self._status.value}"
            raise SessionStateError(msg, self._status.value, operation)

    def mark_registered(self, credentials: Credentials) -> None:
        self.require_unregistered("register")
        self._credentials = credentials
        self._status = SessionStatus.REGISTERED

    def mark_deregistered(self) -> None:
        if self._status is not SessionStatus.REGISTERED:
            msg = f"Cannot deregister: client is {self._status.value}"
            raise SessionStateError(msg, self._status.value, "deregister")
        self._credentials = None
        self.cursor = None
        self._status = SessionStatus.DEREGISTERED

    def issue_request_id(self) -> int:
        self.request_id += 1
        return self.request_id

    def update_cursor(self, cursor_id: str | None) -> None:
        """Record the cursor id returned with a completed response."""
        if self.cursor_suspended or self.cursor is None:
            return
        self.cursor.acknowledged = cursor_id is not None
        if cursor_id is not None and not self.cursor.closed:
            self.cursor.cursor_id = cursor_id
