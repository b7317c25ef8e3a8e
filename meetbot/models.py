"""
Data models for a single bot session.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List, Iterator
from enum import Enum


class MeetingProvider(str, Enum):
    """Supported meeting providers."""
    GOOGLE = "google"
    MICROSOFT = "microsoft"
    ZOOM = "zoom"
    TELEMOST = "telemost"


class BotStatus(str, Enum):
    """Lifecycle tokens pushed onto a session's status history."""
    PROCESSING = "processing"
    JOINED = "joined"
    FINISHED = "finished"
    FAILED = "failed"


TERMINAL_STATUSES = (BotStatus.FINISHED, BotStatus.FAILED)


class StatusHistory:
    """
    Append-mostly record of a session's lifecycle.

    Tokens are only ever appended. The one allowed edit is turning a
    trailing ``finished`` into ``failed`` when the upload afterwards fails.
    """

    def __init__(self, initial: Optional[List[BotStatus]] = None):
        self._tokens: List[BotStatus] = list(initial or [])

    def push(self, status: BotStatus) -> None:
        if self.is_terminal:
            raise ValueError(f"Cannot push {status.value} after terminal status {self.last.value}")
        self._tokens.append(status)

    def downgrade_finished(self) -> None:
        """Replace the trailing ``finished`` token with ``failed``."""
        if self.last != BotStatus.FINISHED:
            raise ValueError("Only a trailing 'finished' status can be downgraded")
        self._tokens[-1] = BotStatus.FAILED

    @property
    def last(self) -> Optional[BotStatus]:
        return self._tokens[-1] if self._tokens else None

    @property
    def is_terminal(self) -> bool:
        return self.last in TERMINAL_STATUSES

    def to_list(self) -> List[str]:
        """Wire representation sent to the status API."""
        return [token.value for token in self._tokens]

    def __contains__(self, status: object) -> bool:
        return status in self._tokens

    def __iter__(self) -> Iterator[BotStatus]:
        return iter(self._tokens)

    def __len__(self) -> int:
        return len(self._tokens)

    def __repr__(self) -> str:
        return f"StatusHistory({self.to_list()!r})"


@dataclass
class JoinParams:
    """Everything a caller supplies to start one bot session."""
    url: str
    bearer_token: str
    user_id: str
    team_id: str
    name: Optional[str] = None
    timezone: str = "UTC"
    event_id: Optional[str] = None
    bot_id: Optional[str] = None


@dataclass
class Session:
    """
    One join attempt.

    The secret authenticates calls that cross from the page back into the
    host process; it is generated once and never leaves the session.
    """
    provider: MeetingProvider
    correlation_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    session_secret: str = field(default_factory=lambda: str(uuid.uuid4()))
    status_history: StatusHistory = field(default_factory=StatusHistory)
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization (secret excluded)."""
        return {
            "provider": self.provider.value,
            "correlation_id": self.correlation_id,
            "status": self.status_history.to_list(),
            "started_at": self.started_at.isoformat(),
        }


@dataclass
class DetectionState:
    """Consecutive-failure bookkeeping owned by one watchdog."""
    max_failures: int
    failures: int = 0
    active: bool = True

    def record_success(self) -> None:
        self.failures = 0

    def record_failure(self) -> bool:
        """Count a failure; returns False once the watchdog should stop."""
        self.failures += 1
        if self.failures >= self.max_failures:
            self.active = False
        return self.active


@dataclass
class PageState:
    """Snapshot of the meeting page used by the page-validity check."""
    url: str
    body_text: str
    has_meeting_ui: bool


@dataclass
class DismissResult:
    """Outcome of one modal-dismissal sweep."""
    clicked: int = 0
    failed: int = 0
    last_error: Optional[str] = None
