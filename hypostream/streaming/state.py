"""
Progress State Machine for HypoStream
Tracks the lifecycle of a validation job from the status labels it reports
"""

import enum
import logging
from dataclasses import dataclass, replace
from typing import Optional

from hypostream.streaming.events import StreamEvent
from hypostream.validators.result import StatisticalFinding

logger = logging.getLogger(__name__)


class LifecycleStatus(enum.Enum):
    """Lifecycle states of a validation job, in their fixed order."""

    IDLE = "idle"
    INITIALIZING = "initializing"
    LOADING_DATA = "loading_data"
    CONFIGURING = "configuring"
    VALIDATING = "validating"
    COMPLETED = "completed"
    FAILED = "failed"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, label: Optional[str]) -> "LifecycleStatus":
        """Map a raw status label to a state; unrecognized labels give UNKNOWN."""
        if not label:
            return cls.UNKNOWN
        key = label.strip().lower().replace("-", "_").replace(" ", "_")
        for status in cls:
            if status.value == key and status is not cls.UNKNOWN:
                return status
        return cls.UNKNOWN

    @property
    def rank(self) -> int:
        return _RANKS[self]

    @property
    def is_terminal(self) -> bool:
        return self in (LifecycleStatus.COMPLETED, LifecycleStatus.FAILED)


_RANKS = {
    LifecycleStatus.IDLE: 0,
    LifecycleStatus.INITIALIZING: 1,
    LifecycleStatus.LOADING_DATA: 2,
    LifecycleStatus.CONFIGURING: 3,
    LifecycleStatus.VALIDATING: 4,
    LifecycleStatus.COMPLETED: 5,
    LifecycleStatus.FAILED: 5,
    LifecycleStatus.UNKNOWN: -1,
}


def clamp_progress(value: int) -> int:
    return max(0, min(100, int(value)))


@dataclass(frozen=True)
class ProgressState:
    """Lifecycle position of a job."""

    status: LifecycleStatus = LifecycleStatus.IDLE
    progress: int = 0
    message: str = ""
    job_id: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


def advance(state: ProgressState, event: StreamEvent) -> ProgressState:
    """
    Fold one event into the progress state.

    Only forward transitions are taken; unknown and backward labels keep the
    current status. Terminal states absorb every later event. Progress is
    clamped to [0, 100] and never decreases, except that entering FAILED
    records the reported value.

    Args:
        state: Current state
        event: Next event in arrival order

    Returns:
        The new state (the same object when nothing changes)
    """
    if state.is_terminal:
        return state

    target = LifecycleStatus.parse(event.status)
    status = state.status
    if target is LifecycleStatus.UNKNOWN:
        logger.debug(f"Ignoring unknown status label: {event.status!r}")
    elif target.rank < status.rank:
        logger.debug(f"Ignoring backward transition {status.value} -> {target.value}")
    else:
        status = target

    progress = state.progress
    if event.progress is not None:
        reported = clamp_progress(event.progress)
        if status is LifecycleStatus.FAILED:
            progress = reported
        else:
            progress = max(progress, reported)

    return replace(
        state,
        status=status,
        progress=progress,
        message=event.message if event.message else state.message,
        job_id=event.job_id or state.job_id,
    )


class ProgressStateMachine:
    """Holds the current ProgressState and applies events to it in order."""

    def __init__(self, initial: Optional[ProgressState] = None):
        self.state = initial or ProgressState()

    @property
    def status(self) -> LifecycleStatus:
        return self.state.status

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    def apply(self, event: StreamEvent) -> bool:
        """Apply an event; return True if the lifecycle status changed."""
        previous = self.state.status
        self.state = advance(self.state, event)
        if self.state.status is not previous:
            logger.info(f"Validation status: {previous.value} -> {self.state.status.value}")
            return True
        return False

    def reset(self) -> None:
        self.state = ProgressState()


@dataclass(frozen=True)
class StreamingState:
    """
    Read-only progress snapshot exposed to callers.

    Attributes:
        status: Current lifecycle status
        progress: Progress in [0, 100]
        message: Latest non-empty progress message
        findings: Statistical findings parsed so far, in arrival order
        raw_output: Every non-empty message received, in arrival order
        job_id: Server-side job identifier, once reported
    """

    status: LifecycleStatus = LifecycleStatus.IDLE
    progress: int = 0
    message: str = ""
    findings: tuple[StatisticalFinding, ...] = ()
    raw_output: tuple[str, ...] = ()
    job_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "progress": self.progress,
            "message": self.message,
            "findings": [f.to_dict() for f in self.findings],
            "raw_output": list(self.raw_output),
            "job_id": self.job_id,
        }
