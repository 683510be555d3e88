"""
Streaming module for HypoStream
Event stream transport, progress tracking and result assembly
"""

from hypostream.streaming.accumulator import ResultAccumulator
from hypostream.streaming.client import ValidationStreamClient
from hypostream.streaming.errors import MalformedFrameError, StreamStalledError, TransportError
from hypostream.streaming.events import StreamEvent
from hypostream.streaming.session import SessionHandle, SessionUpdate, open_session
from hypostream.streaming.state import (
    LifecycleStatus,
    ProgressState,
    ProgressStateMachine,
    StreamingState,
)
from hypostream.streaming.validator import StreamingValidator

__all__ = [
    "LifecycleStatus",
    "MalformedFrameError",
    "ProgressState",
    "ProgressStateMachine",
    "ResultAccumulator",
    "SessionHandle",
    "SessionUpdate",
    "StreamEvent",
    "StreamStalledError",
    "StreamingState",
    "StreamingValidator",
    "TransportError",
    "ValidationStreamClient",
    "open_session",
]
