"""
Stream Events for HypoStream
Decoded frames of the validation event stream
"""

import json
from dataclasses import dataclass
from typing import Any, Optional

from hypostream.streaming.errors import MalformedFrameError


@dataclass(frozen=True)
class StreamEvent:
    """
    One server-pushed progress event.

    Attributes:
        status: Raw lifecycle label (e.g. "loading_data", "completed")
        progress: Reported progress, None when the frame omits it
        message: Free-text progress message
        result: Terminal payload on completion
        error: Error text on failure
        job_id: Server-side job identifier
    """

    status: str
    progress: Optional[int] = None
    message: Optional[str] = None
    result: Optional[dict[str, Any]] = None
    error: Optional[str] = None
    job_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "StreamEvent":
        """Build an event from a decoded JSON frame."""
        if not isinstance(data, dict):
            raise MalformedFrameError(f"Expected a JSON object, got {type(data).__name__}")

        progress = data.get("progress")
        if progress is not None:
            if isinstance(progress, bool):
                raise MalformedFrameError(f"Invalid progress value: {progress!r}")
            try:
                progress = int(float(progress))
            except (TypeError, ValueError, OverflowError):
                raise MalformedFrameError(f"Invalid progress value: {progress!r}")

        result = data.get("result")
        message = data.get("message")
        error = data.get("error")
        job_id = data.get("job_id")

        return cls(
            status=str(data.get("status") or ""),
            progress=progress,
            message=str(message) if message is not None else None,
            result=result if isinstance(result, dict) else None,
            error=str(error) if error is not None else None,
            job_id=str(job_id) if job_id is not None else None,
        )

    @classmethod
    def from_json(cls, text: str) -> "StreamEvent":
        """Decode a JSON frame body."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedFrameError(f"Invalid JSON frame: {e}") from e
        return cls.from_dict(data)
