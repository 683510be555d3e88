"""
Stream Session for HypoStream
Owns one live validation stream and folds its events into progress and results
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Callable, Optional

from hypostream.streaming.accumulator import ResultAccumulator
from hypostream.streaming.errors import StreamStalledError, TransportError
from hypostream.streaming.events import StreamEvent
from hypostream.streaming.state import (
    LifecycleStatus,
    ProgressStateMachine,
    StreamingState,
    advance,
)
from hypostream.validators.result import (
    StatisticalFinding,
    ValidationRequest,
    ValidationResult,
)
from hypostream.validators.simulator import (
    simulate_validation,
    simulated_findings,
    simulated_output_lines,
)

logger = logging.getLogger(__name__)

EventSource = Callable[[ValidationRequest], AsyncIterator[StreamEvent]]

DEFAULT_FAILURE_MESSAGE = "Validation failed"


@dataclass(frozen=True)
class SessionUpdate:
    """
    Notification delivered to session callbacks after each folded event.

    Attributes:
        state: Progress snapshot after the event
        event: The event that caused the update, None for the simulated terminal update
        result: Final result once the session completed
        error: Server-reported failure message
        is_simulated: True when the result came from the fallback simulator
        fallback_reason: Transport failure that triggered the fallback
    """

    state: StreamingState
    event: Optional[StreamEvent] = None
    result: Optional[ValidationResult] = None
    error: Optional[str] = None
    is_simulated: bool = False
    fallback_reason: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.state.status.is_terminal


UpdateCallback = Callable[[SessionUpdate], None]


class SessionHandle:
    """
    Handle for one validation stream.

    Events are folded strictly in arrival order. A transport failure before a
    terminal event produces exactly one simulated result; a terminal payload
    that cannot be turned into a result fails the session with an error.
    Once closed, the handle drops any frame still in flight and stops
    notifying callbacks.
    """

    def __init__(
        self,
        request: ValidationRequest,
        source: EventSource,
        idle_timeout: Optional[float] = None,
    ):
        self.request = request
        self.idle_timeout = idle_timeout
        self.result: Optional[ValidationResult] = None
        self.error: Optional[str] = None
        self.is_simulated = False
        self.fallback_reason: Optional[str] = None

        self._source = source
        self._machine = ProgressStateMachine()
        self._accumulator = ResultAccumulator(request)
        self._callbacks: list[UpdateCallback] = []
        self._closed = False
        self._task: Optional[asyncio.Task] = None
        self._simulated_findings: tuple[StatisticalFinding, ...] = ()
        self._simulated_output: tuple[str, ...] = ()

        self._machine.apply(StreamEvent(status="initializing", progress=0, message="Starting validation..."))

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def is_active(self) -> bool:
        """True while the stream is running and the handle is still open."""
        return not self._closed and self._task is not None and not self._task.done()

    @property
    def status(self) -> LifecycleStatus:
        return self._machine.status

    def snapshot(self) -> StreamingState:
        """
        Current progress state, including findings parsed so far.

        After a fallback the findings are the simulated ones, matching the
        methods of the simulated result, and the simulated terminal lines are
        appended to the raw output.
        """
        state = self._machine.state
        findings = self._simulated_findings if self.is_simulated else tuple(self._accumulator.findings)
        return StreamingState(
            status=state.status,
            progress=state.progress,
            message=state.message,
            findings=findings,
            raw_output=tuple(self._accumulator.raw_output) + self._simulated_output,
            job_id=state.job_id,
        )

    def on_event(self, callback: UpdateCallback) -> None:
        """Register a callback invoked after every folded event."""
        self._callbacks.append(callback)

    def start(self) -> "SessionHandle":
        """Schedule the stream on the running event loop."""
        if self._task is not None:
            raise RuntimeError("Session already started")
        self._task = asyncio.get_running_loop().create_task(self._run())
        return self

    def close(self) -> None:
        """Close the handle and its transport. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        if self._task is not None and not self._task.done() and self._task is not asyncio.current_task():
            self._task.cancel()
        logger.debug(f"Session closed for hypothesis: {self.request.hypothesis[:60]}")

    async def wait(self) -> Optional[ValidationResult]:
        """
        Wait for the stream to finish.

        Returns:
            The final result, or None after a server-reported failure or close()
        """
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                if not self._task.cancelled():
                    raise
        return self.result

    async def _run(self) -> None:
        events = self._source(self.request)
        try:
            while not self._closed:
                event = await self._next_event(events)
                if self._closed:
                    logger.debug("Dropping event received after close")
                    return

                try:
                    self._fold(event)
                except Exception as e:
                    self._fail(e, event)
                    return
                if self._machine.is_terminal:
                    return
        except (TransportError, OSError) as e:
            self._fall_back(e)
        finally:
            aclose = getattr(events, "aclose", None)
            if aclose is not None:
                await aclose()

    async def _next_event(self, events: AsyncIterator[StreamEvent]) -> StreamEvent:
        try:
            if self.idle_timeout is None:
                return await events.__anext__()
            return await asyncio.wait_for(events.__anext__(), timeout=self.idle_timeout)
        except StopAsyncIteration:
            raise TransportError("Stream ended before a terminal event")
        except asyncio.TimeoutError:
            raise StreamStalledError(f"No event received for {self.idle_timeout}s")
        except (TransportError, OSError):
            raise
        except Exception as e:
            raise TransportError(f"Event source failed: {type(e).__name__}: {e}") from e

    def _fold(self, event: StreamEvent) -> None:
        if self._machine.is_terminal:
            return

        self._accumulator.add_message(event.message)
        # result is built before the COMPLETED transition is committed
        if advance(self._machine.state, event).status is LifecycleStatus.COMPLETED:
            self.result = self._accumulator.finalize(event.result)
        self._machine.apply(event)

        if self._machine.status is LifecycleStatus.FAILED:
            self.error = event.error or DEFAULT_FAILURE_MESSAGE
            logger.error(f"Validation failed on server: {self.error}")

        self._emit(event)

    def _fail(self, error: Exception, event: StreamEvent) -> None:
        self.result = None
        self.error = f"Could not process validation event: {error}"
        logger.error(self.error, exc_info=True)
        self._machine.apply(StreamEvent(status="failed", message=self.error))
        self._emit(event)

    def _fall_back(self, error: Exception) -> None:
        if self._closed or self._machine.is_terminal:
            logger.debug(f"Ignoring transport error after session end: {error}")
            return

        reason = str(error) or type(error).__name__
        logger.warning(f"Validation stream failed ({reason}); falling back to simulation")

        self.fallback_reason = reason
        self.is_simulated = True
        self.result = simulate_validation(self.request.hypothesis, self.request.alpha)
        self._simulated_findings = simulated_findings(self.request.hypothesis)
        self._simulated_output = tuple(simulated_output_lines(self.request.hypothesis))
        self._machine.apply(
            StreamEvent(status="completed", progress=100, message="Validation complete (simulated)")
        )
        self._emit(None)

    def _emit(self, event: Optional[StreamEvent]) -> None:
        if self._closed:
            return
        update = SessionUpdate(
            state=self.snapshot(),
            event=event,
            result=self.result,
            error=self.error,
            is_simulated=self.is_simulated,
            fallback_reason=self.fallback_reason,
        )
        for callback in list(self._callbacks):
            try:
                callback(update)
            except Exception as e:
                logger.error(f"Session callback failed: {e}", exc_info=True)


def open_session(
    request: ValidationRequest,
    source: EventSource,
    idle_timeout: Optional[float] = None,
) -> SessionHandle:
    """
    Open a validation stream for a request.

    Args:
        request: Hypothesis and significance level
        source: Callable returning the async iterator of stream events
        idle_timeout: Seconds to wait for each frame before falling back

    Returns:
        A started SessionHandle; register callbacks before the next await
    """
    return SessionHandle(request, source, idle_timeout=idle_timeout).start()
