"""
Streaming Validator for HypoStream
Control surface for running one hypothesis validation stream at a time
"""

import logging
from typing import Optional

from hypostream.config import StreamConfig
from hypostream.streaming.client import ValidationStreamClient
from hypostream.streaming.session import EventSource, SessionHandle, SessionUpdate, open_session
from hypostream.streaming.state import StreamingState
from hypostream.validators.result import ValidationRequest, ValidationResult

logger = logging.getLogger(__name__)


class StreamingValidator:
    """
    Runs hypothesis validations over the event stream, one at a time.

    Starting a new validation closes the previous session; updates from a
    superseded session never reach this object's state.

    Usage:
        async with StreamingValidator() as validator:
            result = await validator.validate("Dark matter affects galaxy rotation curves.")
            print(validator.state.findings, validator.is_simulated)
    """

    def __init__(
        self,
        source: Optional[EventSource] = None,
        config: Optional[StreamConfig] = None,
    ):
        """
        Initialize StreamingValidator

        Args:
            source: Event source for sessions (defaults to an HTTP stream client)
            config: Stream settings (defaults to StreamConfig())
        """
        self.config = config or StreamConfig()
        self._client: Optional[ValidationStreamClient] = None
        if source is None:
            self._client = ValidationStreamClient.from_config(self.config)
            source = self._client
        self._source = source
        self._handle: Optional[SessionHandle] = None
        self._reset()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _reset(self) -> None:
        self.state = StreamingState()
        self.result: Optional[ValidationResult] = None
        self.error: Optional[str] = None
        self.is_simulated = False
        self.fallback_reason: Optional[str] = None

    @property
    def is_streaming(self) -> bool:
        return self._handle is not None and self._handle.is_active

    @property
    def session(self) -> Optional[SessionHandle]:
        return self._handle

    def start(self, hypothesis: str, alpha: Optional[float] = None) -> Optional[SessionHandle]:
        """
        Start validating a hypothesis, cancelling any validation in progress.

        Must be called from a running event loop.

        Args:
            hypothesis: Hypothesis text
            alpha: Significance level (defaults to config.default_alpha)

        Returns:
            The new session handle, or None if the input was rejected
        """
        if self._handle is not None:
            self._handle.close()
            self._handle = None
        self._reset()

        try:
            request = ValidationRequest(
                hypothesis=hypothesis,
                alpha=self.config.default_alpha if alpha is None else alpha,
            )
        except ValueError as e:
            logger.warning(f"Rejected validation request: {e}")
            self.error = str(e)
            return None

        handle = open_session(request, self._source, idle_timeout=self.config.idle_timeout)
        handle.on_event(lambda update: self._on_update(handle, update))
        self._handle = handle
        self.state = handle.snapshot()
        logger.info(f"Started validation (alpha={request.alpha}): {request.hypothesis[:80]}")
        return handle

    def clear(self) -> None:
        """Cancel any running validation and return to the idle state."""
        if self._handle is not None:
            self._handle.close()
            self._handle = None
        self._reset()

    async def validate(self, hypothesis: str, alpha: Optional[float] = None) -> Optional[ValidationResult]:
        """
        Run a validation to completion.

        Returns:
            The final result, or None when the input was rejected or the
            server reported a failure (see ``error``)
        """
        handle = self.start(hypothesis, alpha)
        if handle is None:
            return None
        return await handle.wait()

    async def close(self) -> None:
        """Cancel any running validation and release the HTTP client."""
        self.clear()
        if self._client is not None:
            await self._client.close()

    def _on_update(self, handle: SessionHandle, update: SessionUpdate) -> None:
        if handle is not self._handle:
            return
        self.state = update.state
        self.result = update.result
        self.error = update.error
        self.is_simulated = update.is_simulated
        self.fallback_reason = update.fallback_reason
