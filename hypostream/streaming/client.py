"""
Validation Stream Client for HypoStream
Reads the server-sent progress events of a hypothesis validation job
"""

import logging
from typing import AsyncIterator, Optional

import httpx

from hypostream.config import StreamConfig
from hypostream.streaming.errors import TransportError
from hypostream.streaming.events import StreamEvent
from hypostream.validators.result import ValidationRequest

logger = logging.getLogger(__name__)


async def iter_frames(lines: AsyncIterator[str]) -> AsyncIterator[str]:
    """
    Group response lines into frame bodies.

    Understands server-sent events (``data:`` fields dispatched on a blank
    line) as well as bare newline-delimited JSON objects.
    """
    data_lines: list[str] = []
    async for line in lines:
        line = line.rstrip("\r\n")

        if not line:
            if data_lines:
                yield "\n".join(data_lines)
                data_lines = []
            continue

        if line.startswith(":"):
            continue

        if line.lstrip().startswith(("{", "[")) and not data_lines:
            yield line
            continue

        field, sep, value = line.partition(":")
        if sep and value.startswith(" "):
            value = value[1:]
        if field == "data":
            data_lines.append(value)
        # event, id and retry fields carry nothing we use

    if data_lines:
        yield "\n".join(data_lines)


class ValidationStreamClient:
    """Client for the streaming hypothesis validation endpoint"""

    def __init__(
        self,
        base_url: str = "https://popper.api.scinter.org",
        stream_path: str = "/validate-stream",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the stream client

        Args:
            base_url: Validation service URL
            stream_path: Path of the streaming endpoint
            timeout: Connect/read timeout in seconds
            client: Optional pre-built httpx client (e.g. with a mock transport)
        """
        self.base_url = base_url.rstrip("/")
        self.stream_path = "/" + stream_path.lstrip("/")
        self.timeout = timeout
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    @classmethod
    def from_config(cls, config: StreamConfig) -> "ValidationStreamClient":
        return cls(base_url=config.api_url, stream_path=config.stream_path, timeout=config.timeout)

    async def __aenter__(self):
        """Async context manager entry"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.close()

    async def close(self):
        """Close the HTTP client"""
        await self.client.aclose()

    def __call__(self, request: ValidationRequest) -> AsyncIterator[StreamEvent]:
        return self.stream_events(request)

    async def stream_events(self, request: ValidationRequest) -> AsyncIterator[StreamEvent]:
        """
        Open the event stream for a request and yield decoded events

        Args:
            request: Hypothesis and significance level to validate

        Yields:
            StreamEvent per frame, in arrival order

        Raises:
            TransportError: connection, HTTP status or decoding failure
        """
        params = {"hypothesis": request.hypothesis, "alpha": str(request.alpha)}
        url = f"{self.base_url}{self.stream_path}"
        logger.info(f"Opening validation stream: {url}")

        try:
            async with self.client.stream(
                "GET",
                url,
                params=params,
                headers={"Accept": "text/event-stream", "Cache-Control": "no-cache"},
            ) as response:
                response.raise_for_status()
                async for frame in iter_frames(response.aiter_lines()):
                    yield StreamEvent.from_json(frame)
        except httpx.HTTPError as e:
            logger.error(f"Validation stream error: {e}")
            raise TransportError(str(e) or type(e).__name__) from e

    async def health_check(self) -> bool:
        """
        Check if the validation service is reachable

        Returns:
            True if the server responds without a server error
        """
        try:
            response = await self.client.get(self.base_url)
            return response.status_code < 500
        except Exception as e:
            logger.error(f"Validation service health check failed: {e}")
            return False
