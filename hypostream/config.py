"""
Configuration for HypoStream
Endpoint and timeout settings loaded from the environment (.env supported)
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://popper.api.scinter.org"
DEFAULT_STREAM_PATH = "/validate-stream"
DEFAULT_TIMEOUT = 30.0
DEFAULT_IDLE_TIMEOUT = 120.0
DEFAULT_ALPHA = 0.05


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


@dataclass
class StreamConfig:
    """
    Settings for connecting to the validation service.

    Attributes:
        api_url: Base URL of the validation service
        stream_path: Path of the streaming validation endpoint
        timeout: Connect/read timeout for HTTP operations in seconds
        idle_timeout: Longest wait between frames before falling back (None disables)
        default_alpha: Significance level used when the caller gives none
    """

    api_url: str = DEFAULT_API_URL
    stream_path: str = DEFAULT_STREAM_PATH
    timeout: float = DEFAULT_TIMEOUT
    idle_timeout: Optional[float] = DEFAULT_IDLE_TIMEOUT
    default_alpha: float = DEFAULT_ALPHA

    @property
    def stream_url(self) -> str:
        return f"{self.api_url.rstrip('/')}/{self.stream_path.lstrip('/')}"

    @classmethod
    def from_env(cls) -> "StreamConfig":
        """
        Load settings from the environment

        Reads .env first, then:
        - HYPOSTREAM_API_URL
        - HYPOSTREAM_STREAM_PATH
        - HYPOSTREAM_TIMEOUT
        - HYPOSTREAM_IDLE_TIMEOUT (0 disables the idle timeout)
        - HYPOSTREAM_DEFAULT_ALPHA
        """
        load_dotenv()

        idle_timeout: Optional[float] = _env_float("HYPOSTREAM_IDLE_TIMEOUT", DEFAULT_IDLE_TIMEOUT)
        if idle_timeout <= 0:
            idle_timeout = None

        config = cls(
            api_url=os.getenv("HYPOSTREAM_API_URL") or DEFAULT_API_URL,
            stream_path=os.getenv("HYPOSTREAM_STREAM_PATH") or DEFAULT_STREAM_PATH,
            timeout=_env_float("HYPOSTREAM_TIMEOUT", DEFAULT_TIMEOUT),
            idle_timeout=idle_timeout,
            default_alpha=_env_float("HYPOSTREAM_DEFAULT_ALPHA", DEFAULT_ALPHA),
        )
        logger.debug(f"Loaded config: url={config.stream_url}, idle_timeout={config.idle_timeout}")
        return config
