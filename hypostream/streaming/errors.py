"""
Transport errors for HypoStream
Failures of the validation event stream that trigger the local fallback
"""


class TransportError(Exception):
    """The event stream could not be opened or broke before a terminal event."""


class MalformedFrameError(TransportError):
    """A frame could not be decoded into a stream event."""


class StreamStalledError(TransportError):
    """No frame arrived within the idle timeout."""
