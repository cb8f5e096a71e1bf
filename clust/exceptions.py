# clust/exceptions.py
"""
Exception hierarchy for clust.

Two categories matter when consuming a stream:
- ClientError / ApiError are raised and end the request or the stream.
- DecodeError is never raised by the decoder. It is yielded in place of the
  event it failed to decode, and the stream continues.
"""
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .messages.response import ApiErrorResponse
    from .messages.types import ApiErrorType


class ClustError(Exception):
    """Base exception for all clust errors."""
    pass


class ConfigError(ClustError):
    """Configuration-related errors."""
    pass


class ClientError(ClustError):
    """Transport failures: the request could not be sent, the body could not be
    read, or the body could not be deserialized."""

    def __init__(self, message: str, text: Optional[str] = None):
        super().__init__(message)
        self.text = text


class ApiError(ClustError):
    """Error reported by the API server."""

    def __init__(
            self,
            status: Optional[int],
            error_type: "ApiErrorType",
            response: "ApiErrorResponse",
    ):
        self.status = status
        self.error_type = error_type
        self.response = response
        super().__init__(
            f"API error: ({status}) {error_type}: {response.error.message}"
        )


class StreamOptionMismatch(ClustError):
    """The request body's stream flag does not match the called method."""
    pass


class DecodeError(ClustError):
    """One server-sent event could not be decoded.

    Attributes:
        raw: The joined data text of the offending frame.
        event: The event name of the frame, if any.
        cause: The underlying parse or validation error, if any.
    """

    def __init__(
            self,
            message: str,
            raw: str = "",
            event: Optional[str] = None,
            cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.raw = raw
        self.event = event
        self.cause = cause

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({str(self)!r}, event={self.event!r})"


class UnknownEventError(DecodeError):
    """The event name is not one of the known stream event kinds."""
    pass
