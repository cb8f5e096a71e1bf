"""Wire-level enum definitions for the Messages API."""

from enum import Enum
from typing import Optional


class _StrEnum(str, Enum):
    """继承str以便于序列化和字符串比较。"""

    def __str__(self) -> str:
        """返回枚举值的字符串形式"""
        return self.value


class Role(_StrEnum):
    """Role of a message author."""

    USER = "user"
    ASSISTANT = "assistant"


class StopReason(_StrEnum):
    """Reason the model stopped generating."""

    END_TURN = "end_turn"                # 自然结束
    MAX_TOKENS = "max_tokens"            # 达到 max_tokens
    STOP_SEQUENCE = "stop_sequence"      # 命中自定义停止序列
    TOOL_USE = "tool_use"                # 模型请求调用工具


class ImageMediaType(_StrEnum):
    """Supported image media types."""

    JPEG = "image/jpeg"
    PNG = "image/png"
    GIF = "image/gif"
    WEBP = "image/webp"


class ApiVersion(_StrEnum):
    """Value of the `anthropic-version` header."""

    V2023_01_01 = "2023-01-01"
    V2023_06_01 = "2023-06-01"


class Beta(_StrEnum):
    """Value of the `anthropic-beta` header."""

    TOOLS_2024_04_04 = "tools-2024-04-04"


class ApiErrorType(_StrEnum):
    """Error types defined by the API, keyed by HTTP status."""

    INVALID_REQUEST_ERROR = "invalid_request_error"   # 400
    AUTHENTICATION_ERROR = "authentication_error"     # 401
    PERMISSION_ERROR = "permission_error"             # 403
    NOT_FOUND_ERROR = "not_found_error"               # 404
    RATE_LIMIT_ERROR = "rate_limit_error"             # 429
    API_ERROR = "api_error"                           # 500
    OVERLOADED_ERROR = "overloaded_error"             # 529
    UNKNOWN_ERROR = "unknown_error"

    @classmethod
    def from_status(cls, status: Optional[int]) -> "ApiErrorType":
        return _STATUS_ERROR_TYPES.get(status, cls.UNKNOWN_ERROR)

    @classmethod
    def from_name(cls, name: str) -> "ApiErrorType":
        """Map an error `type` string from a response body, unknown names included."""
        try:
            return cls(name)
        except ValueError:
            return cls.UNKNOWN_ERROR


_STATUS_ERROR_TYPES = {
    400: ApiErrorType.INVALID_REQUEST_ERROR,
    401: ApiErrorType.AUTHENTICATION_ERROR,
    403: ApiErrorType.PERMISSION_ERROR,
    404: ApiErrorType.NOT_FOUND_ERROR,
    429: ApiErrorType.RATE_LIMIT_ERROR,
    500: ApiErrorType.API_ERROR,
    529: ApiErrorType.OVERLOADED_ERROR,
}
