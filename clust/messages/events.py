# clust/messages/events.py
"""
Typed stream events of the Messages API.

Each server-sent event carries its kind twice: in the `event:` field and in the
`type` key of the JSON payload. Dispatch goes through the static EVENT_TYPES
table keyed by the event name; the payload is then validated against the
matching model.
"""
import json
from typing import Annotated, Any, Dict, Literal, Optional, Type, Union

from pydantic import BaseModel, Field

from ..exceptions import ApiError, UnknownEventError
from .content import TextContentBlock, ToolUseContentBlock
from .response import ApiErrorBody, ApiErrorResponse, MessagesResponseBody, StopReasonValue
from .types import ApiErrorType


class _Event(BaseModel):
    """Shared helpers for all stream events."""

    type: str

    def to_sse(self) -> str:
        """Render the event as an SSE block (without the terminating blank line)."""
        data = json.dumps(self.model_dump(mode="json"), ensure_ascii=False)
        return f"event: {self.type}\ndata: {data}"


# ===== Deltas =====
class TextDelta(BaseModel):
    """Incremental text for a text block."""
    type: Literal["text_delta"] = "text_delta"
    text: str = ""


class InputJsonDelta(BaseModel):
    """Incremental JSON text for a tool_use block's input."""
    type: Literal["input_json_delta"] = "input_json_delta"
    partial_json: str = ""


class MessageDelta(BaseModel):
    """Top-level message fields updated by a message_delta event."""
    stop_reason: Optional[StopReasonValue] = None
    stop_sequence: Optional[str] = None


class DeltaUsage(BaseModel):
    """Cumulative output tokens reported by a message_delta event."""
    output_tokens: int = 0


# ===== Events =====
class MessageStartEvent(_Event):
    type: Literal["message_start"] = "message_start"
    message: MessagesResponseBody


class ContentBlockStartEvent(_Event):
    type: Literal["content_block_start"] = "content_block_start"
    index: int
    content_block: Annotated[
        Union[TextContentBlock, ToolUseContentBlock],
        Field(discriminator="type"),
    ]


class ContentBlockDeltaEvent(_Event):
    type: Literal["content_block_delta"] = "content_block_delta"
    index: int
    delta: Annotated[
        Union[TextDelta, InputJsonDelta],
        Field(discriminator="type"),
    ]


class ContentBlockStopEvent(_Event):
    type: Literal["content_block_stop"] = "content_block_stop"
    index: int


class MessageDeltaEvent(_Event):
    type: Literal["message_delta"] = "message_delta"
    delta: MessageDelta = Field(default_factory=MessageDelta)
    usage: DeltaUsage = Field(default_factory=DeltaUsage)


class MessageStopEvent(_Event):
    type: Literal["message_stop"] = "message_stop"


class PingEvent(_Event):
    type: Literal["ping"] = "ping"


class ErrorEvent(_Event):
    """An error reported by the server in the middle of a stream (e.g. overloaded_error).

    It is delivered as an ordinary item; call `to_exception()` to raise it.
    """
    type: Literal["error"] = "error"
    error: ApiErrorBody

    def to_exception(self) -> ApiError:
        return ApiError(
            status=None,
            error_type=ApiErrorType.from_name(self.error.type),
            response=ApiErrorResponse(error=self.error),
        )


StreamEvent = Union[
    MessageStartEvent,
    ContentBlockStartEvent,
    ContentBlockDeltaEvent,
    ContentBlockStopEvent,
    MessageDeltaEvent,
    MessageStopEvent,
    PingEvent,
    ErrorEvent,
]

EVENT_TYPES: Dict[str, Type[_Event]] = {
    "message_start": MessageStartEvent,
    "content_block_start": ContentBlockStartEvent,
    "content_block_delta": ContentBlockDeltaEvent,
    "content_block_stop": ContentBlockStopEvent,
    "message_delta": MessageDeltaEvent,
    "message_stop": MessageStopEvent,
    "ping": PingEvent,
    "error": ErrorEvent,
}


def parse_event(name: str, payload: Dict[str, Any]) -> StreamEvent:
    """
    Build the typed event for an event name and its decoded JSON payload.

    Raises:
        UnknownEventError: If the name is not in EVENT_TYPES.
        pydantic.ValidationError: If the payload does not match the event's schema.
    """
    event_cls = EVENT_TYPES.get(name)
    if event_cls is None:
        raise UnknownEventError(f"Unknown stream event type: {name}", event=name)
    return event_cls.model_validate(payload)  # type: ignore[return-value]
