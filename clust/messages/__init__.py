"""Messages API: request/response schema, stream events and the stream decoder."""

from .content import (
    Content,
    ContentBlock,
    ImageContentBlock,
    ImageContentSource,
    TextContentBlock,
    ToolResultContentBlock,
    ToolUseContentBlock,
)
from .decoder import DecodeResult, EventFrame, StreamDecoder
from .events import (
    EVENT_TYPES,
    ContentBlockDeltaEvent,
    ContentBlockStartEvent,
    ContentBlockStopEvent,
    DeltaUsage,
    ErrorEvent,
    InputJsonDelta,
    MessageDelta,
    MessageDeltaEvent,
    MessageStartEvent,
    MessageStopEvent,
    PingEvent,
    StreamEvent,
    TextDelta,
    parse_event,
)
from .message import Message
from .request import MessagesRequestBody, Metadata, ToolDefinition
from .response import ApiErrorBody, ApiErrorResponse, MessagesResponseBody, Usage
from .stream import AsyncMessageStream, MessageAccumulator, MessageStream
from .types import ApiErrorType, ApiVersion, Beta, ImageMediaType, Role, StopReason

__all__ = [
    # Schema
    'Content',
    'ContentBlock',
    'TextContentBlock',
    'ImageContentBlock',
    'ImageContentSource',
    'ToolUseContentBlock',
    'ToolResultContentBlock',
    'Message',
    'MessagesRequestBody',
    'Metadata',
    'ToolDefinition',
    'MessagesResponseBody',
    'Usage',
    'ApiErrorBody',
    'ApiErrorResponse',

    # Enums
    'ApiErrorType',
    'ApiVersion',
    'Beta',
    'ImageMediaType',
    'Role',
    'StopReason',

    # Stream events
    'StreamEvent',
    'EVENT_TYPES',
    'parse_event',
    'MessageStartEvent',
    'ContentBlockStartEvent',
    'ContentBlockDeltaEvent',
    'ContentBlockStopEvent',
    'MessageDeltaEvent',
    'MessageStopEvent',
    'PingEvent',
    'ErrorEvent',
    'TextDelta',
    'InputJsonDelta',
    'MessageDelta',
    'DeltaUsage',

    # Decoding
    'StreamDecoder',
    'EventFrame',
    'DecodeResult',
    'MessageStream',
    'AsyncMessageStream',
    'MessageAccumulator',
]
