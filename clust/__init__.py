# clust/__init__.py
"""
clust: An unofficial Python client for the Claude Messages API.

Example:
>>> import clust
>>> client = clust.Client.from_env()
>>> body = clust.MessagesRequestBody(
...     model='claude-3-haiku-20240307',
...     messages=[clust.Message.user('Hello!')],
... )
>>> print(client.create_message(body).text())
>>>
>>> # Streaming
>>> with client.create_message_stream(body) as stream:
...     for text in stream.text_stream():
...         print(text, end='')
"""

__version__ = "0.1.0"

# Core API
from .client import AsyncClient, Client
from .config import ClientConfig
from .conversation import Conversation
from .exceptions import (
    ClustError, ConfigError, ClientError, ApiError,
    StreamOptionMismatch, DecodeError, UnknownEventError
)
from .messages import (
    Message, MessagesRequestBody, MessagesResponseBody, Metadata, ToolDefinition, Usage,
    TextContentBlock, ImageContentBlock, ImageContentSource,
    ToolUseContentBlock, ToolResultContentBlock,
    Role, StopReason, ApiVersion, Beta, ApiErrorType, ImageMediaType,
    StreamEvent, MessageStartEvent, ContentBlockStartEvent, ContentBlockDeltaEvent,
    ContentBlockStopEvent, MessageDeltaEvent, MessageStopEvent, PingEvent, ErrorEvent,
    StreamDecoder, MessageStream, AsyncMessageStream, MessageAccumulator,
)


# Export the public API
__all__ = [
    # Core classes
    'Client',
    'AsyncClient',
    'ClientConfig',
    'Conversation',

    # Schema
    'Message',
    'MessagesRequestBody',
    'MessagesResponseBody',
    'Metadata',
    'ToolDefinition',
    'Usage',
    'TextContentBlock',
    'ImageContentBlock',
    'ImageContentSource',
    'ToolUseContentBlock',
    'ToolResultContentBlock',
    'Role',
    'StopReason',
    'ApiVersion',
    'Beta',
    'ApiErrorType',
    'ImageMediaType',

    # Streaming
    'StreamEvent',
    'MessageStartEvent',
    'ContentBlockStartEvent',
    'ContentBlockDeltaEvent',
    'ContentBlockStopEvent',
    'MessageDeltaEvent',
    'MessageStopEvent',
    'PingEvent',
    'ErrorEvent',
    'StreamDecoder',
    'MessageStream',
    'AsyncMessageStream',
    'MessageAccumulator',

    # Exceptions
    'ClustError',
    'ConfigError',
    'ClientError',
    'ApiError',
    'StreamOptionMismatch',
    'DecodeError',
    'UnknownEventError',
]
