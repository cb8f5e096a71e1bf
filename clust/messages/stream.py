"""
MessageStream: 把 HTTP 响应的行流转换为类型化事件

Wraps an open streaming httpx response. Iterating yields StreamEvent or
DecodeError items in arrival order; transport failures are raised as
ClientError and end the iteration. Every event that decodes is also folded
into a MessageAccumulator so the complete message is available at the end.
"""
import json
from typing import AsyncIterator, Dict, Iterator, List, Optional

import httpx
from loguru import logger

from ..exceptions import ClientError, DecodeError
from .content import TextContentBlock, ToolUseContentBlock
from .decoder import DecodeResult, StreamDecoder
from .events import (
    ContentBlockDeltaEvent,
    ContentBlockStartEvent,
    ContentBlockStopEvent,
    ErrorEvent,
    InputJsonDelta,
    MessageDeltaEvent,
    MessageStartEvent,
    MessageStopEvent,
    StreamEvent,
    TextDelta,
)
from .response import MessagesResponseBody

_TRANSPORT_ERRORS = (httpx.HTTPError, httpx.StreamError)


class MessageAccumulator:
    """
    Fold stream events into the final MessagesResponseBody.

    Tool input arrives as partial JSON text spread over several deltas; it is
    buffered per block index and parsed when the block stops.
    """

    def __init__(self):
        self.message: Optional[MessagesResponseBody] = None
        self.error: Optional[ErrorEvent] = None
        self.done = False
        self._partial_json: Dict[int, List[str]] = {}

    def update(self, event: StreamEvent) -> None:
        """
        Apply one event.

        Raises:
            DecodeError: If the event does not fit the message built so far
                (e.g. a delta for a block that was never started).
        """
        if isinstance(event, MessageStartEvent):
            self.message = event.message.model_copy(deep=True)
            self._partial_json.clear()
        elif isinstance(event, ContentBlockStartEvent):
            content = self._require_message(event).content
            block = event.content_block.model_copy(deep=True)
            if event.index < len(content):
                content[event.index] = block
            else:
                content.append(block)
        elif isinstance(event, ContentBlockDeltaEvent):
            block = self._block_at(event)
            if isinstance(event.delta, TextDelta) and isinstance(block, TextContentBlock):
                block.text += event.delta.text
            elif isinstance(event.delta, InputJsonDelta) and isinstance(block, ToolUseContentBlock):
                self._partial_json.setdefault(event.index, []).append(event.delta.partial_json)
            else:
                raise DecodeError(
                    f"{event.delta.type} does not apply to a {block.type} block",
                    event=event.type,
                )
        elif isinstance(event, ContentBlockStopEvent):
            block = self._block_at(event)
            fragments = self._partial_json.pop(event.index, None)
            if fragments is not None and isinstance(block, ToolUseContentBlock):
                block.input = self._parse_tool_input("".join(fragments))
        elif isinstance(event, MessageDeltaEvent):
            message = self._require_message(event)
            message.stop_reason = event.delta.stop_reason
            message.stop_sequence = event.delta.stop_sequence
            message.usage.output_tokens = event.usage.output_tokens
        elif isinstance(event, MessageStopEvent):
            self.done = True
        elif isinstance(event, ErrorEvent):
            self.error = event
        # ping: nothing to do

    def get_final_message(self) -> MessagesResponseBody:
        """
        Raises:
            ApiError: If the server sent an error event.
            DecodeError: If no message_start or no message_stop was received.
        """
        if self.error is not None:
            raise self.error.to_exception()
        if self.message is None:
            raise DecodeError("Stream ended without a message_start event")
        if not self.done:
            raise DecodeError("Stream ended before message_stop")
        return self.message

    def _require_message(self, event: StreamEvent) -> MessagesResponseBody:
        if self.message is None:
            raise DecodeError(f"{event.type} received before message_start", event=event.type)
        return self.message

    def _block_at(self, event: StreamEvent):
        content = self._require_message(event).content
        index = event.index  # type: ignore[union-attr]
        if index >= len(content):
            raise DecodeError(f"{event.type} for unknown content block {index}", event=event.type)
        return content[index]

    @staticmethod
    def _parse_tool_input(text: str) -> dict:
        if not text.strip():
            return {}
        try:
            value = json.loads(text)
        except json.JSONDecodeError as e:
            raise DecodeError(f"Invalid tool input JSON: {e}", raw=text, cause=e) from e
        if not isinstance(value, dict):
            raise DecodeError("Tool input must be a JSON object", raw=text)
        return value


def _text_of(result: DecodeResult) -> Optional[str]:
    if isinstance(result, ContentBlockDeltaEvent) and isinstance(result.delta, TextDelta):
        return result.delta.text
    return None


class MessageStream:
    """
    Synchronous stream of decoded events over an httpx streaming response.

    Example:
        >>> with client.create_message_stream(body) as stream:
        ...     for text in stream.text_stream():
        ...         print(text, end="", flush=True)
        ...     message = stream.get_final_message()
    """

    def __init__(self, response: httpx.Response, decoder: Optional[StreamDecoder] = None):
        self.response = response
        self.decoder = decoder or StreamDecoder()
        self.accumulator = MessageAccumulator()
        self.error: Optional[ClientError] = None
        self._iterator = self._iter_results()

    def __iter__(self) -> Iterator[DecodeResult]:
        return self._iterator

    def __next__(self) -> DecodeResult:
        return next(self._iterator)

    def _iter_lines(self) -> Iterator[str]:
        try:
            yield from self.response.iter_lines()
        except _TRANSPORT_ERRORS as e:
            self.error = ClientError(f"Stream transport error: {e}")
            raise self.error from e

    def _iter_results(self) -> Iterator[DecodeResult]:
        try:
            for result in self.decoder.decode(self._iter_lines()):
                _observe(self.accumulator, result)
                yield result
        finally:
            self.close()

    def text_stream(self) -> Iterator[str]:
        """Yield only the text deltas."""
        for result in self:
            text = _text_of(result)
            if text:
                yield text

    def until_done(self) -> None:
        """Consume the rest of the stream."""
        for _ in self:
            pass

    def get_final_message(self) -> MessagesResponseBody:
        """
        Consume the rest of the stream and return the assembled message.

        Raises:
            ClientError: If the transport failed, on this or any later call.
            ApiError: If the server sent an error event.
            DecodeError: If the stream ended before message_stop.
        """
        self.until_done()
        if self.error is not None:
            raise self.error
        return self.accumulator.get_final_message()

    def close(self) -> None:
        self.response.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class AsyncMessageStream:
    """Asynchronous counterpart of MessageStream."""

    def __init__(self, response: httpx.Response, decoder: Optional[StreamDecoder] = None):
        self.response = response
        self.decoder = decoder or StreamDecoder()
        self.accumulator = MessageAccumulator()
        self.error: Optional[ClientError] = None
        self._iterator = self._iter_results()

    def __aiter__(self) -> AsyncIterator[DecodeResult]:
        return self._iterator

    async def __anext__(self) -> DecodeResult:
        return await self._iterator.__anext__()

    async def _iter_lines(self) -> AsyncIterator[str]:
        try:
            async for line in self.response.aiter_lines():
                yield line
        except _TRANSPORT_ERRORS as e:
            self.error = ClientError(f"Stream transport error: {e}")
            raise self.error from e

    async def _iter_results(self) -> AsyncIterator[DecodeResult]:
        try:
            async for result in self.decoder.adecode(self._iter_lines()):
                _observe(self.accumulator, result)
                yield result
        finally:
            await self.aclose()

    async def text_stream(self) -> AsyncIterator[str]:
        async for result in self:
            text = _text_of(result)
            if text:
                yield text

    async def until_done(self) -> None:
        async for _ in self:
            pass

    async def get_final_message(self) -> MessagesResponseBody:
        await self.until_done()
        if self.error is not None:
            raise self.error
        return self.accumulator.get_final_message()

    async def aclose(self) -> None:
        await self.response.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()


def _observe(accumulator: MessageAccumulator, result: DecodeResult) -> None:
    """Log decode errors and feed events to the accumulator without ending the stream."""
    if isinstance(result, DecodeError):
        logger.warning(f"⚠️ [Stream] Skipping undecodable event: {result} (raw={result.raw[:200]!r})")
        return
    try:
        accumulator.update(result)
    except DecodeError as e:
        logger.warning(f"⚠️ [Stream] Event does not fit the message: {e}")
