# clust/messages/decoder.py
"""
Incremental decoder for the server-sent event stream of the Messages API.

The decoder is fed one line at a time (newline already stripped) and emits a
result only when a blank line terminates a frame:

    event: content_block_delta
    data: {"type": "content_block_delta", "index": 0, "delta": {...}}
    <blank>

Every emission is either a typed stream event or a DecodeError. Decode errors
are returned as values so that one bad frame never ends the stream.

Example:
    >>> decoder = StreamDecoder()
    >>> decoder.feed("event: ping")
    >>> decoder.feed("")
    PingEvent(type='ping')
"""
import json
from dataclasses import dataclass, field
from typing import AsyncIterable, AsyncIterator, Iterable, Iterator, List, Optional, Union

from loguru import logger
from pydantic import ValidationError

from ..exceptions import DecodeError, UnknownEventError
from .events import StreamEvent, parse_event

DecodeResult = Union[StreamEvent, DecodeError]


@dataclass
class EventFrame:
    """One server-sent event that has not been terminated yet."""
    event: Optional[str] = None
    data: List[str] = field(default_factory=list)
    event_repeated: bool = False

    @property
    def is_empty(self) -> bool:
        return self.event is None and not self.data

    def payload(self) -> str:
        """Data fragments joined in arrival order."""
        return "\n".join(self.data)


class StreamDecoder:
    """
    Line-driven SSE state machine producing typed stream events.

    One instance per HTTP stream. Not safe to feed from several sources at once.
    """

    def __init__(self, strict_event_field: bool = False):
        """
        Args:
            strict_event_field: When False (default), a second `event:` line in
                the same frame overwrites the first. When True, such a frame
                is reported as a DecodeError instead.
        """
        self.strict_event_field = strict_event_field
        self._frame = EventFrame()

    @property
    def frame(self) -> EventFrame:
        """The frame currently being assembled."""
        return self._frame

    def feed(self, line: str) -> Optional[DecodeResult]:
        """
        Process one line of the stream.

        Returns:
            A StreamEvent or DecodeError when the line terminates a non-empty
            frame, otherwise None.
        """
        line = line.rstrip("\r")

        if not line:
            if self._frame.is_empty:
                return None
            frame, self._frame = self._frame, EventFrame()
            return self._finalize(frame)

        # 注释行
        if line.startswith(":"):
            return None

        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]

        if name == "event":
            if self._frame.event is not None:
                logger.debug(f"[SSE] Repeated event field: {self._frame.event!r} -> {value!r}")
                self._frame.event_repeated = True
            self._frame.event = value
        elif name == "data":
            self._frame.data.append(value)
        # id / retry / unknown fields are ignored
        return None

    def finish(self) -> None:
        """End of stream: drop an unterminated frame without emitting it."""
        if not self._frame.is_empty:
            logger.debug(
                f"[SSE] Discarding unterminated frame at end of stream: "
                f"event={self._frame.event!r}, {len(self._frame.data)} data line(s)"
            )
        self._frame = EventFrame()

    def decode(self, lines: Iterable[str]) -> Iterator[DecodeResult]:
        """Lazily decode a line iterable. Single pass."""
        for line in lines:
            result = self.feed(line)
            if result is not None:
                yield result
        self.finish()

    async def adecode(self, lines: AsyncIterable[str]) -> AsyncIterator[DecodeResult]:
        """Lazily decode an asynchronous line source. Single pass."""
        async for line in lines:
            result = self.feed(line)
            if result is not None:
                yield result
        self.finish()

    def _finalize(self, frame: EventFrame) -> DecodeResult:
        raw = frame.payload()

        if self.strict_event_field and frame.event_repeated:
            return DecodeError(
                "Event field repeated within one frame", raw=raw, event=frame.event
            )

        # 没有 data 的帧（如 `event: ping`）按空对象处理
        if not raw.strip():
            payload = {}
        else:
            try:
                payload = json.loads(raw)
            except json.JSONDecodeError as e:
                return DecodeError(
                    f"Failed to parse event data as JSON: {e}",
                    raw=raw, event=frame.event, cause=e,
                )

        if not isinstance(payload, dict):
            return DecodeError(
                f"Event data must be a JSON object, got {type(payload).__name__}",
                raw=raw, event=frame.event,
            )

        name = frame.event or payload.get("type")
        if not isinstance(name, str) or not name:
            return DecodeError(
                "Frame has neither an event name nor a payload type", raw=raw
            )

        try:
            return parse_event(name, payload)
        except UnknownEventError as e:
            e.raw = raw
            return e
        except ValidationError as e:
            return DecodeError(
                f"Invalid {name} event: {e.error_count()} validation error(s)",
                raw=raw, event=name, cause=e,
            )
