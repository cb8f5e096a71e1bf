"""
Tests for StreamDecoder: frame assembly, dispatch and error recovery.
"""

import json

import pytest

from clust.exceptions import DecodeError, UnknownEventError
from clust.messages import (
    ContentBlockDeltaEvent,
    ErrorEvent,
    MessageStartEvent,
    MessageStopEvent,
    PingEvent,
    StreamDecoder,
    TextDelta,
)


def feed_all(decoder, lines):
    return list(decoder.decode(lines))


@pytest.fixture
def decoder():
    return StreamDecoder()


# ── Frame assembly ──────────────────────────────────────


def test_well_formed_frame_yields_one_event(decoder):
    payload = {
        "type": "content_block_delta",
        "index": 0,
        "delta": {"type": "text_delta", "text": "Hello"},
    }
    results = feed_all(decoder, [
        "event: content_block_delta",
        f"data: {json.dumps(payload)}",
        "",
    ])

    assert len(results) == 1
    event = results[0]
    assert isinstance(event, ContentBlockDeltaEvent)
    assert event.model_dump() == payload


def test_multiple_data_lines_are_joined_with_newline(decoder):
    results = feed_all(decoder, [
        "event: content_block_delta",
        'data: {"type": "content_block_delta",',
        'data: "index": 2,',
        'data: "delta": {"type": "text_delta", "text": "a\\nb"}}',
        "",
    ])

    assert len(results) == 1
    assert results[0].index == 2
    assert results[0].delta == TextDelta(text="a\nb")


def test_data_join_preserves_arrival_order(decoder):
    # A newline inside a JSON string literal would be invalid, so the join
    # character itself is observable through a decode error.
    results = feed_all(decoder, [
        "event: content_block_delta",
        'data: {"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": "x',
        'data: y"}}',
        "",
    ])

    assert isinstance(results[0], DecodeError)
    assert results[0].raw.endswith('"x\ny"}}')


def test_blank_line_without_frame_is_padding(decoder):
    assert decoder.feed("") is None
    assert decoder.feed("") is None
    assert decoder.frame.is_empty


def test_emission_only_on_frame_termination(decoder):
    assert decoder.feed("event: ping") is None
    assert decoder.feed('data: {"type": "ping"}') is None
    assert isinstance(decoder.feed(""), PingEvent)


def test_ping_without_data(decoder):
    decoder.feed("event: ping")
    result = decoder.feed("")

    assert result == PingEvent()
    assert decoder.frame.is_empty


def test_data_without_leading_space(decoder):
    results = feed_all(decoder, ["event: message_stop", 'data:{"type": "message_stop"}', ""])
    assert results == [MessageStopEvent()]


def test_comments_and_unknown_fields_are_ignored(decoder):
    results = feed_all(decoder, [
        ": keep-alive",
        "id: 42",
        "retry: 1000",
        "event: ping",
        "whatever: value",
        "",
    ])
    assert results == [PingEvent()]


def test_crlf_line_endings(decoder):
    results = feed_all(decoder, ["event: ping\r", 'data: {"type": "ping"}\r', "\r"])
    assert results == [PingEvent()]


def test_message_stop_then_end_of_stream(decoder):
    results = feed_all(decoder, ["event: message_stop", "data: {}", ""])

    assert len(results) == 1
    assert isinstance(results[0], MessageStopEvent)


def test_unterminated_trailing_frame_is_discarded(decoder):
    results = feed_all(decoder, [
        "event: ping",
        "",
        "event: message_stop",
        'data: {"type": "message_stop"}',
    ])

    assert results == [PingEvent()]
    assert decoder.frame.is_empty


def test_finish_resets_partial_frame(decoder):
    decoder.feed("event: message_stop")
    decoder.finish()

    assert decoder.frame.is_empty
    assert decoder.feed("") is None


# ── Dispatch ──────────────────────────────────────


def test_dispatch_on_payload_type_without_event_name(decoder):
    results = feed_all(decoder, ['data: {"type": "message_stop"}', ""])
    assert results == [MessageStopEvent()]


def test_frame_without_name_or_type_is_decode_error(decoder):
    results = feed_all(decoder, ['data: {"index": 0}', ""])

    assert len(results) == 1
    assert isinstance(results[0], DecodeError)
    assert results[0].raw == '{"index": 0}'


def test_message_start_event(decoder):
    payload = {
        "type": "message_start",
        "message": {
            "id": "msg_1", "type": "message", "role": "assistant", "content": [],
            "model": "claude-3-opus-20240229", "stop_reason": None,
            "stop_sequence": None, "usage": {"input_tokens": 12, "output_tokens": 1},
        },
    }
    results = feed_all(decoder, ["event: message_start", f"data: {json.dumps(payload)}", ""])

    event = results[0]
    assert isinstance(event, MessageStartEvent)
    assert event.message.id == "msg_1"
    assert event.message.usage.input_tokens == 12


def test_vendor_error_event_is_a_normal_item(decoder):
    results = feed_all(decoder, [
        "event: error",
        'data: {"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}}',
        "",
        "event: ping",
        "",
    ])

    assert isinstance(results[0], ErrorEvent)
    assert results[0].error.message == "Overloaded"
    assert results[1] == PingEvent()


def test_extra_payload_fields_are_ignored(decoder):
    results = feed_all(decoder, [
        "event: ping",
        'data: {"type": "ping", "future_field": true}',
        "",
    ])
    assert results == [PingEvent()]


# ── Error recovery ──────────────────────────────────────


def test_unknown_event_yields_error_and_decoding_resumes(decoder):
    results = feed_all(decoder, [
        "event: brand_new_event",
        'data: {"type": "brand_new_event", "value": 1}',
        "",
        "event: message_stop",
        'data: {"type": "message_stop"}',
        "",
    ])

    assert len(results) == 2
    assert isinstance(results[0], UnknownEventError)
    assert results[0].event == "brand_new_event"
    assert results[0].raw == '{"type": "brand_new_event", "value": 1}'
    assert isinstance(results[1], MessageStopEvent)


def test_invalid_json_yields_error_and_decoding_resumes(decoder):
    results = feed_all(decoder, [
        "event: content_block_delta",
        "data: {not json",
        "",
        "event: ping",
        "",
    ])

    assert isinstance(results[0], DecodeError)
    assert isinstance(results[0].cause, json.JSONDecodeError)
    assert results[0].event == "content_block_delta"
    assert results[1] == PingEvent()


def test_schema_mismatch_yields_error(decoder):
    results = feed_all(decoder, [
        "event: content_block_stop",
        'data: {"type": "content_block_stop"}',
        "",
    ])

    assert isinstance(results[0], DecodeError)
    assert not isinstance(results[0], UnknownEventError)
    assert results[0].cause is not None


def test_non_object_payload_yields_error(decoder):
    results = feed_all(decoder, ["event: ping", "data: [1, 2]", ""])
    assert isinstance(results[0], DecodeError)


# ── Repeated event field ──────────────────────────────────────


def test_repeated_event_field_last_write_wins(decoder):
    results = feed_all(decoder, [
        "event: ping",
        "event: message_stop",
        "data: {}",
        "",
    ])

    assert len(results) == 1
    assert isinstance(results[0], MessageStopEvent)


def test_repeated_event_field_strict_mode():
    decoder = StreamDecoder(strict_event_field=True)
    results = feed_all(decoder, [
        "event: ping",
        "event: message_stop",
        "data: {}",
        "",
        "event: ping",
        "",
    ])

    assert isinstance(results[0], DecodeError)
    assert results[0].event == "message_stop"
    assert results[1] == PingEvent()


# ── Async source ──────────────────────────────────────


async def test_adecode_matches_decode():
    lines = [
        "event: ping",
        "",
        "event: unknown",
        "data: {}",
        "",
        "event: message_stop",
        "data: {}",
        "",
        "event: ping",
    ]

    async def source():
        for line in lines:
            yield line

    results = [result async for result in StreamDecoder().adecode(source())]

    assert len(results) == 3
    assert isinstance(results[0], PingEvent)
    assert isinstance(results[1], UnknownEventError)
    assert isinstance(results[2], MessageStopEvent)


def test_unknown_stop_reason_still_decodes(decoder):
    results = feed_all(decoder, [
        "event: message_delta",
        'data: {"type": "message_delta", "delta": {"stop_reason": "refusal"}, "usage": {"output_tokens": 7}}',
        "",
    ])

    assert len(results) == 1
    assert results[0].delta.stop_reason == "refusal"
    assert results[0].usage.output_tokens == 7
