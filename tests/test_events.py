"""Tests for SSE line classification."""

from tutorchat.stream.events import EventKind, classify_line


class TestClassifyLine:
    def test_blank_is_ignorable(self):
        assert classify_line("").kind is EventKind.IGNORABLE
        assert classify_line("   ").kind is EventKind.IGNORABLE

    def test_comment_is_ignorable(self):
        assert classify_line(": keep-alive").kind is EventKind.IGNORABLE
        assert classify_line(":").kind is EventKind.IGNORABLE

    def test_other_fields_unrecognized(self):
        assert classify_line("event: message").kind is EventKind.UNRECOGNIZED
        assert classify_line("id: 4").kind is EventKind.UNRECOGNIZED

    def test_data_without_space_unrecognized(self):
        assert classify_line('data:{"a":1}').kind is EventKind.UNRECOGNIZED

    def test_terminator(self):
        assert classify_line("data: [DONE]").kind is EventKind.TERMINATOR
        assert classify_line("data: [DONE]  ").kind is EventKind.TERMINATOR

    def test_data_payload_trimmed(self):
        event = classify_line('data:   {"a": 1}  ')
        assert event.kind is EventKind.DATA
        assert event.is_data
        assert event.payload == '{"a": 1}'
