"""
Tests for locating FETCH literals in a peeked response prefix

Tests cover:
- Whole-message and header-field sections
- Offsets of the first literal byte
- Responses that do not announce the literal
- Deciding when enough of a response has been peeked
"""
import pytest

from imapfetch.core.imap.framing import FULL_MESSAGE, frame_literal, frame_ready
from imapfetch.core.models import FieldName
from imapfetch.utils.errors import LiteralNotFoundError, NotFoundError


class TestFrameLiteral:
    """Tests for frame_literal"""

    def test_whole_message_frame(self):
        """Test sequence, length and offset of a BODY[] literal"""
        line = b"* 12 FETCH (BODY[] {342}\r\n"
        frame = frame_literal(line + b"Received: ...", FULL_MESSAGE)

        assert frame.sequence == 12
        assert frame.length == 342
        assert frame.offset == len(line)

    def test_header_field_frame(self):
        """Test a HEADER.FIELDS section is matched literally"""
        chunk = b"* 1 FETCH (BODY[HEADER.FIELDS (FROM)] {24}\r\nFrom: a@b.example\r\n\r\n"
        frame = frame_literal(chunk, FieldName.FROM.section)

        assert frame.length == 24
        assert chunk[frame.offset:frame.offset + 5] == b"From:"

    def test_line_after_untagged_data(self):
        """Test the announcement need not be the first line of the chunk"""
        prefix = b"* 3 EXISTS\r\n"
        line = b"* 1 FETCH (BODY[] {5}\r\n"
        frame = frame_literal(prefix + line + b"hello", FULL_MESSAGE)

        assert frame.offset == len(prefix) + len(line)

    def test_case_insensitive_keywords(self):
        """Test lower-case response keywords are accepted"""
        frame = frame_literal(b"* 1 fetch (body[] {7}\r\n", FULL_MESSAGE)
        assert frame.length == 7

    def test_wrong_section_not_matched(self):
        """Test a literal for another section is not taken"""
        chunk = b"* 1 FETCH (BODY[HEADER.FIELDS (TO)] {2}\r\n\r\n"
        with pytest.raises(LiteralNotFoundError):
            frame_literal(chunk, FieldName.FROM.section)

    def test_missing_literal_raises(self):
        """Test a NO completion instead of a literal raises"""
        with pytest.raises(LiteralNotFoundError) as exc_info:
            frame_literal(b"A0003 NO Invalid message sequence\r\n", FULL_MESSAGE)

        assert isinstance(exc_info.value, NotFoundError)
        assert "A0003 NO" in exc_info.value.details["response"]

    def test_announcement_without_crlf_raises(self):
        """Test a truncated status line is not accepted"""
        with pytest.raises(LiteralNotFoundError):
            frame_literal(b"* 1 FETCH (BODY[] {5}", FULL_MESSAGE)


class TestFrameReady:
    """Tests for frame_ready"""

    def test_untagged_data_alone_is_not_ready(self):
        """Test untagged data ahead of the FETCH line does not end the peek"""
        ready = frame_ready(FULL_MESSAGE, "A0004")

        assert not ready(b"* 4 EXISTS\r\n")
        assert not ready(b"* 4 EXISTS\r\n* 1 FETCH (BODY[] {5}")

    def test_announcement_is_ready(self):
        """Test a complete announcement line ends the peek"""
        ready = frame_ready(FieldName.SUBJECT.section, "A0004")

        assert ready(b"* 4 EXISTS\r\n* 1 FETCH (BODY[HEADER.FIELDS (SUBJECT)] {4}\r\n")

    def test_tagged_completion_is_ready(self):
        """Test the command's own completion ends the peek"""
        ready = frame_ready(FULL_MESSAGE, "A0004")

        assert ready(b"A0004 NO Invalid message sequence\r\n")
        assert not ready(b"A0003 OK earlier command\r\n")
        assert not ready(b"A0004 NO Invalid")
