"""
Tests for the multipart/alternative structural parser

Tests cover:
- Text part extraction with quoted and bare boundaries
- Header order inside the text part
- Selection of a text/plain part that is not first
- One failure per parsing stage
"""
import pytest

from imapfetch.core.imap.mime import MimeParser, extract_boundary, parse_mime
from imapfetch.core.models import TransferEncoding
from imapfetch.utils.errors import (
    BoundaryMissingError,
    EncodingMissingError,
    EndBoundaryMissingError,
    ExitCode,
    MimeVersionMissingError,
    NotMultipartAlternativeError,
    PlainTextPartMissingError,
    StartBoundaryMissingError,
    StructuralError,
)

from .test_helpers import MimeTestHelper


class TestParseMime:
    """Tests for successful parsing"""

    def test_single_plain_part(self):
        """Test the text between the part headers and the next delimiter is returned"""
        message = parse_mime(MimeTestHelper.create_message())

        assert message.boundary == "b1"
        assert message.plain_text.text == "Hello"
        assert message.plain_text.transfer_encoding is TransferEncoding.SEVEN_BIT

    def test_bare_boundary(self):
        """Test an unquoted boundary token ends at the line break"""
        body = MimeTestHelper.create_message(boundary="simple-token", quoted=False)
        assert parse_mime(body).plain_text.text == "Hello"

    def test_plain_part_after_html(self):
        """Test parts before the text/plain one are skipped"""
        body = MimeTestHelper.create_message(
            parts=[MimeTestHelper.html_part(), MimeTestHelper.plain_part("Plain body")]
        )
        assert parse_mime(body).plain_text.text == "Plain body"

    def test_encoding_header_before_content_type(self):
        """Test the body starts after whichever part header comes last"""
        body = MimeTestHelper.create_message(
            parts=[MimeTestHelper.plain_part("Reordered", encoding_first=True)]
        )
        assert parse_mime(body).plain_text.text == "Reordered"

    def test_multiline_text_kept_verbatim(self):
        """Test line breaks and quoted-printable escapes are not decoded"""
        text = "Line one=\r\nline two =E2=82=AC"
        body = MimeTestHelper.create_message(
            parts=[MimeTestHelper.plain_part(text, encoding="quoted-printable")]
        )
        part = parse_mime(body).plain_text

        assert part.text == text
        assert part.transfer_encoding is TransferEncoding.QUOTED_PRINTABLE

    def test_8bit_encoding_accepted(self):
        """Test 8bit is an accepted transfer encoding"""
        body = MimeTestHelper.create_message(
            parts=[MimeTestHelper.plain_part("Grüße", encoding="8bit")]
        )
        assert parse_mime(body).plain_text.text == "Grüße"

    def test_case_insensitive_headers(self):
        """Test header names and values are matched regardless of case"""
        body = (
            b"mime-version: 1.0\r\n"
            b"content-type: Multipart/Alternative; BOUNDARY=\"x\"\r\n\r\n"
            b"--x\r\ncontent-type: TEXT/PLAIN; CHARSET=utf-8\r\n"
            b"content-transfer-encoding: 7BIT\r\n\r\nhi\r\n--x--\r\n"
        )
        assert parse_mime(body).plain_text.text == "hi"

    def test_parser_class(self):
        """Test MimeParser exposes the same result"""
        body = MimeTestHelper.create_message()
        assert MimeParser(body).parse().content_type == "multipart/alternative"


class TestMimeStructureErrors:
    """Tests for each fatal stage"""

    def test_missing_version(self):
        """Test a message without MIME-Version is rejected"""
        with pytest.raises(MimeVersionMissingError):
            parse_mime(MimeTestHelper.create_message(version=False))

    def test_not_multipart_alternative(self):
        """Test a multipart/mixed message is rejected"""
        with pytest.raises(NotMultipartAlternativeError):
            parse_mime(MimeTestHelper.create_message(content_type="multipart/mixed;"))

    def test_missing_boundary_parameter(self):
        """Test a Content-Type without boundary= is rejected"""
        body = (
            b"MIME-Version: 1.0\r\n"
            b"Content-Type: multipart/alternative;\r\n\r\nno parts\r\n"
        )
        with pytest.raises(BoundaryMissingError):
            parse_mime(body)

    def test_missing_start_delimiter(self):
        """Test a boundary that never opens a part is rejected"""
        body = MimeTestHelper.create_message(boundary="b1").replace(b"--b1\r\n", b"--zz\r\n", 1)
        with pytest.raises(StartBoundaryMissingError):
            parse_mime(body)

    def test_no_plain_text_part(self):
        """Test a message with only an HTML part is rejected"""
        body = MimeTestHelper.create_message(parts=[MimeTestHelper.html_part()])
        with pytest.raises(PlainTextPartMissingError):
            parse_mime(body)

    def test_missing_transfer_encoding(self):
        """Test a text part without an accepted encoding is rejected"""
        body = MimeTestHelper.create_message(parts=[MimeTestHelper.plain_part(encoding=None)])
        with pytest.raises(EncodingMissingError):
            parse_mime(body)

    def test_unaccepted_transfer_encoding(self):
        """Test base64 is not an accepted encoding"""
        body = MimeTestHelper.create_message(
            parts=[MimeTestHelper.plain_part("SGVsbG8=", encoding="base64")]
        )
        with pytest.raises(EncodingMissingError):
            parse_mime(body)

    def test_missing_end_delimiter(self):
        """Test a text part that is never closed is rejected"""
        body = MimeTestHelper.create_message(terminate=False)
        with pytest.raises(EndBoundaryMissingError):
            parse_mime(body)

    def test_structural_errors_share_exit_code(self):
        """Test every stage failure maps to the MIME structure exit code"""
        with pytest.raises(StructuralError) as exc_info:
            parse_mime(MimeTestHelper.create_message(version=False))

        assert exc_info.value.exit_code == ExitCode.MIME_STRUCTURE


class TestExtractBoundary:
    """Tests for boundary parameter extraction"""

    def test_quoted(self):
        """Test the quotes are not part of the token"""
        assert extract_boundary(b'boundary="a b=c"\r\n') == b"a b=c"

    def test_bare_ends_at_space(self):
        """Test a bare token stops at whitespace"""
        assert extract_boundary(b"boundary=abc def") == b"abc"

    def test_unterminated_quote(self):
        """Test an unterminated quoted token is rejected"""
        with pytest.raises(BoundaryMissingError):
            extract_boundary(b'boundary="abc\r\n')

    def test_empty_token(self):
        """Test an empty token is rejected"""
        with pytest.raises(BoundaryMissingError):
            extract_boundary(b'boundary=""')
