"""
Module: tests/unit/test_body.py

What:
    Check transfer-decoding of fetched parts and how they are joined.

Why:
    Damaged payloads are common in the wild; body assembly must degrade to
    partial text instead of failing.
"""

import base64

from mailaccess.imap.body import PART_SEPARATOR, BodyChunk, TransferEncoding, assemble_body, decode_part


def test_parts_are_decoded_and_joined_with_blank_line():
    body = assemble_body(
        [
            (base64.b64encode(b"hello "), TransferEncoding.BASE64),
            (b"world", TransferEncoding.SEVEN_BIT),
        ]
    )
    assert body == "hello \n\nworld"
    assert PART_SEPARATOR == "\n\n"


def test_empty_part_list_gives_empty_body():
    assert assemble_body([]) == ""


def test_quoted_printable_soft_breaks():
    chunk = BodyChunk(b"caf=C3=A9 au=\nlait", TransferEncoding.QUOTED_PRINTABLE, "utf-8")
    assert decode_part(chunk) == "café aulait"


def test_base64_with_line_breaks():
    payload = base64.encodebytes("Grüße\n".encode("utf-8") * 20)
    assert b"\n" in payload
    assert decode_part(BodyChunk(payload, TransferEncoding.BASE64, "utf-8")) == "Grüße\n" * 20


def test_malformed_base64_is_decoded_leniently():
    assert decode_part(BodyChunk(b"aGVs*bG8", TransferEncoding.BASE64)) == "hello"
    # a dangling sextet is dropped
    assert decode_part(BodyChunk(b"aGVsbG8gd", TransferEncoding.BASE64)) == "hello "
    assert decode_part(BodyChunk(b"!!!", TransferEncoding.BASE64)) == ""


def test_charset_is_applied_after_transfer_decoding():
    assert decode_part(BodyChunk(b"caf\xe9", TransferEncoding.EIGHT_BIT, "iso-8859-1")) == "café"
    assert decode_part(BodyChunk(b"caf\xc3\xa9", TransferEncoding.EIGHT_BIT, "x-no-such-charset")) == "café"


def test_invalid_bytes_are_replaced():
    assert decode_part(BodyChunk(b"ok \xff", TransferEncoding.BINARY)) == "ok �"


def test_wire_names_are_accepted():
    body = assemble_body([(base64.b64encode(b"a"), "BASE64"), (b"b", b"7bit", "us-ascii")])
    assert body == "a\n\nb"


def test_unknown_encodings_pass_through():
    assert TransferEncoding.from_wire("x-uuencode") is TransferEncoding.OTHER
    assert TransferEncoding.from_wire(None) is TransferEncoding.SEVEN_BIT
    assert assemble_body([(b"raw", "x-uuencode")]) == "raw"
