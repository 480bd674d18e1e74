"""
Module: tests/unit/test_structure.py

What:
    Build message structure trees from ``BODYSTRUCTURE`` tuples shaped like
    ``imapclient`` responses.

Why:
    Part numbering decides which sections are fetched; a wrong id silently
    returns the wrong body.
"""

from mailaccess.imap.body import TransferEncoding
from mailaccess.imap.structure import ROOT_PART_ID, PartDescriptor, build_structure

PLAIN = (b"text", b"plain", (b"charset", b"utf-8"), None, None, b"7bit", 12, 1)
HTML = (b"text", b"html", (b"charset", b"utf-8"), None, None, b"quoted-printable", 40, 2)
PDF = (
    b"application",
    b"pdf",
    (b"name", b"report.pdf"),
    None,
    None,
    b"base64",
    1000,
    None,
    (b"attachment", (b"filename", b"report.pdf")),
    None,
)
NOTES = (
    b"text",
    b"plain",
    (b"charset", b"us-ascii", b"name", b"notes.txt"),
    None,
    None,
    b"7bit",
    10,
    1,
    None,
    (b"attachment", (b"filename", b"notes.txt")),
    None,
)


def _alternative():
    return ([PLAIN, HTML], b"alternative", (b"boundary", b"b1"), None, None)


def test_single_part_message_uses_root_id():
    structure = build_structure(5, (b"TEXT", b"PLAIN", (b"CHARSET", b"UTF-8"), None, None, b"BASE64", 20, 1))
    leaves = structure.leaves()
    assert [part.part_id for part in leaves] == [ROOT_PART_ID]
    assert leaves[0].mime_type == "text/plain"
    assert leaves[0].encoding is TransferEncoding.BASE64
    assert leaves[0].charset == "UTF-8"
    assert structure.text_parts() == [PartDescriptor("0", TransferEncoding.BASE64, "UTF-8")]


def test_multipart_children_are_numbered_from_one():
    structure = build_structure(1, _alternative())
    assert structure.root.is_multipart
    assert structure.root.mime_type == "multipart/alternative"
    assert [part.part_id for part in structure.leaves()] == ["1", "2"]


def test_nested_parts_use_dotted_ids():
    structure = build_structure(1, ([_alternative(), PDF], b"mixed", (b"boundary", b"b0"), None, None))
    ids = [part.part_id for part in structure.root.walk()]
    assert ids == ["0", "1", "1.1", "1.2", "2"]
    assert [part.part_id for part in structure.find("application/pdf")] == ["2"]


def test_text_parts_prefer_plain_then_html():
    structure = build_structure(1, ([_alternative(), PDF], b"mixed", None, None, None))
    assert [d.part_id for d in structure.text_parts()] == ["1.1"]
    assert [d.part_id for d in structure.text_parts(prefer="text/html")] == ["1.2"]
    html_only = build_structure(2, ([HTML, PDF], b"mixed", None, None, None))
    assert html_only.text_parts() == [PartDescriptor("1", TransferEncoding.QUOTED_PRINTABLE, "utf-8")]


def test_attachments_are_detected_by_disposition():
    structure = build_structure(1, ([PLAIN, NOTES, PDF], b"mixed", None, None, None))
    attachments = structure.attachments()
    assert [part.filename for part in attachments] == ["notes.txt", "report.pdf"]
    assert attachments[1].size == 1000
    # text attachments are not shown as body text
    assert [d.part_id for d in structure.text_parts()] == ["1"]


def test_missing_fields_degrade_to_defaults():
    structure = build_structure(3, (b"text",))
    leaf = structure.root
    assert leaf.mime_type == "text/plain"
    assert leaf.encoding is TransferEncoding.SEVEN_BIT
    assert leaf.charset is None
    assert leaf.size is None
