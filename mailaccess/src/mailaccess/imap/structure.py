"""Message structure trees built from IMAP ``BODYSTRUCTURE`` responses.

What:
  Convert the nested ``BODYSTRUCTURE`` tuples returned by ``imapclient`` into
  a tree of :class:`MessagePart` nodes with IMAP part numbers, MIME types,
  charsets and transfer encodings.

Why:
  Fetching a body requires knowing which section numbers to ask for and how
  each one is encoded. The raw tuple layout differs between single-part,
  multipart and ``message/rfc822`` parts; callers should not have to care.

How:
  :func:`build_structure` walks the response recursively. Multipart nodes
  (whose first element is a list of children) number their children ``1``,
  ``2`` ... below the parent id. A non-multipart message is a single leaf with
  id ``"0"``, which the transport maps to ``BODY[TEXT]``.

Interfaces:
  :class:`PartDescriptor`, :class:`MessagePart`, :class:`MessageStructure`,
  :func:`build_structure`.

Invariants & Safety:
  - Part ids follow IMAP section numbering.
  - Unknown or missing fields degrade to ``None``/defaults, never raise.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Sequence

from .body import TransferEncoding

ROOT_PART_ID = "0"


class PartDescriptor(NamedTuple):
    """What :meth:`MailboxSession.get_body` needs to fetch and decode a part."""

    part_id: str
    encoding: TransferEncoding = TransferEncoding.SEVEN_BIT
    charset: Optional[str] = None


@dataclass
class MessagePart:
    """Node of a message structure tree."""

    part_id: str
    mime_type: str
    encoding: TransferEncoding = TransferEncoding.SEVEN_BIT
    charset: Optional[str] = None
    size: Optional[int] = None
    filename: Optional[str] = None
    disposition: Optional[str] = None
    children: List["MessagePart"] = field(default_factory=list)

    @property
    def is_multipart(self) -> bool:
        return self.mime_type.startswith("multipart/")

    @property
    def is_attachment(self) -> bool:
        return self.disposition == "attachment" or (self.filename is not None and not self.is_text)

    @property
    def is_text(self) -> bool:
        return self.mime_type.startswith("text/")

    @property
    def descriptor(self) -> PartDescriptor:
        return PartDescriptor(self.part_id, self.encoding, self.charset)

    def walk(self) -> Iterator["MessagePart"]:
        yield self
        for child in self.children:
            yield from child.walk()

    def leaves(self) -> List["MessagePart"]:
        return [part for part in self.walk() if not part.children and not part.is_multipart]


@dataclass
class MessageStructure:
    """Structure of one message, identified by UID."""

    uid: int
    root: MessagePart

    def leaves(self) -> List[MessagePart]:
        return self.root.leaves()

    def find(self, mime_type: str) -> List[MessagePart]:
        wanted = mime_type.lower()
        return [part for part in self.leaves() if part.mime_type == wanted]

    def attachments(self) -> List[MessagePart]:
        return [part for part in self.leaves() if part.is_attachment]

    def text_parts(self, prefer: str = "text/plain") -> List[PartDescriptor]:
        """Descriptors of the inline text parts to show as the message body.

        Parts of type ``prefer`` win; otherwise ``text/html``; otherwise any
        inline ``text/*`` part.
        """

        inline = [part for part in self.leaves() if part.is_text and not part.is_attachment]
        for mime_type in (prefer, "text/html"):
            chosen = [part for part in inline if part.mime_type == mime_type]
            if chosen:
                return [part.descriptor for part in chosen]
        return [part.descriptor for part in inline]


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _params(value: Any) -> Dict[str, str]:
    """Turn a flat ``(key, value, key, value)`` parameter tuple into a dict."""

    if not isinstance(value, (tuple, list)):
        return {}
    items = [_text(item) or "" for item in value]
    return {items[i].lower(): items[i + 1] for i in range(0, len(items) - 1, 2)}


def _disposition(fields: Sequence[Any]) -> tuple:
    for candidate in fields:
        if (
            isinstance(candidate, (tuple, list))
            and len(candidate) == 2
            and isinstance(candidate[0], (bytes, str))
            and (candidate[1] is None or isinstance(candidate[1], (tuple, list)))
        ):
            kind = (_text(candidate[0]) or "").lower()
            if kind in ("attachment", "inline"):
                return kind, _params(candidate[1])
    return None, {}


def _is_multipart(data: Sequence[Any]) -> bool:
    return bool(data) and isinstance(data[0], list)


def _build(data: Sequence[Any], part_id: str) -> MessagePart:
    if _is_multipart(data):
        subtype = (_text(data[1]) if len(data) > 1 else None) or "mixed"
        children = [
            _build(child, str(index) if part_id == ROOT_PART_ID else f"{part_id}.{index}")
            for index, child in enumerate(data[0], start=1)
        ]
        return MessagePart(part_id=part_id, mime_type=f"multipart/{subtype.lower()}", children=children)

    main = (_text(data[0]) if len(data) > 0 else None) or "text"
    sub = (_text(data[1]) if len(data) > 1 else None) or "plain"
    params = _params(data[2]) if len(data) > 2 else {}
    encoding = TransferEncoding.from_wire(data[5] if len(data) > 5 else None)
    size = data[6] if len(data) > 6 and isinstance(data[6], int) else None
    disposition, disposition_params = _disposition(data[7:])
    filename = disposition_params.get("filename") or params.get("name")
    return MessagePart(
        part_id=part_id,
        mime_type=f"{main}/{sub}".lower(),
        encoding=encoding,
        charset=params.get("charset"),
        size=size,
        filename=filename,
        disposition=disposition,
    )


def build_structure(uid: int, bodystructure: Sequence[Any]) -> MessageStructure:
    """Build a :class:`MessageStructure` from an ``imapclient`` ``BODYSTRUCTURE``."""

    return MessageStructure(uid=uid, root=_build(bodystructure, ROOT_PART_ID))


__all__ = [
    "MessagePart",
    "MessageStructure",
    "PartDescriptor",
    "ROOT_PART_ID",
    "build_structure",
]
