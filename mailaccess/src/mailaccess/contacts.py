"""Contacts parsed from address headers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional, overload


UNKNOWN_HOST = "UNKNOWN_HOST"
"""Placeholder host for addresses that carry no domain part."""


@dataclass(frozen=True)
class Contact:
    """One address from a ``To``/``From``/``Cc``/``Bcc`` header.

    Attributes:
      mailbox: Local part of the address.
      host: Domain part, or :data:`UNKNOWN_HOST`.
      name: Decoded display name, if any.
      adl: Obsolete source route (``@relay1,@relay2``), if any.
    """

    mailbox: str
    host: str
    name: Optional[str] = None
    adl: Optional[str] = None

    @property
    def address(self) -> str:
        return f"{self.mailbox}@{self.host}"

    def __str__(self) -> str:
        if self.name:
            return f"{self.name} <{self.address}>"
        return self.address


class ContactList:
    """Ordered, list-like collection of :class:`Contact` objects."""

    def __init__(self, contacts: Optional[List[Contact]] = None) -> None:
        self._contacts: List[Contact] = list(contacts or [])

    def add_contact(
        self,
        mailbox: str,
        host: str,
        name: Optional[str] = None,
        adl: Optional[str] = None,
    ) -> Contact:
        contact = Contact(mailbox=mailbox, host=host, name=name or None, adl=adl or None)
        self._contacts.append(contact)
        return contact

    def addresses(self) -> List[str]:
        return [contact.address for contact in self._contacts]

    def __iter__(self) -> Iterator[Contact]:
        return iter(self._contacts)

    def __len__(self) -> int:
        return len(self._contacts)

    @overload
    def __getitem__(self, index: int) -> Contact: ...

    @overload
    def __getitem__(self, index: slice) -> List[Contact]: ...

    def __getitem__(self, index):
        return self._contacts[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ContactList):
            return self._contacts == other._contacts
        return NotImplemented

    def __repr__(self) -> str:
        return f"ContactList({self._contacts!r})"

    def __str__(self) -> str:
        return ", ".join(str(contact) for contact in self._contacts)


__all__ = ["Contact", "ContactList", "UNKNOWN_HOST"]
