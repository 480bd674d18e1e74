"""
Module: tests/unit/test_contacts.py

What:
    Cover the :class:`ContactList` container and the error hierarchy it is
    reported through.
"""

import pytest

from mailaccess.contacts import UNKNOWN_HOST, Contact, ContactList
from mailaccess.errors import DriverError, MailAccessError, SearchError


def test_contact_list_behaves_like_a_sequence():
    contacts = ContactList()
    first = contacts.add_contact("alice", "example.org", "Alice")
    contacts.add_contact("bob", UNKNOWN_HOST, name="")
    assert len(contacts) == 2
    assert contacts[0] is first
    assert contacts[1].name is None
    assert [c.mailbox for c in contacts] == ["alice", "bob"]
    assert contacts[:1] == [first]
    assert contacts.addresses() == ["alice@example.org", f"bob@{UNKNOWN_HOST}"]


def test_string_rendering():
    contacts = ContactList([Contact("alice", "example.org", "Alice"), Contact("bob", "example.org")])
    assert str(contacts) == "Alice <alice@example.org>, bob@example.org"
    assert contacts == ContactList(list(contacts))


def test_contacts_are_immutable():
    contact = Contact("alice", "example.org")
    with pytest.raises(Exception):
        contact.host = "elsewhere"


def test_driver_error_keeps_operation_and_diagnostic():
    error = SearchError("Cannot get mails", "BAD [BADCHARSET]")
    assert isinstance(error, DriverError)
    assert isinstance(error, MailAccessError)
    assert str(error) == "Cannot get mails: BAD [BADCHARSET]"
    assert str(DriverError("Cannot create mailbox 'x'")) == "Cannot create mailbox 'x'"
