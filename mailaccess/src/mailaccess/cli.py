"""mailaccess command-line interface.

What:
  Provide a Typer-based entry point for inspecting an IMAP account: list
  mailboxes, search a mailbox, and print decoded headers or bodies.

Why:
  Operators debugging a server (odd folder encodings, folded headers, broken
  base64 parts) want to see exactly what the mapping layer produces without
  writing a script.

How:
  Every command loads the configuration through
  :func:`mailaccess.config.loader.load_config`, opens a
  :class:`~mailaccess.connection.Connection` via :func:`open_connection`, and
  prints plain text to stdout. Library errors are reported on stderr with
  exit code ``1``.

Interfaces:
  ``app`` (Typer application), ``mailboxes``, ``search``, ``headers``,
  ``body``.

Invariants & Safety:
  - Commands never mark messages as read (all fetches peek).
  - Passwords are never printed.
"""
from __future__ import annotations

import contextlib
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

import typer

from .config.loader import load_config
from .connection import Connection
from .contacts import ContactList
from .errors import MailAccessError
from .filters import Criterion, Filter, SortOrder

app = typer.Typer(help="Inspect IMAP mailboxes through the mailaccess mapping layer")

ConfigOption = typer.Option(None, "--config", "-c", help="Path to mailaccess.yaml")


def open_connection(config_path: Optional[Path]) -> Connection:
    """Build a :class:`Connection` from the configuration at ``config_path``."""

    return Connection(load_config(config_path))


@contextlib.contextmanager
def _session(config_path: Optional[Path]) -> Iterator[Connection]:
    try:
        with open_connection(config_path) as connection:
            yield connection
    except MailAccessError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1)


@app.command()
def mailboxes(config: Optional[Path] = ConfigOption) -> None:
    """List every mailbox on the server."""

    with _session(config) as connection:
        for name in sorted(connection.mailboxes):
            typer.echo(name)


@app.command()
def search(
    mailbox: str = typer.Argument(..., help="Mailbox to search"),
    subject: Optional[str] = typer.Option(None, help="Substring of the Subject header"),
    sender: Optional[str] = typer.Option(None, "--from", help="Substring of the From header"),
    recipient: Optional[str] = typer.Option(None, "--to", help="Substring of the To header"),
    since: Optional[datetime] = typer.Option(None, formats=["%Y-%m-%d"], help="Arrived on or after"),
    before: Optional[datetime] = typer.Option(None, formats=["%Y-%m-%d"], help="Arrived before"),
    unseen: bool = typer.Option(False, "--unseen", help="Only messages without \\Seen"),
    newest_first: bool = typer.Option(False, "--newest-first", help="Reverse arrival order"),
    limit: Optional[int] = typer.Option(None, min=0, help="Maximum number of UIDs"),
    config: Optional[Path] = ConfigOption,
) -> None:
    """Print the UIDs of messages in MAILBOX matching every given option."""

    query = Filter()
    for key, value in (
        (Criterion.SUBJECT, subject),
        (Criterion.FROM, sender),
        (Criterion.TO, recipient),
        (Criterion.SINCE, since),
        (Criterion.BEFORE, before),
    ):
        if value is not None:
            query = query.where(key, value)
    if unseen:
        query = query.where(Criterion.SEEN, False)
    if newest_first:
        query = query.ordered(SortOrder.DESC)
    query = query.paged(limit=limit)

    with _session(config) as connection:
        for uid in connection.get_mailbox(mailbox).search(query):
            typer.echo(str(uid))


@app.command()
def headers(
    mailbox: str = typer.Argument(..., help="Mailbox holding the message"),
    uid: int = typer.Argument(..., help="Message UID"),
    config: Optional[Path] = ConfigOption,
) -> None:
    """Print the decoded headers of one message."""

    with _session(config) as connection:
        for name, value in connection.get_mailbox(mailbox).headers(uid).items():
            if isinstance(value, ContactList):
                value = str(value)
            typer.echo(f"{name}: {value}")


@app.command()
def body(
    mailbox: str = typer.Argument(..., help="Mailbox holding the message"),
    uid: int = typer.Argument(..., help="Message UID"),
    config: Optional[Path] = ConfigOption,
) -> None:
    """Print the decoded text body of one message."""

    with _session(config) as connection:
        typer.echo(connection.get_mailbox(mailbox).body(uid))


if __name__ == "__main__":  # pragma: no cover - manual invocation
    app()
