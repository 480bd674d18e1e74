"""Pydantic models describing mailaccess configuration documents."""
from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..imap.transport import ServerSpec


class ServerSettings(BaseModel):
    """IMAP server location and credentials."""

    model_config = ConfigDict(extra="forbid")

    host: str = Field(min_length=1)
    port: int = Field(default=993, gt=0, lt=65536)
    ssl: bool = True
    username: str
    password: str = Field(repr=False)
    timeout: Optional[float] = Field(default=None, gt=0)
    prefix: str = ""

    def spec(self) -> ServerSpec:
        return ServerSpec(host=self.host, port=self.port, ssl=self.ssl, timeout=self.timeout)


class LoggingSettings(BaseModel):
    """Structured logging defaults."""

    model_config = ConfigDict(extra="forbid")

    component: str = "mailaccess"
    level: Literal["DEBUG", "INFO", "WARN", "WARNING", "ERROR"] = "INFO"

    @field_validator("level", mode="before")
    @classmethod
    def _upper(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


class MailAccessConfig(BaseModel):
    """Root configuration loaded from ``mailaccess.yaml``."""

    model_config = ConfigDict(extra="forbid")

    version: Literal[1] = 1
    server: ServerSettings
    default_mailbox: str = "INBOX"
    search_charset: str = "UTF-8"
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


__all__ = ["LoggingSettings", "MailAccessConfig", "ServerSettings"]
