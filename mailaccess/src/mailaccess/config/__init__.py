"""Configuration loading and validation for mailaccess.

What:
  Re-export the loader helpers and pydantic models that form the supported
  configuration API.

Interfaces:
  - load_config / parse_config: read ``mailaccess.yaml`` or validate a
    mapping.
  - MailAccessConfig / ServerSettings / LoggingSettings: schema models.
  - ConfigLoadError: raised for every configuration failure.
"""

from .loader import CONFIG_ENV, ConfigLoadError, load_config, parse_config
from .schema import LoggingSettings, MailAccessConfig, ServerSettings

__all__ = [
    "CONFIG_ENV",
    "ConfigLoadError",
    "LoggingSettings",
    "MailAccessConfig",
    "ServerSettings",
    "load_config",
    "parse_config",
]
