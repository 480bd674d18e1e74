"""Locate, parse and validate mailaccess configuration files.

What:
  Provide helpers that find ``mailaccess.yaml``, parse it with PyYAML and
  validate it into a :class:`~mailaccess.config.schema.MailAccessConfig`.

Why:
  Connection settings live outside the code and are edited by hand. Every
  failure (missing file, YAML syntax, schema violation) must surface as one
  typed error naming the offending file.

How:
  Candidate paths are tried in precedence order: explicit argument,
  ``MAILACCESS_CONFIG_PATH``, ``./mailaccess.yaml``, then
  ``~/.config/mailaccess/config.yaml``. The first existing file is parsed
  with :func:`yaml.safe_load` and validated with
  :meth:`MailAccessConfig.model_validate`.

Interfaces:
  :class:`ConfigLoadError`, :func:`load_config`, :func:`parse_config`.

Invariants:
  - Returned configurations always passed strict pydantic validation.
  - Nothing is cached; each call reads the file again.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

import yaml
from pydantic import ValidationError as _PydanticValidationError

from ..errors import MailAccessError
from .schema import MailAccessConfig


class ConfigLoadError(MailAccessError):
    """Raised when a configuration document cannot be read or validated."""


CONFIG_ENV = "MAILACCESS_CONFIG_PATH"
DEFAULT_LOCATIONS: Tuple[Path, ...] = (
    Path("mailaccess.yaml"),
    Path("~/.config/mailaccess/config.yaml"),
)


def _candidate_paths(path: Optional[Path]) -> Iterable[Path]:
    """Yield configuration file locations in priority order, deduplicated."""

    seen: set[Path] = set()
    candidates = []
    if path is not None:
        candidates.append(path)
    env_path = os.environ.get(CONFIG_ENV)
    if env_path:
        candidates.append(Path(env_path))
    candidates.extend(DEFAULT_LOCATIONS)
    for candidate in candidates:
        candidate = candidate.expanduser()
        if candidate not in seen:
            seen.add(candidate)
            yield candidate


def parse_config(payload: Mapping[str, Any], source: str = "<memory>") -> MailAccessConfig:
    """Validate an in-memory mapping into a :class:`MailAccessConfig`.

    Raises:
      ConfigLoadError: If ``payload`` is not a mapping or fails validation.
    """

    if not isinstance(payload, Mapping):
        raise ConfigLoadError(f"{source} must contain a mapping at the top-level")
    try:
        return MailAccessConfig.model_validate(dict(payload))
    except _PydanticValidationError as exc:
        raise ConfigLoadError(f"Invalid configuration in {source}: {exc}") from exc


def _load_from_path(path: Path) -> MailAccessConfig:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigLoadError(f"Unable to read configuration file {path}: {exc}") from exc
    try:
        payload = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigLoadError(f"Invalid YAML in {path}: {exc}") from exc
    return parse_config(payload, str(path))


def load_config(path: Optional[Union[str, Path]] = None) -> MailAccessConfig:
    """Resolve, parse and validate the configuration file.

    What:
      Return the first configuration found along the precedence chain.

    Why:
      The CLI and embedding applications share one discovery rule, so an
      operator can rely on ``MAILACCESS_CONFIG_PATH`` everywhere.

    How:
      Walk :func:`_candidate_paths`; an explicitly requested path that does
      not exist is an error rather than a reason to fall through.

    Args:
      path: Optional explicit location of the configuration file.

    Returns:
      The validated configuration.

    Raises:
      ConfigLoadError: If no file is found or the file is invalid.
    """

    requested = Path(path).expanduser() if path is not None else None
    if requested is not None and not requested.exists():
        raise ConfigLoadError(f"Configuration file missing: {requested}")

    searched = []
    for candidate in _candidate_paths(requested):
        if not candidate.exists():
            searched.append(str(candidate))
            continue
        return _load_from_path(candidate)
    raise ConfigLoadError(f"Unable to locate configuration (searched: {', '.join(searched) or '<none>'})")


__all__ = ["CONFIG_ENV", "ConfigLoadError", "load_config", "parse_config"]
