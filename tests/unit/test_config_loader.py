"""
Module: tests/unit/test_config_loader.py

What:
    Validate configuration discovery, YAML parsing and schema validation.

Why:
    A typo in ``mailaccess.yaml`` must surface as one clear
    :class:`ConfigLoadError` naming the file, never as a half-configured
    connection.
"""

import pytest

from mailaccess.config import CONFIG_ENV, ConfigLoadError, load_config, parse_config
from mailaccess.errors import MailAccessError

VALID_YAML = """\
version: 1
server:
  host: imap.example.org
  port: 143
  ssl: false
  username: alice
  password: s3cret
  prefix: "INBOX."
default_mailbox: Archive
logging:
  level: debug
"""


def test_parse_config_defaults(config_payload):
    config = parse_config(config_payload)
    assert config.server.port == 993
    assert config.server.ssl is True
    assert config.server.prefix == ""
    assert config.default_mailbox == "INBOX"
    assert config.search_charset == "UTF-8"
    assert config.logging.level == "INFO"
    assert config.server.spec().name == "imaps://imap.example.org:993"


def test_password_is_hidden_from_repr(config_payload):
    assert "s3cret" not in repr(parse_config(config_payload))


def test_load_explicit_path(tmp_path):
    path = tmp_path / "mail.yaml"
    path.write_text(VALID_YAML, encoding="utf-8")
    config = load_config(path)
    assert config.server.spec().name == "imap://imap.example.org:143"
    assert config.server.prefix == "INBOX."
    assert config.default_mailbox == "Archive"
    assert config.logging.level == "DEBUG"


def test_environment_variable_is_honoured(tmp_path, monkeypatch):
    path = tmp_path / "env.yaml"
    path.write_text(VALID_YAML, encoding="utf-8")
    monkeypatch.setenv(CONFIG_ENV, str(path))
    monkeypatch.chdir(tmp_path)
    assert load_config().server.username == "alice"


def test_working_directory_file_is_found(tmp_path, monkeypatch):
    (tmp_path / "mailaccess.yaml").write_text(VALID_YAML, encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    assert load_config().default_mailbox == "Archive"


def test_missing_explicit_path_raises(tmp_path):
    with pytest.raises(ConfigLoadError, match="missing"):
        load_config(tmp_path / "absent.yaml")


def test_nothing_found_raises(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    with pytest.raises(ConfigLoadError, match="Unable to locate"):
        load_config()


def test_invalid_yaml_names_file(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("server: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigLoadError, match="broken.yaml"):
        load_config(path)


@pytest.mark.parametrize(
    "payload",
    [
        {"server": {"host": "h", "username": "u"}},
        {"server": {"host": "", "username": "u", "password": "p"}},
        {"server": {"host": "h", "username": "u", "password": "p", "port": 0}},
        {"server": {"host": "h", "username": "u", "password": "p", "tls": True}},
        {"server": {"host": "h", "username": "u", "password": "p"}, "version": 2},
        {"server": {"host": "h", "username": "u", "password": "p"}, "logging": {"level": "loud"}},
    ],
)
def test_schema_violations_raise(payload):
    with pytest.raises(ConfigLoadError):
        parse_config(payload)


def test_non_mapping_document(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigLoadError, match="mapping"):
        load_config(path)


def test_config_errors_share_the_library_root():
    assert issubclass(ConfigLoadError, MailAccessError)
