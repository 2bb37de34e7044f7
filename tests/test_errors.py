from pathlib import Path

import pytest

from yinx.errors import (
    ConfigError,
    ConfigNotFoundError,
    ConfigValidationError,
    DaemonAlreadyRunningError,
    DaemonError,
    DaemonNotRunningError,
    DatabaseError,
    InvalidConfigValueError,
    JsonError,
    SessionError,
    SessionNotFoundError,
    TomlError,
    ValidationError,
    YinxError,
    YinxIOError,
)


def test_config_error_message():
    err = ConfigError("bad value")
    assert str(err) == "Configuration error: bad value"
    assert err.message == "bad value"


def test_validation_error_fields_and_equality():
    first = ValidationError("storage.data_dir", "must not be empty")
    second = ValidationError("storage.data_dir", "must not be empty")
    assert first == second
    assert first.path == "storage.data_dir"
    assert first.message == "must not be empty"


def test_config_validation_error_keeps_errors():
    problems = [ValidationError("a.b", "x"), ValidationError("c.d", "y")]
    err = ConfigValidationError(problems)
    assert err.errors == problems
    assert str(err).startswith("Configuration validation failed: ")
    assert "a.b" in str(err) and "c.d" in str(err)


def test_config_not_found_error_path():
    err = ConfigNotFoundError("/tmp/missing.toml")
    assert err.path == Path("/tmp/missing.toml")
    assert str(err) == f"Configuration file not found: {Path('/tmp/missing.toml')}"


def test_invalid_config_value_error():
    err = InvalidConfigValueError("daemon.pid_file", "empty")
    assert str(err) == "Invalid configuration value at daemon.pid_file: empty"
    assert (err.path, err.message) == ("daemon.pid_file", "empty")


def test_session_errors():
    assert str(SessionError("closed")) == "Session error: closed"
    err = SessionNotFoundError("abc-123")
    assert err.session_id == "abc-123"
    assert str(err) == "Session not found: abc-123"


def test_io_error_includes_context_and_source():
    source = OSError("disk gone")
    err = YinxIOError("Failed to read file", source)
    assert err.source is source
    assert str(err) == f"IO error: Failed to read file: {source}"


def test_toml_error_variants():
    assert str(TomlError("oops")) == "TOML error: oops"
    ser = TomlError("oops", serialization=True)
    assert ser.serialization is True
    assert str(ser) == "TOML serialization error: oops"


def test_json_error():
    source = ValueError("trailing data")
    err = JsonError("Failed to serialize config", source)
    assert str(err) == f"JSON error: Failed to serialize config: {source}"


def test_database_and_daemon_errors():
    assert str(DatabaseError("locked")) == "Database error: locked"
    assert str(DaemonError("socket")) == "Daemon error: socket"
    assert str(DaemonNotRunningError()) == "Daemon is not running"
    err = DaemonAlreadyRunningError(4242)
    assert err.pid == 4242
    assert str(err) == "Daemon is already running (PID: 4242)"


@pytest.mark.parametrize(
    ("err", "prefix"),
    [
        (ConfigError("x"), "Configuration error: x"),
        (ConfigValidationError([]), "Configuration validation failed: "),
        (ConfigNotFoundError("x"), "Configuration file not found: x"),
        (InvalidConfigValueError("x", "y"), "Invalid configuration value at x: y"),
        (SessionError("x"), "Session error: x"),
        (SessionNotFoundError("x"), "Session not found: x"),
        (YinxIOError("x", OSError("y")), "IO error: x: "),
        (TomlError("x"), "TOML error: x"),
        (JsonError("x", ValueError("y")), "JSON error: x: "),
        (DatabaseError("x"), "Database error: x"),
        (DaemonError("x"), "Daemon error: x"),
        (DaemonNotRunningError(), "Daemon is not running"),
        (DaemonAlreadyRunningError(1), "Daemon is already running (PID: 1)"),
    ],
)
def test_all_errors_catchable_as_base(err, prefix):
    with pytest.raises(YinxError) as excinfo:
        raise err
    assert excinfo.value is err
    assert str(excinfo.value).startswith(prefix)