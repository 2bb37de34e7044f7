"""Error types raised throughout the package."""

from __future__ import annotations

from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import Iterable


class YinxError(Exception):
    """Base class for every error the package raises."""


class ConfigError(YinxError):
    """A general configuration problem."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Configuration error: {message}")


@dataclass(frozen=True)
class ValidationError:
    """One failed check on a configuration key."""

    path: str
    message: str


class ConfigValidationError(YinxError):
    """One or more configuration checks failed."""

    def __init__(self, errors: Iterable[ValidationError]) -> None:
        self.errors = list(errors)
        super().__init__(f"Configuration validation failed: {self.errors!r}")


class ConfigNotFoundError(YinxError):
    """The configuration file does not exist."""

    def __init__(self, path: str | PathLike[str]) -> None:
        self.path = Path(path)
        super().__init__(f"Configuration file not found: {self.path}")


class InvalidConfigValueError(YinxError):
    """A configuration key holds a value that is not allowed."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"Invalid configuration value at {path}: {message}")


class SessionError(YinxError):
    """A general session problem."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Session error: {message}")


class SessionNotFoundError(YinxError):
    """No session with the given identifier exists."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


class YinxIOError(YinxError):
    """An operating-system level I/O failure, with context."""

    def __init__(self, context: str, source: BaseException) -> None:
        self.context = context
        self.source = source
        super().__init__(f"IO error: {context}: {source}")


class TomlError(YinxError):
    """TOML could not be parsed, mapped onto the config, or written."""

    def __init__(self, message: str, *, serialization: bool = False) -> None:
        self.message = message
        self.serialization = serialization
        prefix = "TOML serialization error" if serialization else "TOML error"
        super().__init__(f"{prefix}: {message}")


class JsonError(YinxError):
    """JSON could not be read or written, with context."""

    def __init__(self, context: str, source: BaseException) -> None:
        self.context = context
        self.source = source
        super().__init__(f"JSON error: {context}: {source}")


class DatabaseError(YinxError):
    """The storage database reported a failure."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Database error: {message}")


class DaemonError(YinxError):
    """A general daemon problem."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Daemon error: {message}")


class DaemonNotRunningError(YinxError):
    """The daemon was expected to run but does not."""

    def __init__(self) -> None:
        super().__init__("Daemon is not running")


class DaemonAlreadyRunningError(YinxError):
    """A daemon instance is already running."""

    def __init__(self, pid: int) -> None:
        self.pid = pid
        super().__init__(f"Daemon is already running (PID: {pid})")