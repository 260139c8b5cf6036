"""Exception hierarchy and warning records for the launcher."""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class LauncherError(Exception):
    """Base exception for all launcher errors."""


class CollaboratorMissingError(LauncherError):
    """A required external program (renderer or viewer) is not installed."""

    def __init__(self, name: str, command: str) -> None:
        self.name = name
        self.command = command
        super().__init__(f"{name} not found: '{command}' is not installed or not on PATH")


class ProtocolError(LauncherError):
    """The renderer wrote a line that is not a valid input event."""

    def __init__(self, line: str) -> None:
        self.line = line
        super().__init__(f"Unrecognised renderer output: {line!r}")


class RendererTimeoutError(LauncherError):
    """The renderer did not answer within the configured timeout."""


class RendererBusyError(LauncherError):
    """A scene was presented while another one was still in flight."""


class InvariantError(LauncherError):
    """Internal state disagrees with the scene that was rendered from it."""


class ErrorSeverity(Enum):
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"


@dataclass
class AppError:
    message: str
    severity: ErrorSeverity = ErrorSeverity.WARNING
    recoverable: bool = True


def handle_error(error: AppError) -> str:
    label = error.severity.value.upper()
    message = f"[{label}] {error.message}"
    print(message, file=sys.stderr, flush=True)
    if error.severity == ErrorSeverity.WARNING:
        logger.warning(error.message)
    else:
        logger.error(error.message)
    if error.severity == ErrorSeverity.FATAL and not error.recoverable:
        raise SystemExit(1)
    return message
