"""Packager exceptions."""

from typing import List, Optional
from dataclasses import dataclass


@dataclass
class ValidationError:
    """Single validation error."""
    message: str
    path: str = ""
    shape: bool = False


class PackagerError(Exception):
    """Base class for every error raised by the packager."""


class ConfigLoadError(PackagerError):
    """Raised when a configuration cannot be loaded.

    Load errors are fatal to the whole run; the CLI maps them to ``exit_code``.
    """

    exit_code = 2


class ConfigReadError(ConfigLoadError):
    """The configuration file could not be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to read configuration '{path}': {reason}")


class DecodeError(ConfigLoadError):
    """Raised when the document is not valid structured data.

    The loader collects every problem it finds before raising, so ``errors``
    holds the complete list.
    """

    def __init__(self, errors: List[ValidationError]):
        self.errors = errors

        messages = []
        for error in errors:
            if error.path:
                messages.append(f"Validation error: {error.path}: {error.message}")
            else:
                messages.append(f"Validation error: {error.message}")

        super().__init__("\n".join(messages))


class InvalidCommandShape(DecodeError):
    """A command entry names zero or several variants, or misses required fields."""


class CommandError(PackagerError):
    """Base class for per-command execution failures."""

    kind: Optional[str] = None

    def __init__(self, message: str, kind: Optional[str] = None):
        if kind is not None:
            self.kind = kind
        super().__init__(message)


class CommandIOError(CommandError):
    """File read, write, copy or process launch failure."""


class SourceNotFound(CommandError):
    """Copy source is missing or is not a directory."""

    kind = "copy"

    def __init__(self, source: str):
        self.source = source
        super().__init__(f"Source directory not found: {source}")


class InvalidPattern(CommandError):
    """Replace regex (or its replacement template) is not valid."""

    kind = "replace"

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid pattern '{pattern}': {reason}")


class NoFilesMatched(CommandError):
    """Replace glob expanded to zero paths."""

    kind = "replace"

    def __init__(self, pattern: str):
        self.pattern = pattern
        super().__init__(f"No files matched glob pattern: {pattern}")


class GlobExpansionError(CommandError):
    """Replace glob could not be expanded."""

    kind = "replace"

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Failed to expand glob pattern '{pattern}': {reason}")


class CommandFailed(CommandError):
    """Run command exited with a non-success status."""

    kind = "run"

    def __init__(self, command: str, exit_code: int, stderr: str = ""):
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr

        message = f"Command '{command}' failed with exit code {exit_code}"
        if stderr.strip():
            message += f": {stderr.strip()}"
        super().__init__(message)
