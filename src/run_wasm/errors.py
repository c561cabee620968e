"""Exception hierarchy for run-wasm.

This module defines the exception classes raised by the build pipeline:
- RunWasmError: Base exception for all run-wasm errors
- ConfigError: Raised when command line arguments cannot be resolved
- GuardError: Raised when the embedding application passes disallowed CSS
- ExternalToolError: Raised when an external tool cannot be launched
- ArtifactError: Raised when the wasm artifact cannot be turned into bindings
- PortParseError: Raised when the dev server port is not a valid port

User-facing messages are safe to display. Technical details are logged
via structlog and never shown to the user.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError as PydanticValidationError

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails

logger = structlog.get_logger(__name__)

# Exit codes following sysexits.h convention
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # User error (bad arguments, bad port)
EXIT_SYSTEM_ERROR = 2  # System error (missing tool, missing artifact)
EXIT_INTERRUPTED = 130
EXIT_SIGNAL_BASE = 128  # Shell convention for a child killed by a signal


def compiler_exit_code(returncode: int) -> int:
    """Map a subprocess return code to a process exit code.

    A negative return code means the child was killed by that signal;
    shells report it as 128 + signal number.
    """
    if returncode < 0:
        return EXIT_SIGNAL_BASE - returncode
    return returncode


class RunWasmError(Exception):
    """Base exception for run-wasm.

    Args:
        user_message: Safe message to display to the user.
        internal_details: Optional technical details for logging. This is
            logged internally but never printed to the console.

    Example:
        >>> raise RunWasmError(
        ...     "wasm-bindgen failed",
        ...     internal_details="exit status 1: it looks like the Rust project used ...",
        ... )
    """

    exit_code: int = EXIT_SYSTEM_ERROR

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        """Initialize RunWasmError with user message and optional internal details.

        Args:
            user_message: Safe message to display to the user.
            internal_details: Technical details for internal logging only.
        """
        super().__init__(user_message)
        self.user_message = user_message
        self.internal_details = internal_details

        if internal_details:
            logger.error(
                "run_wasm_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class ConfigErrorKind(str, Enum):
    """Reason a command line could not be resolved.

    Attributes:
        UNKNOWN_OPTION: A token starting with '-' was not a recognized flag
        MISSING_NAME: No NAME argument was given
        TOO_MANY_ARGS: More than one free argument was given
        MALFORMED_OPTION: An option was missing its value or had a bad value
    """

    UNKNOWN_OPTION = "unknown_option"
    MISSING_NAME = "missing_name"
    TOO_MANY_ARGS = "too_many_args"
    MALFORMED_OPTION = "malformed_option"


class ConfigError(RunWasmError):
    """Raised when the command line cannot be resolved into a Configuration.

    This is a normal control outcome: the caller prints the message and the
    usage text and does not start the pipeline.

    Attributes:
        kind: Why resolution failed.
        free_args: Offending free arguments, for diagnostics.

    Example:
        >>> raise ConfigError(ConfigErrorKind.UNKNOWN_OPTION, "Unknown option --relase")
    """

    exit_code = EXIT_USER_ERROR

    def __init__(
        self,
        kind: ConfigErrorKind,
        user_message: str,
        *,
        free_args: tuple[str, ...] = (),
        internal_details: str | None = None,
    ) -> None:
        super().__init__(user_message, internal_details=internal_details)
        self.kind = kind
        self.free_args = free_args


class GuardError(RunWasmError):
    """Raised when the CSS handed in by the embedding application is disallowed.

    The CSS is embedded unescaped into a ``<style>`` element, so a closing
    ``</style>`` would let it inject elements into the page. This is a
    programming error of the caller and is not caught by the entry points.
    """


class ExternalToolError(RunWasmError):
    """Raised when an external tool (cargo) cannot be launched at all.

    A tool that runs and exits non-zero is not an error here: cargo has
    already printed its own diagnostics.

    Attributes:
        tool: Name or path of the binary that failed to start.
    """

    def __init__(self, tool: str, *, internal_details: str | None = None) -> None:
        super().__init__(
            f"Could not run '{tool}'. Is it installed and on PATH?",
            internal_details=internal_details,
        )
        self.tool = tool


class ArtifactError(RunWasmError):
    """Raised when the predicted wasm artifact cannot be processed by wasm-bindgen.

    Covers a missing artifact (cargo wrote it somewhere else), a missing
    wasm-bindgen binary and a failing wasm-bindgen run.

    Attributes:
        artifact_path: The artifact path that was handed to wasm-bindgen.
    """

    def __init__(
        self,
        user_message: str,
        *,
        artifact_path: str,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(user_message, internal_details=internal_details)
        self.artifact_path = artifact_path


class PortParseError(RunWasmError):
    """Raised when --port is not an integer in the range 0-65535.

    Attributes:
        port: The raw value that failed to parse.
    """

    exit_code = EXIT_USER_ERROR

    def __init__(self, port: str) -> None:
        super().__init__(f"Port should be an integer between 0 and 65535, got '{port}'")
        self.port = port


def format_pydantic_error(err: PydanticValidationError) -> str:
    """Format Pydantic validation error into user-friendly message.

    Args:
        err: Pydantic ValidationError instance.

    Returns:
        Formatted error message with field paths and issues.

    Example:
        >>> format_pydantic_error(err)
        "Invalid arguments:\\n  - name: String should have at least 1 character"
    """
    errors: list[ErrorDetails] = err.errors()
    lines = ["Invalid arguments:"]

    for e in errors:
        loc = ".".join(str(x) for x in e["loc"])
        lines.append(f"  - {loc}: {e['msg']}")

    return "\n".join(lines)
