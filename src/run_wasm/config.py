"""Command line and environment resolution.

Turns the raw argument vector into an immutable Configuration and the
process environment into an immutable ToolchainEnvironment. Both are
resolved once at startup and passed explicitly to the later stages.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from pathlib import Path

import click
import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from run_wasm.errors import ConfigError, ConfigErrorKind, format_pydantic_error
from run_wasm.observability import LOG_LEVELS

logger = structlog.get_logger(__name__)

PROG_NAME = "run-wasm"
FLAG_PREFIX = "-"

DEFAULT_HOST = "localhost"
DEFAULT_PORT = "8000"

# Environment variables read by ToolchainEnvironment.from_environ
CARGO_ENV = "CARGO"
WASM_BINDGEN_ENV = "WASM_BINDGEN"
WORKSPACE_ROOT_ENV = "RUN_WASM_WORKSPACE_ROOT"
MANIFEST_DIR_ENV = "CARGO_MANIFEST_DIR"
LOG_LEVEL_ENV = "RUN_WASM_LOG_LEVEL"


class Configuration(BaseModel):
    """Validated command line configuration.

    Attributes:
        name: Name of the package or example to build.
        example: Build the example NAME instead of the package NAME.
        release: Build with the release profile.
        features: Comma separated cargo features, passed through as given.
        build_only: Only build the artifacts, do not start the dev server.
        host: Dev server host, None means localhost.
        port: Dev server port as typed; parsed only when serving.

    Example:
        >>> config = Configuration(name="mycrate", release=True, features="a,b")
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Package or example name")
    example: bool = Field(default=False, description="Build an example")
    release: bool = Field(default=False, description="Use the release profile")
    features: str | None = Field(default=None, description="Comma separated features")
    build_only: bool = Field(default=False, description="Skip the dev server")
    host: str | None = Field(default=None, description="Dev server host")
    port: str | None = Field(default=None, description="Dev server port")

    @property
    def serve_host(self) -> str:
        """Host the dev server binds to."""
        return self.host if self.host is not None else DEFAULT_HOST

    @property
    def serve_port(self) -> str:
        """Unparsed port the dev server binds to."""
        return self.port if self.port is not None else DEFAULT_PORT


class ToolchainEnvironment(BaseModel):
    """Toolchain binaries and workspace location.

    Attributes:
        cargo: cargo binary to invoke.
        wasm_bindgen: wasm-bindgen binary to invoke.
        workspace_root: Root of the cargo workspace; cargo runs here and all
            output paths are relative to it.
        log_level: structlog level for the run.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    cargo: str = Field(default="cargo", min_length=1, description="cargo binary")
    wasm_bindgen: str = Field(
        default="wasm-bindgen", min_length=1, description="wasm-bindgen binary"
    )
    workspace_root: Path = Field(..., description="Cargo workspace root")
    log_level: str = Field(default="warning", description="Log level")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        if value.lower() not in LOG_LEVELS:
            raise ValueError(f"must be one of: {', '.join(LOG_LEVELS)}")
        return value.lower()

    @classmethod
    def from_environ(
        cls, environ: Mapping[str, str] | None = None, cwd: Path | None = None
    ) -> ToolchainEnvironment:
        """Build the environment from environment variables.

        The workspace root is RUN_WASM_WORKSPACE_ROOT when set, else the
        parent of CARGO_MANIFEST_DIR (the runner crate sits one level below
        the workspace root when started through ``cargo run``), else the
        current working directory.

        Args:
            environ: Variables to read, defaults to os.environ.
            cwd: Fallback workspace root, defaults to Path.cwd().

        Returns:
            Resolved ToolchainEnvironment.
        """
        env = os.environ if environ is None else environ

        if env.get(WORKSPACE_ROOT_ENV):
            root = Path(env[WORKSPACE_ROOT_ENV])
        elif env.get(MANIFEST_DIR_ENV):
            root = Path(env[MANIFEST_DIR_ENV]).parent
        else:
            root = cwd if cwd is not None else Path.cwd()

        return cls(
            cargo=env.get(CARGO_ENV) or "cargo",
            wasm_bindgen=env.get(WASM_BINDGEN_ENV) or "wasm-bindgen",
            workspace_root=root,
            log_level=env.get(LOG_LEVEL_ENV) or "warning",
        )


VALUE_OPTIONS = ("--features", "--host", "--port")
END_OF_OPTIONS = "--"


def _unknown_option(arg: str) -> ConfigError:
    return ConfigError(ConfigErrorKind.UNKNOWN_OPTION, f"Unknown option {arg}")


def _single(values: tuple[str, ...]) -> str | None:
    return values[0] if values else None


def _reject_end_of_options(raw_args: Sequence[str]) -> None:
    """Treat a bare ``--`` as an unknown option instead of an end marker."""
    args = iter(raw_args)
    for arg in args:
        if arg in VALUE_OPTIONS:
            next(args, None)
        elif arg == END_OF_OPTIONS:
            raise _unknown_option(arg)


@click.command(
    PROG_NAME,
    add_help_option=False,
    context_settings={"ignore_unknown_options": True},
)
@click.option(
    "--release",
    count=True,
    help="Build in release mode, with optimizations",
)
@click.option(
    "--example",
    count=True,
    help="Build and run the example NAME instead of a package NAME",
)
@click.option(
    "--features",
    "features",
    type=str,
    multiple=True,
    metavar="<FEATURES>...",
    help="Comma separated list of features to activate",
)
@click.option(
    "--build-only",
    count=True,
    help="Only build the WASM artifacts, do not run the dev server",
)
@click.option(
    "--host",
    type=str,
    multiple=True,
    metavar="<HOST>",
    help=f"Makes the dev server listen on host (default '{DEFAULT_HOST}')",
)
@click.option(
    "--port",
    type=str,
    multiple=True,
    metavar="<PORT>",
    help=f"Makes the dev server listen on port (default '{DEFAULT_PORT}')",
)
@click.argument("free_args", nargs=-1, metavar="NAME")
def run_wasm_command(
    release: int,
    example: int,
    features: tuple[str, ...],
    build_only: int,
    host: tuple[str, ...],
    port: tuple[str, ...],
    free_args: tuple[str, ...],
) -> Configuration:
    """Build a cargo package or example for wasm and serve it in the browser.

    NAME is the package (crate) within the workspace to run, or the example
    to run when --example is given.
    """
    # A repeated option is left over after the first occurrence is taken
    flags = {"--release": release, "--example": example, "--build-only": build_only}
    for option, count in flags.items():
        if count > 1:
            raise _unknown_option(option)
    values = {"--features": features, "--host": host, "--port": port}
    for option, given in values.items():
        if len(given) > 1:
            raise _unknown_option(option)

    for arg in free_args:
        if arg.startswith(FLAG_PREFIX):
            raise _unknown_option(arg)

    if not free_args:
        raise ConfigError(
            ConfigErrorKind.MISSING_NAME, "Expected NAME arg, but there was no NAME arg"
        )
    if len(free_args) > 1:
        raise ConfigError(
            ConfigErrorKind.TOO_MANY_ARGS,
            f"Expected exactly one free arg, but there was {len(free_args)} "
            f"free args: {list(free_args)}",
            free_args=free_args,
        )

    try:
        return Configuration(
            name=free_args[0],
            example=example > 0,
            release=release > 0,
            features=_single(features),
            build_only=build_only > 0,
            host=_single(host),
            port=_single(port),
        )
    except PydanticValidationError as e:
        raise ConfigError(
            ConfigErrorKind.MALFORMED_OPTION, format_pydantic_error(e)
        ) from None


def resolve(raw_args: Sequence[str]) -> Configuration:
    """Resolve the raw argument vector (without the program name).

    Args:
        raw_args: Arguments as typed by the user.

    Returns:
        The validated Configuration.

    Raises:
        ConfigError: If an option is unknown or malformed, or if there is
            not exactly one NAME argument.

    Example:
        >>> resolve(["--release", "--features", "a,b", "mycrate"]).features
        'a,b'
    """
    _reject_end_of_options(raw_args)
    try:
        with run_wasm_command.make_context(PROG_NAME, list(raw_args)) as ctx:
            config: Configuration = run_wasm_command.invoke(ctx)
    except click.UsageError as e:
        raise ConfigError(ConfigErrorKind.MALFORMED_OPTION, e.format_message()) from None

    logger.debug("configuration_resolved", **config.model_dump())
    return config


def usage_text() -> str:
    """Render the full usage text of the command line."""
    ctx = click.Context(run_wasm_command, info_name=PROG_NAME)
    return run_wasm_command.get_help(ctx)
