"""Entry points for run-wasm.

``run_wasm_with_css`` is the library call for a workspace's runner script;
``cli`` is the ``run-wasm`` console script.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping, Sequence

import structlog
from pydantic import ValidationError as PydanticValidationError
from rich.markup import escape

from run_wasm.config import ToolchainEnvironment, resolve, usage_text
from run_wasm.errors import (
    EXIT_INTERRUPTED,
    EXIT_SUCCESS,
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    ArtifactError,
    ConfigError,
    ExternalToolError,
    PortParseError,
    compiler_exit_code,
    format_pydantic_error,
)
from run_wasm.observability import configure_logging
from run_wasm.output import error, success, usage_error
from run_wasm.page import validate_css
from run_wasm.pipeline import BuildPipeline
from run_wasm.server import StaticServer, serve
from run_wasm.toolchain import Bindgen, CargoCompiler, Compiler, WasmBindgen

logger = structlog.get_logger(__name__)


def run_wasm_with_css(
    css: str,
    argv: Sequence[str] | None = None,
    environ: Mapping[str, str] | None = None,
    *,
    compiler: Compiler | None = None,
    bindgen: Bindgen | None = None,
    server: StaticServer | None = None,
) -> int:
    """Build a unit for wasm, write its host page and serve it.

    1. Resolve the command line
    2. Compile the unit to wasm with cargo
    3. Run wasm-bindgen on the artifact
    4. Generate an index.html that loads the bindings
    5. Serve the staging directory, unless --build-only is given

    The last step blocks until the process is interrupted.

    The css is placed verbatim into a ``<style type="text/css">`` element of
    the generated page. Browsers add a margin to the body by default, so a
    full page app usually wants::

        raise SystemExit(run_wasm_with_css("body { margin: 0px; }"))

    Args:
        css: CSS for the host page.
        argv: Command line arguments, defaults to ``sys.argv[1:]``.
        environ: Environment variables, defaults to ``os.environ``.
        compiler: Compiler to use, defaults to cargo from the environment.
        bindgen: Bindgen to use, defaults to wasm-bindgen from the environment.
        server: Server to use, defaults to the built-in DevServer.

    Returns:
        Process exit code: 0 on success, 1 for bad arguments, 2 for a missing
        tool or artifact, cargo's own status when cargo failed.

    Raises:
        GuardError: If ``css`` contains ``</style>``.
    """
    validate_css(css)
    args = sys.argv[1:] if argv is None else argv

    try:
        env = ToolchainEnvironment.from_environ(environ)
    except PydanticValidationError as e:
        error(escape(format_pydantic_error(e)))
        return EXIT_USER_ERROR
    configure_logging(env.log_level)

    try:
        config = resolve(args)
    except ConfigError as e:
        usage_error(e.user_message, usage_text())
        return e.exit_code

    pipeline = BuildPipeline(
        compiler if compiler is not None else CargoCompiler(env.cargo),
        bindgen if bindgen is not None else WasmBindgen(env.wasm_bindgen),
    )
    try:
        result = pipeline.run(env.workspace_root, config, css)
    except (ExternalToolError, ArtifactError) as e:
        error(escape(e.user_message))
        return e.exit_code

    if not result.succeeded:
        return compiler_exit_code(result.compiler_returncode)

    success(f"Built `{escape(config.name)}` into {escape(str(result.plan.staging_dir))}")

    if config.build_only:
        return EXIT_SUCCESS

    try:
        serve(config.serve_host, config.serve_port, result.plan.staging_dir, server)
    except PortParseError as e:
        error(escape(e.user_message))
        return e.exit_code
    except OSError as e:
        error(escape(f"Could not start the dev server: {e}"))
        return EXIT_SYSTEM_ERROR
    except KeyboardInterrupt:
        logger.info("interrupted")
        return EXIT_INTERRUPTED
    return EXIT_SUCCESS


def run_wasm(argv: Sequence[str] | None = None) -> int:
    """Same as ``run_wasm_with_css`` with no extra CSS."""
    return run_wasm_with_css("", argv)


def cli() -> None:
    """Console script entry point."""
    raise SystemExit(run_wasm())


if __name__ == "__main__":
    cli()
