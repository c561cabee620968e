"""External build tools: cargo and wasm-bindgen.

The pipeline only depends on the Compiler and Bindgen protocols, so tests
can swap in doubles for the real child processes.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

import structlog

from run_wasm.errors import ArtifactError, ExternalToolError

logger = structlog.get_logger(__name__)


class Compiler(Protocol):
    """Builds the wasm artifact."""

    def build(self, args: Sequence[str], cwd: Path) -> int:
        """Run the compiler and return its exit status."""
        ...


class Bindgen(Protocol):
    """Turns a wasm artifact into web-loadable modules and JS bindings."""

    def generate(
        self,
        input_path: Path,
        out_dir: Path,
        *,
        web: bool = True,
        omit_default_module_path: bool = False,
    ) -> None:
        """Write the bindings for ``input_path`` into ``out_dir``."""
        ...


class CargoCompiler:
    """Runs cargo as a child process.

    cargo's output goes straight to the terminal; a non-zero exit status is
    returned, not raised, because cargo has already explained it.

    Attributes:
        cargo: cargo binary, e.g. the value of $CARGO.
    """

    def __init__(self, cargo: str = "cargo") -> None:
        self.cargo = cargo

    def build(self, args: Sequence[str], cwd: Path) -> int:
        """Run ``cargo <args>`` in ``cwd``.

        Raises:
            ExternalToolError: If the cargo binary cannot be started.
        """
        cmd = [self.cargo, *args]
        logger.debug("cargo_invoked", cmd=cmd, cwd=str(cwd))
        try:
            completed = subprocess.run(cmd, cwd=str(cwd), check=False)
        except OSError as e:
            raise ExternalToolError(self.cargo, internal_details=str(e)) from e
        logger.debug("cargo_exited", returncode=completed.returncode)
        return completed.returncode


class WasmBindgen:
    """Runs the wasm-bindgen CLI.

    The CLI version must match the wasm-bindgen crate version the unit was
    built against; wasm-bindgen reports a mismatch on stderr.

    Attributes:
        binary: wasm-bindgen binary, e.g. the value of $WASM_BINDGEN.
    """

    def __init__(self, binary: str = "wasm-bindgen") -> None:
        self.binary = binary

    def command(
        self,
        input_path: Path,
        out_dir: Path,
        *,
        web: bool = True,
        omit_default_module_path: bool = False,
    ) -> list[str]:
        """Build the wasm-bindgen command line."""
        cmd = [self.binary]
        if web:
            cmd.extend(["--target", "web"])
        if omit_default_module_path:
            cmd.append("--omit-default-module-path")
        cmd.extend(["--out-dir", str(out_dir), str(input_path)])
        return cmd

    def generate(
        self,
        input_path: Path,
        out_dir: Path,
        *,
        web: bool = True,
        omit_default_module_path: bool = False,
    ) -> None:
        """Generate bindings for ``input_path`` into ``out_dir``.

        Raises:
            ArtifactError: If the artifact does not exist, wasm-bindgen cannot
                be started, or wasm-bindgen exits non-zero.
        """
        if not input_path.is_file():
            raise ArtifactError(
                f"WASM artifact not found: {input_path}",
                artifact_path=str(input_path),
            )

        cmd = self.command(
            input_path, out_dir, web=web, omit_default_module_path=omit_default_module_path
        )
        logger.debug("wasm_bindgen_invoked", cmd=cmd)
        try:
            completed = subprocess.run(
                cmd, capture_output=True, text=True, errors="replace", check=False
            )
        except OSError as e:
            raise ArtifactError(
                f"Could not run '{self.binary}'. Install it with: cargo install wasm-bindgen-cli",
                artifact_path=str(input_path),
                internal_details=str(e),
            ) from e

        if completed.returncode != 0:
            stderr = completed.stderr.strip()
            raise ArtifactError(
                f"wasm-bindgen failed on {input_path}" + (f":\n{stderr}" if stderr else ""),
                artifact_path=str(input_path),
                internal_details=f"exit status {completed.returncode}",
            )
