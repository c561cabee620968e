"""Shared test fixtures for run-wasm tests.

Provides test doubles for cargo, wasm-bindgen and the dev server, plus a
throwaway cargo workspace directory.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest
import structlog

from run_wasm import output
from run_wasm.errors import ArtifactError


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    PrintLogger looks up sys.stdout when each logger is created, so capsys
    sees events logged inside the test.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


@pytest.fixture(autouse=True)
def plain_console() -> Iterator[None]:
    """Route console output through an uncolored console for assertions."""
    original_console, original_err_console = output.console, output.err_console
    output.console = output.create_console(no_color=True)
    output.err_console = output.create_console(no_color=True, stderr=True)
    yield
    output.console, output.err_console = original_console, original_err_console


@dataclass
class FakeCompiler:
    """Compiler double that records invocations.

    On success it writes an empty file at ``artifact`` when one is set, the
    way cargo leaves the .wasm behind.
    """

    returncode: int = 0
    artifact: Path | None = None
    calls: list[tuple[tuple[str, ...], Path]] = field(default_factory=list)

    def build(self, args: Sequence[str], cwd: Path) -> int:
        self.calls.append((tuple(args), cwd))
        if self.returncode == 0 and self.artifact is not None:
            self.artifact.parent.mkdir(parents=True, exist_ok=True)
            self.artifact.write_bytes(b"\0asm\x01\0\0\0")
        return self.returncode


@dataclass
class FakeBindgen:
    """Bindgen double writing ``<stem>.js`` and ``<stem>_bg.wasm``."""

    calls: list[dict[str, object]] = field(default_factory=list)

    def generate(
        self,
        input_path: Path,
        out_dir: Path,
        *,
        web: bool = True,
        omit_default_module_path: bool = False,
    ) -> None:
        self.calls.append(
            {
                "input_path": input_path,
                "out_dir": out_dir,
                "web": web,
                "omit_default_module_path": omit_default_module_path,
            }
        )
        if not input_path.is_file():
            raise ArtifactError(
                f"WASM artifact not found: {input_path}", artifact_path=str(input_path)
            )
        (out_dir / f"{input_path.stem}.js").write_text("export default function init() {}\n")
        (out_dir / f"{input_path.stem}_bg.wasm").write_bytes(input_path.read_bytes())


@dataclass
class FakeServer:
    """StaticServer double that returns instead of blocking."""

    calls: list[tuple[str, int, Path, bool, str]] = field(default_factory=list)

    def run(self, host: str, port: int, root_dir: Path, reload: bool, headers: str) -> None:
        self.calls.append((host, port, root_dir, reload, headers))


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Return an empty cargo workspace root."""
    root = tmp_path / "workspace"
    root.mkdir()
    (root / "Cargo.toml").write_text('[workspace]\nmembers = ["demo"]\n')
    return root


@pytest.fixture
def fake_compiler() -> FakeCompiler:
    return FakeCompiler()


@pytest.fixture
def fake_bindgen() -> FakeBindgen:
    return FakeBindgen()


@pytest.fixture
def fake_server() -> FakeServer:
    return FakeServer()
