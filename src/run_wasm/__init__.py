"""run-wasm: build a cargo package or example for wasm and serve it.

Typical use from a workspace runner script::

    from run_wasm import run_wasm_with_css

    raise SystemExit(run_wasm_with_css("body { margin: 0px; }"))
"""

from __future__ import annotations

__version__ = "0.1.0"

from run_wasm.config import Configuration, ToolchainEnvironment, resolve
from run_wasm.errors import (
    ArtifactError,
    ConfigError,
    ConfigErrorKind,
    ExternalToolError,
    GuardError,
    PortParseError,
    RunWasmError,
)
from run_wasm.main import run_wasm, run_wasm_with_css
from run_wasm.pipeline import BuildPipeline, PipelineResult, PipelineStatus
from run_wasm.planner import BuildPlan, plan

__all__ = [
    "__version__",
    "ArtifactError",
    "BuildPipeline",
    "BuildPlan",
    "ConfigError",
    "ConfigErrorKind",
    "Configuration",
    "ExternalToolError",
    "GuardError",
    "PipelineResult",
    "PipelineStatus",
    "PortParseError",
    "RunWasmError",
    "ToolchainEnvironment",
    "plan",
    "resolve",
    "run_wasm",
    "run_wasm_with_css",
]
