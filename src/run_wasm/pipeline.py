"""Build pipeline: cargo -> wasm-bindgen -> index.html.

Each step short-circuits the rest on failure. The pipeline writes only
into the staging directory and never cleans it; stale files from earlier
runs are overwritten.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field

from run_wasm.config import Configuration
from run_wasm.observability import step
from run_wasm.page import render_host_page, validate_css
from run_wasm.planner import BuildPlan, plan
from run_wasm.toolchain import Bindgen, Compiler

logger = structlog.get_logger(__name__)


class PipelineStatus(str, Enum):
    """Outcome of a pipeline run.

    Attributes:
        SUCCEEDED: Bindings and host page were written
        COMPILER_FAILED: cargo exited non-zero; it has reported the problem
    """

    SUCCEEDED = "succeeded"
    COMPILER_FAILED = "compiler_failed"


class PipelineResult(BaseModel):
    """Result of BuildPipeline.run.

    Attributes:
        status: Pipeline outcome.
        plan: The plan the run followed.
        compiler_returncode: cargo's exit status.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    status: PipelineStatus = Field(..., description="Pipeline outcome")
    plan: BuildPlan = Field(..., description="Plan the run followed")
    compiler_returncode: int = Field(default=0, description="cargo exit status")

    @property
    def succeeded(self) -> bool:
        """Check if the bindings and host page were written."""
        return self.status == PipelineStatus.SUCCEEDED

    @property
    def staging_dir(self) -> Path | None:
        """Staging directory, only when the run succeeded."""
        return self.plan.staging_dir if self.succeeded else None


class BuildPipeline:
    """Runs cargo, wasm-bindgen and the host page step in order.

    Attributes:
        compiler: Builds the wasm artifact.
        bindgen: Generates the web bindings.

    Example:
        >>> from run_wasm.toolchain import CargoCompiler, WasmBindgen
        >>> pipeline = BuildPipeline(CargoCompiler(), WasmBindgen())
        >>> result = pipeline.run(Path("."), Configuration(name="demo"), "body { margin: 0px; }")
        >>> result.succeeded
        True
    """

    def __init__(self, compiler: Compiler, bindgen: Bindgen) -> None:
        self.compiler = compiler
        self.bindgen = bindgen

    def run(self, workspace_root: Path, config: Configuration, css: str) -> PipelineResult:
        """Build ``config.name`` and stage it for serving.

        Args:
            workspace_root: Root of the cargo workspace.
            config: Resolved command line configuration.
            css: CSS for the host page's ``<style>`` element.

        Returns:
            PipelineResult; COMPILER_FAILED when cargo exited non-zero.

        Raises:
            GuardError: If ``css`` contains ``</style>``. Raised before
                anything is built or written.
            ExternalToolError: If cargo cannot be started.
            ArtifactError: If wasm-bindgen cannot process the artifact.
        """
        validate_css(css)

        build_plan = plan(workspace_root, config)
        log = logger.bind(unit=config.name, profile=build_plan.profile)

        with step("compile", unit=config.name):
            returncode = self.compiler.build(build_plan.cargo_args, cwd=workspace_root)
        if returncode != 0:
            log.info("pipeline_stopped", reason="compiler_failed", returncode=returncode)
            return PipelineResult(
                status=PipelineStatus.COMPILER_FAILED,
                plan=build_plan,
                compiler_returncode=returncode,
            )

        build_plan.staging_dir.mkdir(parents=True, exist_ok=True)

        with step("bindgen", artifact=str(build_plan.artifact_path)):
            self.bindgen.generate(
                build_plan.artifact_path,
                build_plan.staging_dir,
                web=True,
                omit_default_module_path=False,
            )

        page = render_host_page(config.name, css)
        build_plan.host_page_path.write_text(page, encoding="utf-8")
        log.info("host_page_written", path=str(build_plan.host_page_path))

        return PipelineResult(status=PipelineStatus.SUCCEEDED, plan=build_plan)
