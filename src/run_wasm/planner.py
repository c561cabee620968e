"""Build planning: Configuration -> BuildPlan.

Pure path and argument arithmetic. Nothing here touches the filesystem
or spawns processes; creating the staging directory is the pipeline's job.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from run_wasm.config import Configuration

WASM_TARGET = "wasm32-unknown-unknown"

# Kept apart from target/ so wasm rustflags never invalidate the native build cache
WASM_TARGET_DIR = Path("target") / "wasm-examples-target"
STAGING_ROOT = Path("target") / "wasm-examples"
HOST_PAGE_FILENAME = "index.html"


class BuildPlan(BaseModel):
    """Everything the pipeline needs to know about one build.

    Attributes:
        workspace_root: Directory cargo runs in.
        cargo_args: Arguments for cargo, without the binary itself.
        profile: "release" or "debug".
        artifact_path: Where cargo is expected to write the .wasm file.
        staging_dir: Where the bindings and host page are written.
        host_page_path: Path of the generated index.html.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    workspace_root: Path = Field(..., description="Cargo workspace root")
    cargo_args: tuple[str, ...] = Field(..., description="cargo arguments")
    profile: str = Field(..., pattern=r"^(release|debug)$", description="Build profile")
    artifact_path: Path = Field(..., description="Expected .wasm artifact")
    staging_dir: Path = Field(..., description="Output directory for web artifacts")
    host_page_path: Path = Field(..., description="Generated host page")


def profile_dir(config: Configuration) -> str:
    """Name of cargo's per-profile output directory."""
    return "release" if config.release else "debug"


def cargo_args(config: Configuration) -> tuple[str, ...]:
    """Build the cargo argument list.

    Example:
        >>> cargo_args(Configuration(name="mycrate", features="a,b", release=True))
        ('build', '--target', 'wasm32-unknown-unknown', '--target-dir',
         'target/wasm-examples-target', '--package', 'mycrate',
         '--features', 'a,b', '--release')
    """
    args = [
        "build",
        "--target",
        WASM_TARGET,
        "--target-dir",
        WASM_TARGET_DIR.as_posix(),
    ]
    if config.example:
        args.extend(["--example", config.name])
    else:
        args.extend(["--package", config.name])
    if config.features is not None:
        args.extend(["--features", config.features])
    if config.release:
        args.append("--release")
    return tuple(args)


def artifact_path(workspace_root: Path, config: Configuration) -> Path:
    """Path cargo writes the .wasm artifact to for this configuration."""
    target_profile = workspace_root / WASM_TARGET_DIR / WASM_TARGET / profile_dir(config)
    if config.example:
        target_profile = target_profile / "examples"
    return target_profile / f"{config.name}.wasm"


def plan(workspace_root: Path, config: Configuration) -> BuildPlan:
    """Derive the BuildPlan for a configuration.

    Args:
        workspace_root: Root of the cargo workspace.
        config: Resolved command line configuration.

    Returns:
        The BuildPlan. Identical inputs always give an equal plan.
    """
    staging_dir = workspace_root / STAGING_ROOT / config.name
    return BuildPlan(
        workspace_root=workspace_root,
        cargo_args=cargo_args(config),
        profile=profile_dir(config),
        artifact_path=artifact_path(workspace_root, config),
        staging_dir=staging_dir,
        host_page_path=staging_dir / HOST_PAGE_FILENAME,
    )
