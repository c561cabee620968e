"""Allow ``python -m run_wasm``."""

from run_wasm.main import cli

cli()
