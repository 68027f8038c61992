"""
contractkit command-line interface.

Commands:
  init [EXAMPLE]                      copy an example contract and its inputs
  build FILE [--target node|wasm]     build a contract into a runnable artifact
  test --inputJson PATH               run the artifact against recorded inputs

Examples:
  contractkit init fungible-token
  contractkit build example-contract.ts
  contractkit build example-contract.js --target wasm
  contractkit test --inputJson inputs
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import NoReturn

import typer

from .builder import ContractBuild
from .catalog import DEFAULT_EXAMPLE, ExampleCatalog
from .config import load as load_config
from .context import Context
from .environment import resolve
from .errors import ContractKitError, PrereqCheckFailed, StageFailure
from .harness import TestHarness
from .shell import run_tool
from .targets import BuildTarget

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="contractkit",
    help="Build and test smart-contract modules for node and wasm runtimes.",
    no_args_is_help=True,
    add_completion=False,
)


class GlobalState:
    def __init__(self) -> None:
        self.project_dir: Path = Path(".")


_state = GlobalState()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _context(*, dry_run: bool = False) -> Context:
    """Load configuration and resolve the environment once for this invocation."""
    config = load_config(_state.project_dir)
    env = resolve(_state.project_dir, config.runtime_package)
    logger.debug("Project directory: %s", env.project_root)
    return Context(env, config, runner=run_tool, dry_run=dry_run)


def _fail(exc: ContractKitError) -> NoReturn:
    typer.secho(str(exc), fg=typer.colors.RED, err=True)

    tool = None
    if isinstance(exc, StageFailure):
        tool = exc.result.tool
    elif isinstance(exc, PrereqCheckFailed):
        tool = exc.result

    if tool is not None and tool.stdout.strip():
        typer.echo(tool.stdout.rstrip(), err=True)

    raise typer.Exit(code=1)


@app.callback()
def main_callback(
    project_dir: Path = typer.Option(
        Path("."),
        "--project-dir",
        "-C",
        help="Project directory (defaults to the current directory)",
        file_okay=False,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    _state.project_dir = project_dir
    _configure_logging(verbose)


@app.command("init")
def init_cmd(
    example: str = typer.Argument(DEFAULT_EXAMPLE, help="The example contract to initialize"),
) -> None:
    """Initialize a project with an example contract."""
    typer.secho(f"Initializing example contract: {example}...", fg=typer.colors.YELLOW)
    try:
        ctx = _context()
        contract = ExampleCatalog(ctx).require(example).install(ctx)
    except ContractKitError as exc:
        _fail(exc)

    typer.echo("Example contract and inputs initialized successfully.")
    typer.echo()
    typer.secho("Ready to run:", fg=typer.colors.MAGENTA)
    typer.secho(f"contractkit build {contract.name}", fg=typer.colors.YELLOW)


@app.command("build")
def build_cmd(
    file: Path | None = typer.Argument(None, help="Contract file to include in the build"),
    target: BuildTarget = typer.Option(BuildTarget.NODE, "--target", "-t", help="Build target"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show the stages without running them"),
) -> None:
    """Build the project with the specified contract."""
    if file is None:
        typer.secho("You must specify a contract file to build.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    try:
        ctx = _context(dry_run=dry_run)
        asyncio.run(ContractBuild(contract=file, target=target).build(ctx))
    except ContractKitError as exc:
        _fail(exc)

    if dry_run:
        return

    typer.secho(f"Built {ctx.env.artifact_path(target)}", fg=typer.colors.GREEN)
    typer.echo()
    typer.secho("Ready to run:", fg=typer.colors.MAGENTA)
    typer.secho("contractkit test --inputJson inputs", fg=typer.colors.YELLOW)


@app.command("test")
def test_cmd(
    input_json: Path = typer.Option(
        ...,
        "--inputJson",
        "--input-json",
        help="Path to the JSON input file or directory containing JSON files for testing",
    ),
    show_output: bool = typer.Option(False, "--show-output", help="Print each artifact output"),
) -> None:
    """Run the test suite for the project."""
    try:
        ctx = _context()
        outcomes = asyncio.run(TestHarness(ctx).run(input_json))
    except ContractKitError as exc:
        _fail(exc)

    batch = (ctx.env.project_root / input_json).is_dir()

    if batch:
        typer.echo("All tests completed. Summary of results:")

    for index, outcome in enumerate(outcomes, start=1):
        label = f"Test {index} ({outcome.input_name}):" if batch else f"{outcome.input_name}:"
        if outcome.passed:
            typer.echo(f"{label} " + typer.style("Passed", fg=typer.colors.GREEN))
        else:
            typer.echo(f"{label} " + typer.style("Failed", fg=typer.colors.RED), err=True)
            if outcome.detail:
                typer.echo(f"  {outcome.detail}", err=True)
        if show_output and outcome.output is not None:
            typer.echo(f"  {json.dumps(outcome.output)}")

    # batch runs report failures; a single input that fails is an error
    if not batch and not all(o.passed for o in outcomes):
        raise typer.Exit(code=1)


def main() -> None:
    app()
