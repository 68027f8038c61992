"""Build stages; each returns a typed result for the driver to inspect."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from .context import Context
from .shell import ToolResult
from .specs import Directory, Present
from .targets import BuildTarget
from .wrapper import inject

logger = logging.getLogger(__name__)

SYS_CHECK_SCRIPT = "sys_check.sh"
BUNDLE_NAME = "bundle.js"


class StageResult(BaseModel):
    """Outcome of one stage."""

    model_config = ConfigDict(frozen=True)

    stage: str
    ok: bool
    detail: str = ""
    tool: ToolResult | None = None


class Stage(ABC):
    """One step of the build pipeline."""

    name: str = "stage"

    # a failing gate is a prerequisite failure rather than a stage failure
    gate: bool = False

    def passed(self, detail: str = "", tool: ToolResult | None = None) -> StageResult:
        return StageResult(stage=self.name, ok=True, detail=detail, tool=tool)

    def failed(self, detail: str, tool: ToolResult | None = None) -> StageResult:
        return StageResult(stage=self.name, ok=False, detail=detail, tool=tool)

    @abstractmethod
    async def run(self, ctx: Context) -> StageResult: ...


class ToolStage(Stage):
    """A stage that runs a single external command."""

    @abstractmethod
    def command(self, ctx: Context) -> list[str]:
        """Command line for this stage."""

    def missing(self, ctx: Context) -> str | None:
        """Describe a missing input file, if any."""
        return None

    def prepare(self, ctx: Context) -> None:
        """Create whatever output directories the command writes into."""

    def verify(self, ctx: Context, result: ToolResult) -> StageResult:
        """Check the outputs of a successful command."""
        return self.passed(tool=result)

    async def run(self, ctx: Context) -> StageResult:
        if (problem := self.missing(ctx)) is not None:
            return self.failed(problem)

        argv = self.command(ctx)
        if ctx.dry_run:
            logger.info("[DRY RUN] Would run %s", " ".join(argv))
            return self.passed("dry run")

        self.prepare(ctx)
        logger.info("Running %s: %s", self.name, " ".join(argv))
        result = await ctx.run(argv)

        if result.stdout.strip():
            logger.info("%s", result.stdout.rstrip())
        if result.stderr.strip():
            logger.warning("%s", result.stderr.rstrip())

        if not result.ok:
            return self.failed(result.error_text(), tool=result)
        return self.verify(ctx, result)


class SysCheck(ToolStage):
    """Run the system prerequisite check script."""

    name = "syscheck"
    gate = True

    def script(self, ctx: Context) -> Path:
        return ctx.env.script_path(SYS_CHECK_SCRIPT)

    def missing(self, ctx: Context) -> str | None:
        script = self.script(ctx)
        return None if script.is_file() else f"System check script not found: {script}"

    def command(self, ctx: Context) -> list[str]:
        return [ctx.config.toolchain.shell, str(self.script(ctx))]


class Transpile(ToolStage):
    """Strip types from the contract into the dist directory."""

    name = "transpile"

    def __init__(self, contract: Path) -> None:
        self.contract = contract

    def command(self, ctx: Context) -> list[str]:
        toolchain = ctx.resolver(contract=str(self.contract)).command(ctx.config.toolchain.transpiler)
        return [*toolchain, "--outDir", str(ctx.env.dist_dir), str(self.contract)]

    def prepare(self, ctx: Context) -> None:
        Present(Directory(ctx.env.dist_dir))(ctx)

    def verify(self, ctx: Context, result: ToolResult) -> StageResult:
        compiled = ctx.env.compiled_contract_path(self.contract)
        if not compiled.is_file():
            return self.failed(f"Transpiler did not produce {compiled}", tool=result)
        return self.passed(str(compiled), tool=result)


class InjectWrapper(Stage):
    """Specialize the wrapper template for the contract."""

    name = "inject"

    def __init__(self, contract: Path, target: BuildTarget) -> None:
        self.contract = contract
        self.target = target

    async def run(self, ctx: Context) -> StageResult:
        if ctx.dry_run:
            logger.info("[DRY RUN] Would inject %s into %s", self.contract.name, self.target.wrapper_name)
            return self.passed("dry run")
        output = inject(ctx, self.contract, self.target)
        return self.passed(str(output))


class Bundle(ToolStage):
    """Bundle the wrapper and contract into a single script."""

    name = "bundle"

    def __init__(self, target: BuildTarget) -> None:
        self.target = target

    def missing(self, ctx: Context) -> str | None:
        config = ctx.env.bundler_config(self.target)
        return None if config.is_file() else f"Bundler configuration not found: {config}"

    def command(self, ctx: Context) -> list[str]:
        toolchain = ctx.resolver().command(ctx.config.toolchain.bundler)
        return [*toolchain, "--config", str(ctx.env.bundler_config(self.target))]

    def prepare(self, ctx: Context) -> None:
        Present(Directory(ctx.env.build_dir))(ctx)


class Compile(ToolStage):
    """Compile the bundled script into a wasm binary."""

    name = "compile"

    def command(self, ctx: Context) -> list[str]:
        toolchain = ctx.resolver().command(ctx.config.toolchain.compiler)
        bundle = ctx.env.build_dir / BUNDLE_NAME
        return [*toolchain, str(bundle), "-o", str(ctx.env.artifact_path(BuildTarget.WASM))]

    def verify(self, ctx: Context, result: ToolResult) -> StageResult:
        artifact = ctx.env.artifact_path(BuildTarget.WASM)
        if not artifact.is_file():
            return self.failed(f"Compiler did not produce {artifact}", tool=result)
        return self.passed(str(artifact), tool=result)
