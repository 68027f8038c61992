"""Build driver: plan and run the pipeline for one contract."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel

from .context import Context
from .errors import ContractNotFoundError, PrereqCheckFailed, StageFailure
from .pipeline import Pipeline
from .stages import Bundle, Compile, InjectWrapper, Stage, StageResult, SysCheck, Transpile
from .targets import BuildTarget

logger = logging.getLogger(__name__)


class ContractBuild(BaseModel):
    """A request to build one contract for one target."""

    contract: Path
    target: BuildTarget = BuildTarget.NODE

    def source(self, ctx: Context) -> Path:
        """Absolute path of the contract, relative paths taken from the project root."""
        path = self.contract
        if not path.is_absolute():
            path = ctx.env.project_root / path
        return path.resolve()

    def pipeline(self, ctx: Context) -> Pipeline:
        """Assemble the stages for this build.

        SYSCHECK -> [TRANSPILE] -> INJECT -> BUNDLE -> [COMPILE]
        """
        contract = self.source(ctx)
        stages: list[Stage] = [SysCheck()]

        if self.target is BuildTarget.NODE and ctx.env.is_typed_project:
            stages.append(Transpile(contract))

        stages.append(InjectWrapper(contract, self.target))
        stages.append(Bundle(self.target))

        if self.target is BuildTarget.WASM:
            stages.append(Compile())

        return Pipeline(name=f"{contract.name}:{self.target}", stages=stages)

    async def build(self, ctx: Context) -> list[StageResult]:
        """Run every stage, raising on the first failure.

        Raises ContractNotFoundError before anything runs if the contract is
        missing, PrereqCheckFailed if the system check fails, and StageFailure
        for any other failing stage.
        """
        contract = self.source(ctx)
        if not contract.is_file():
            raise ContractNotFoundError(f"Contract file not found: {contract}")

        pipeline = self.pipeline(ctx)
        logger.info("Building %s for the %s target", contract.name, self.target)

        results = await pipeline.run(ctx)
        last = results[-1]

        if not last.ok:
            stage = pipeline.stages[len(results) - 1]
            if stage.gate:
                raise PrereqCheckFailed(f"System check failed: {last.detail}", last.tool)
            raise StageFailure(last)

        logger.info("Build complete: %s", ctx.env.artifact_path(self.target))
        return results
