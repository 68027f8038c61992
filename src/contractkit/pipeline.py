"""Pipeline model: a named, ordered sequence of build stages."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field

from .context import Context
from .stages import Stage, StageResult

logger = logging.getLogger(__name__)


class Pipeline(BaseModel):
    """A named sequence of stages that halts at the first failure."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    stages: list[Stage] = Field(default_factory=list)

    def __iter__(self) -> Iterator[Stage]:  # type: ignore[override]
        return iter(self.stages)

    def __len__(self) -> int:
        return len(self.stages)

    @property
    def stage_names(self) -> list[str]:
        return [stage.name for stage in self.stages]

    async def run(self, ctx: Context) -> list[StageResult]:
        """Run stages in order; later stages never start after a failure.

        Returns the results of every stage that ran, the last of which is the
        failing one if the pipeline halted.
        """
        logger.debug("Running pipeline '%s': %s", self.name, " -> ".join(self.stage_names))
        results: list[StageResult] = []

        for stage in self.stages:
            result = await stage.run(ctx)
            results.append(result)

            if not result.ok:
                logger.error("Stage '%s' failed: %s", stage.name, result.detail)
                break

            logger.debug("Stage '%s' complete", stage.name)

        return results
