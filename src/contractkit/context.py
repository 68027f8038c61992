"""Runtime execution context for the build and test pipeline."""

from __future__ import annotations

from typing import Any

from .config import ProjectConfig
from .environment import ExecutionContext
from .resolve import Resolver
from .shell import ToolResult, ToolRunner, run_tool


class Context:
    """Runtime state passed through the build chain and the test harness."""

    def __init__(
        self,
        env: ExecutionContext,
        config: ProjectConfig | None = None,
        *,
        runner: ToolRunner = run_tool,
        dry_run: bool = False,
    ) -> None:
        self.env = env
        self.config = config or ProjectConfig()
        self.runner = runner
        self.dry_run = dry_run

    def resolver(self, **variables: Any) -> Resolver:
        """Return a resolver for configured commands with the given variables."""
        return Resolver({"project_root": str(self.env.project_root), **variables})

    async def run(self, argv: list[str], *, stdin: bytes | None = None) -> ToolResult:
        """Run an external tool from the project root."""
        return await self.runner(argv, cwd=self.env.project_root, stdin=stdin)
