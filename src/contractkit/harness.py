"""Test harness: run a built artifact against recorded JSON inputs."""

from __future__ import annotations

import asyncio
import json
import logging
from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict

from .context import Context
from .errors import InputNotFoundError, NoArtifactError, PrereqCheckFailed, TestFailed
from .targets import ARTIFACT_PROBE_ORDER, BuildTarget

logger = logging.getLogger(__name__)

CLI_CHECK_SCRIPT = "check_cli.sh"
WASM_CHECK_SCRIPT = "check_wasm.sh"
INPUT_SUFFIX = ".json"


class TestStatus(StrEnum):
    __test__ = False

    PASSED = "Passed"
    FAILED = "Failed"


class TestOutcome(BaseModel):
    """Result of running the artifact against one input file."""

    __test__ = False
    model_config = ConfigDict(frozen=True)

    input_name: str
    status: TestStatus
    detail: str = ""
    output: Any = None

    @property
    def passed(self) -> bool:
        return self.status is TestStatus.PASSED


class TestHarness:
    """Feed input files to the built artifact and collect one outcome per file."""

    __test__ = False

    def __init__(self, ctx: Context) -> None:
        self.ctx = ctx

    def detect_target(self) -> BuildTarget:
        """Pick the target whose artifact exists, node first."""
        for target in ARTIFACT_PROBE_ORDER:
            if self.ctx.env.artifact_path(target).is_file():
                logger.debug("Found %s artifact", target)
                return target
        raise NoArtifactError("No build artifacts found; run the build command first.")

    async def check_prerequisites(self, target: BuildTarget) -> None:
        """Run the CLI check script, and the wasm check for wasm artifacts."""
        scripts = [CLI_CHECK_SCRIPT]
        if target is BuildTarget.WASM:
            scripts.append(WASM_CHECK_SCRIPT)

        for name in scripts:
            script = self.ctx.env.script_path(name)
            if not script.is_file():
                raise PrereqCheckFailed(f"Check script not found: {script}")

            logger.debug("Running check script %s", script)
            result = await self.ctx.run([self.ctx.config.toolchain.shell, str(script)])
            if not result.ok:
                raise PrereqCheckFailed(f"{name} failed: {result.error_text()}", result)

    def discover(self, input_path: Path) -> list[Path]:
        """List the input files: the file itself, or a directory's JSON files."""
        if input_path.is_file():
            return [input_path]
        if input_path.is_dir():
            return sorted(
                p for p in input_path.iterdir() if p.is_file() and p.suffix == INPUT_SUFFIX
            )
        raise InputNotFoundError(f"The input path is neither a file nor a directory: {input_path}")

    def command(self, target: BuildTarget, input_file: Path) -> list[str]:
        toolchain = self.ctx.config.toolchain
        runner = toolchain.node_runner if target is BuildTarget.NODE else toolchain.wasm_runner
        resolver = self.ctx.resolver(
            artifact=str(self.ctx.env.artifact_path(target)),
            input=str(input_file),
        )
        return resolver.command(runner)

    async def execute(self, input_file: Path, target: BuildTarget) -> TestOutcome:
        """Run the artifact with one input piped in; raise TestFailed on failure."""
        name = input_file.name
        try:
            data = input_file.read_bytes()
        except OSError as exc:
            raise TestFailed(name, f"unable to read input: {exc}") from exc

        result = await self.ctx.run(self.command(target, input_file), stdin=data)
        if not result.ok:
            raise TestFailed(name, result.error_text())

        try:
            output = json.loads(result.stdout)
        except ValueError:
            detail = result.stderr.strip() or "artifact produced malformed output"
            raise TestFailed(name, detail) from None

        return TestOutcome(input_name=name, status=TestStatus.PASSED, output=output)

    @staticmethod
    def _settle(input_file: Path, result: TestOutcome | BaseException) -> TestOutcome:
        if isinstance(result, TestOutcome):
            return result
        if isinstance(result, TestFailed):
            detail = result.reason
        elif isinstance(result, Exception):
            detail = f"{type(result).__name__}: {result}"
        else:
            raise result
        return TestOutcome(input_name=input_file.name, status=TestStatus.FAILED, detail=detail)

    async def run(self, input_path: str | Path, target: BuildTarget | None = None) -> list[TestOutcome]:
        """Run every input concurrently and return outcomes in discovery order.

        Raises NoArtifactError or PrereqCheckFailed before any input is read.
        A failing input never cancels or hides the result of another.
        """
        if target is None:
            target = self.detect_target()
        elif not self.ctx.env.artifact_path(target).is_file():
            raise NoArtifactError(f"No {target} artifact found; run the build command first.")

        await self.check_prerequisites(target)

        path = Path(input_path)
        if not path.is_absolute():
            path = self.ctx.env.project_root / path
        files = self.discover(path)

        logger.info("Starting test of %d input(s) against the %s artifact", len(files), target)
        results = await asyncio.gather(
            *(self.execute(f, target) for f in files),
            return_exceptions=True,
        )

        outcomes = [self._settle(f, r) for f, r in zip(files, results, strict=True)]
        for outcome in outcomes:
            if outcome.passed:
                logger.debug("%s passed", outcome.input_name)
            else:
                logger.debug("%s failed: %s", outcome.input_name, outcome.detail)
        return outcomes
