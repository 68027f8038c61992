"""Shared fixtures: fake project trees and a scripted tool runner."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path

import pytest

from contractkit.config import ProjectConfig
from contractkit.context import Context
from contractkit.environment import DEFAULT_RUNTIME_PACKAGE, resolve
from contractkit.shell import ToolResult

NODE_WRAPPER = """\
import start from '../examples/fungible-token/example-contract.js';
process.stdin.setEncoding('utf8');
let data = '';
process.stdin.on('data', (chunk) => { data += chunk; });
process.stdin.on('end', () => {
  console.log(JSON.stringify(start(JSON.parse(data))));
});
"""

WASM_WRAPPER = """\
import start from '../examples/fungible-token/example-contract.js';
import { readInput, writeOutput } from '../lib/versatus';
writeOutput(start(readInput()));
"""

HELPERS = """\
export function readInput() { return {}; }
export function writeOutput(output) { return output; }
"""


def write_runtime(root: Path) -> Path:
    """Lay out the runtime package resources under root."""
    lib = root / "dist" / "lib"
    lib.mkdir(parents=True, exist_ok=True)
    (lib / "node-wrapper.js").write_text(NODE_WRAPPER)
    (lib / "wasm-wrapper.js").write_text(WASM_WRAPPER)
    (lib / "versatus.js").write_text(HELPERS)

    scripts = root / "lib" / "scripts"
    scripts.mkdir(parents=True, exist_ok=True)
    for name in ("sys_check.sh", "check_cli.sh", "check_wasm.sh"):
        (scripts / name).write_text("#!/bin/bash\nexit 0\n")

    for target in ("node", "wasm"):
        (root / "lib" / f"webpack.config.{target}.cjs").write_text("module.exports = {};\n")
        (root / "lib" / f"webpack.config.{target}.dev.cjs").write_text("module.exports = {};\n")

    return root


def make_project(
    root: Path,
    *,
    installed: bool = False,
    typed: bool = False,
) -> Path:
    """Create a project directory in checkout or installed layout."""
    root.mkdir(parents=True, exist_ok=True)
    if installed:
        write_runtime(root / "node_modules" / DEFAULT_RUNTIME_PACKAGE)
    else:
        write_runtime(root)
    if typed:
        (root / "tsconfig.json").write_text("{}\n")
    return root


class FakeRunner:
    """Records commands and answers them through an optional handler.

    The handler receives ``(argv, stdin)`` and returns a ToolResult, or None
    for a successful empty result.
    """

    def __init__(self, handler: Callable[[list[str], bytes | None], ToolResult | None] | None = None):
        self.handler = handler
        self.calls: list[list[str]] = []
        self.stdins: list[bytes | None] = []

    async def __call__(self, argv, *, cwd=None, stdin=None) -> ToolResult:
        argv = [str(a) for a in argv]
        self.calls.append(argv)
        self.stdins.append(stdin)
        await asyncio.sleep(0)
        result = self.handler(argv, stdin) if self.handler else None
        return result if result is not None else ToolResult(argv=argv, returncode=0)

    def ran(self, fragment: str) -> bool:
        return any(fragment in arg for argv in self.calls for arg in argv)


def make_ctx(root: Path, runner=None, *, config: ProjectConfig | None = None, dry_run: bool = False) -> Context:
    config = config or ProjectConfig()
    env = resolve(root, config.runtime_package)
    return Context(env, config, runner=runner or FakeRunner(), dry_run=dry_run)


@pytest.fixture
def project(tmp_path) -> Path:
    return make_project(tmp_path / "proj")


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()
