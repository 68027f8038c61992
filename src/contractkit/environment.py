"""Environment resolution: installed dependency vs. source checkout.

The answer is computed once per process by :func:`resolve` and carried in an
immutable :class:`ExecutionContext`. Every path the pipeline touches is derived
from that context, so all stages agree on where templates, scripts and
outputs live.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from .targets import BuildTarget

logger = logging.getLogger(__name__)

DEFAULT_RUNTIME_PACKAGE = "@versatus/versatus-javascript"
TYPE_CONFIG_MARKER = "tsconfig.json"
HELPERS_FILE = "versatus.js"


class ExecutionContext(BaseModel):
    """Resolved installed-vs-checkout and typed-vs-untyped flags."""

    model_config = ConfigDict(frozen=True)

    is_installed_package: bool
    is_typed_project: bool
    package_root: Path
    project_root: Path

    # -- project outputs --

    @property
    def build_dir(self) -> Path:
        return self.project_root / "build"

    @property
    def build_lib_dir(self) -> Path:
        return self.build_dir / "lib"

    @property
    def dist_dir(self) -> Path:
        return self.project_root / "dist"

    @property
    def inputs_dir(self) -> Path:
        return self.project_root / "inputs"

    def artifact_path(self, target: BuildTarget) -> Path:
        return self.project_root / target.artifact

    # -- runtime package resources --

    @property
    def templates_dir(self) -> Path:
        return self.package_root / "dist" / "lib"

    @property
    def scripts_dir(self) -> Path:
        return self.package_root / "lib" / "scripts"

    @property
    def helpers_path(self) -> Path:
        return self.templates_dir / HELPERS_FILE

    @property
    def examples_dir(self) -> Path:
        if self.is_typed_project:
            return self.package_root / "examples"
        return self.package_root / "dist" / "examples"

    @property
    def contract_suffix(self) -> str:
        return ".ts" if self.is_typed_project else ".js"

    def script_path(self, name: str) -> Path:
        return self.scripts_dir / name

    def template_path(self, target: BuildTarget) -> Path:
        return self.templates_dir / target.wrapper_name

    def bundler_config(self, target: BuildTarget) -> Path:
        """Bundler configuration for a target; checkouts use the dev variant."""
        suffix = "" if self.is_installed_package else ".dev"
        return self.package_root / "lib" / f"webpack.config.{target.value}{suffix}.cjs"

    def compiled_contract_path(self, contract: Path) -> Path:
        """Canonical location of the runnable contract module for the node target."""
        if self.is_typed_project:
            return self.dist_dir / f"{contract.stem}.js"
        return contract


def resolve(
    project_root: str | Path,
    runtime_package: str = DEFAULT_RUNTIME_PACKAGE,
) -> ExecutionContext:
    """Inspect the project directory and return its execution context.

    Only existence checks are performed. A project without the installed
    runtime package is a source checkout of that package; this is a normal
    state, not an error.
    """
    root = Path(project_root).resolve()
    installed_path = root / "node_modules" / runtime_package

    is_installed = installed_path.is_dir()
    is_typed = (root / TYPE_CONFIG_MARKER).is_file()

    ctx = ExecutionContext(
        is_installed_package=is_installed,
        is_typed_project=is_typed,
        package_root=installed_path if is_installed else root,
        project_root=root,
    )

    logger.debug(
        "Resolved environment: installed=%s typed=%s package_root=%s",
        ctx.is_installed_package,
        ctx.is_typed_project,
        ctx.package_root,
    )
    return ctx
