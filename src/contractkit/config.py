"""Project configuration: load contractkit.hcl into typed settings."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import hcl2
import jinja2
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .environment import DEFAULT_RUNTIME_PACKAGE
from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "contractkit.hcl"


class Toolchain(BaseModel):
    """External commands invoked by the pipeline."""

    model_config = ConfigDict(extra="forbid")

    shell: str = "bash"
    transpiler: list[str] = Field(default_factory=lambda: ["npx", "tsc"])
    bundler: list[str] = Field(default_factory=lambda: ["npx", "webpack"])
    compiler: list[str] = Field(default_factory=lambda: ["javy", "compile"])
    node_runner: list[str] = Field(default_factory=lambda: ["node", "${artifact}"])
    wasm_runner: list[str] = Field(default_factory=lambda: ["wasmtime", "run", "${artifact}"])


class ProjectConfig(BaseModel):
    """Settings for one contract project."""

    model_config = ConfigDict(extra="forbid")

    runtime_package: str = DEFAULT_RUNTIME_PACKAGE
    strict_imports: bool = False
    toolchain: Toolchain = Field(default_factory=Toolchain)


def render(file: Path, *, context: dict[str, Any] | None = None) -> dict[str, Any]:
    """Render a config file through Jinja2 and parse the result as HCL."""
    text = file.read_text()
    env = jinja2.Environment(
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )
    try:
        text = env.from_string(text).render(context or {})
    except jinja2.TemplateError as exc:
        raise ConfigError(f"{file}: {exc}") from exc

    try:
        return hcl2.loads(text)
    except Exception as exc:
        raise ConfigError(f"{file}: unable to parse HCL: {exc}") from exc


def _flatten_blocks(data: dict[str, Any]) -> dict[str, Any]:
    """Collapse unlabeled HCL blocks, which hcl2 returns as one-item lists."""
    flat: dict[str, Any] = {}
    for key, value in data.items():
        if key == "toolchain":
            if not isinstance(value, list) or len(value) != 1:
                raise ConfigError("exactly one 'toolchain' block is allowed")
            value = value[0]
        flat[key] = value
    return flat


def load(project_root: str | Path) -> ProjectConfig:
    """Load the project configuration, falling back to defaults.

    Raises ConfigError if the file exists but cannot be rendered, parsed or
    validated.
    """
    root = Path(project_root)
    file = root / CONFIG_FILENAME

    if not file.is_file():
        logger.debug("No %s in %s; using defaults", CONFIG_FILENAME, root)
        return ProjectConfig()

    logger.debug("Loading configuration from %s", file)
    data = render(file, context={"env": dict(os.environ), "project_root": str(root.resolve())})

    try:
        return ProjectConfig.model_validate(_flatten_blocks(data))
    except ValidationError as exc:
        raise ConfigError(f"{file}: {exc}") from exc
