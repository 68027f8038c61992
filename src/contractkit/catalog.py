"""Example catalog: the example contracts a project can be initialized from."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from pathlib import Path

from pydantic import BaseModel

from .context import Context
from .errors import ExampleNotFoundError, WriteError
from .specs import CopiedFile, Directory, Ensure, Present
from .targets import BuildTarget

logger = logging.getLogger(__name__)

CONTRACT_STEM = "example-contract"
DEFAULT_EXAMPLE = "fungible-token"

_PROGRAM_IMPORT = re.compile(r"^import \{ (.*) \} from '.*/lib/classes/programs/.*'*$", re.MULTILINE)
_TYPES_IMPORT = re.compile(r"^import \{ (.*) \} from '.*/lib'$", re.MULTILINE)


class Example(BaseModel):
    """One example contract with its recorded inputs."""

    name: str
    path: Path

    def contract(self, suffix: str) -> Path:
        return self.path / f"{CONTRACT_STEM}{suffix}"

    @property
    def inputs_dir(self) -> Path:
        return self.path / "inputs"

    @property
    def inputs(self) -> list[Path]:
        if not self.inputs_dir.is_dir():
            return []
        return sorted(p for p in self.inputs_dir.iterdir() if p.is_file())

    def localize(self, text: str, ctx: Context) -> str:
        """Point the example's library imports at the runtime package or checkout."""
        env = ctx.env
        package = ctx.config.runtime_package

        def _program(m: re.Match) -> str:  # type: ignore[type-arg]
            name = m.group(1)
            source = package if env.is_installed_package else f"./lib/classes/programs/{name}"
            return f"import {{ {name} }} from '{source}';"

        text = _PROGRAM_IMPORT.sub(_program, text)

        if env.is_typed_project:
            source = package if env.is_installed_package else "./lib"
            text = _TYPES_IMPORT.sub(lambda m: f"import {{ {m.group(1)} }} from '{source}';", text)

        return text

    def install(self, ctx: Context) -> Path:
        """Copy the contract and its inputs into the project.

        Returns the path of the copied contract.
        """
        env = ctx.env
        source = self.contract(env.contract_suffix)
        if not source.is_file():
            raise ExampleNotFoundError(f"Example '{self.name}' has no {source.name}")

        dest = env.project_root / source.name
        logger.info("Copying %s to %s", source, dest)
        try:
            dest.write_text(self.localize(source.read_text(encoding="utf-8"), ctx), encoding="utf-8")
        except OSError as exc:
            raise WriteError(f"Unable to write {dest}: {exc}") from exc

        if self.inputs:
            Present(Directory(env.inputs_dir))(ctx)
            for file in self.inputs:
                Ensure(CopiedFile(file, env.inputs_dir / file.name))(ctx)

        if env.is_installed_package:
            # installed runtimes ship prebuilt support files for build/lib; the
            # wrapper templates only land there once specialized by a build
            wrappers = {target.wrapper_name for target in BuildTarget}
            for file in sorted(env.templates_dir.rglob("*")):
                if file.is_file() and file.name not in wrappers:
                    rel = file.relative_to(env.templates_dir)
                    Ensure(CopiedFile(file, env.build_lib_dir / rel))(ctx)

        return dest


class ExampleCatalog(Mapping[str, Example]):
    """Examples discovered under the runtime package's examples directory."""

    def __init__(self, ctx: Context) -> None:
        self._ctx = ctx
        self._root = ctx.env.examples_dir

    def _scan(self) -> dict[str, Example]:
        if not self._root.is_dir():
            logger.debug("No examples directory at %s", self._root)
            return {}

        suffix = self._ctx.env.contract_suffix
        examples: dict[str, Example] = {}
        for entry in sorted(self._root.iterdir()):
            example = Example(name=entry.name, path=entry)
            if entry.is_dir() and example.contract(suffix).is_file():
                logger.debug("Found example '%s'", entry.name)
                examples[entry.name] = example
        return examples

    def __getitem__(self, name: str) -> Example:
        return self._scan()[name]

    def __contains__(self, name: object) -> bool:
        return name in self._scan()

    def require(self, name: str) -> Example:
        """Return an example by name, raising ExampleNotFoundError if unknown."""
        examples = self._scan()
        if name not in examples:
            available = ", ".join(examples) or "none"
            raise ExampleNotFoundError(f"Unknown example '{name}' (available: {available})")
        return examples[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._scan())

    def __len__(self) -> int:
        return len(self._scan())

    def __repr__(self) -> str:
        return f"ExampleCatalog(root={self._root}, examples={len(self)})"
