"""Wrapper injection: specialize a fixed wrapper template for one contract.

A wrapper template is expected to contain exactly one line of the form::

    import start from '<placeholder contract>';

and, for the wasm target, one line importing the runtime helpers module::

    import { ... } from '<placeholder>/versatus';

Only those lines are rewritten. This is a narrow substitution over a known
template shape, not a general source rewriter.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from .context import Context
from .errors import HelpersNotFoundError, TemplateShapeError, WrapperNotFoundError, WriteError
from .specs import Directory, Present
from .targets import BuildTarget

logger = logging.getLogger(__name__)

CONTRACT_IMPORT = re.compile(r"^import start from '.*';?$", re.MULTILINE)
HELPERS_IMPORT = re.compile(r"^(import .+ from )'[^']*versatus(?:\.js)?';?$", re.MULTILINE)


class WrapperSpecialization(BaseModel):
    """One instantiation of a wrapper template for one build."""

    model_config = ConfigDict(frozen=True)

    target: BuildTarget
    template_path: Path
    output_path: Path
    contract_import_path: str
    helpers_import_path: str | None = None


def _import_path(path: Path, start: Path) -> str:
    """Relative module specifier from ``start`` to ``path``."""
    rel = os.path.relpath(path, start).replace(os.sep, "/")
    return rel if rel.startswith(".") else f"./{rel}"


def specialize(ctx: Context, contract: Path, target: BuildTarget) -> WrapperSpecialization:
    """Compute where a wrapper comes from, where it goes and what it imports."""
    env = ctx.env
    contract = contract.resolve()
    template = env.template_path(target)

    if not template.is_file():
        raise WrapperNotFoundError(f"Wrapper template not found: {template}")

    if target is BuildTarget.NODE:
        # node builds always import the contract from its compiled location
        compiled = env.compiled_contract_path(contract)
        return WrapperSpecialization(
            target=target,
            template_path=template,
            output_path=env.build_lib_dir / target.wrapper_name,
            contract_import_path=_import_path(compiled, env.build_lib_dir),
        )

    if not env.helpers_path.is_file():
        raise HelpersNotFoundError(f"Runtime helpers not found: {env.helpers_path}")

    return WrapperSpecialization(
        target=target,
        template_path=template,
        output_path=env.build_lib_dir / target.wrapper_name,
        contract_import_path=contract.as_posix(),
        helpers_import_path=env.helpers_path.as_posix(),
    )


def _substitute(
    pattern: re.Pattern[str],
    replacement: str,
    text: str,
    *,
    what: str,
    template: Path,
    strict: bool,
) -> str:
    new_text, count = pattern.subn(lambda _: replacement, text, count=1)
    if count == 0:
        if strict:
            raise TemplateShapeError(f"{template}: no {what} import line found")
        logger.warning("%s: no %s import line found; leaving template unchanged", template, what)
    return new_text


def rewrite(text: str, spec: WrapperSpecialization, *, strict: bool = False) -> str:
    """Apply the import substitutions for a specialization to template text."""
    text = _substitute(
        CONTRACT_IMPORT,
        f"import start from '{spec.contract_import_path}';",
        text,
        what="contract",
        template=spec.template_path,
        strict=strict,
    )

    if spec.helpers_import_path is not None:
        match = HELPERS_IMPORT.search(text)
        clause = match.group(1) if match else ""
        text = _substitute(
            HELPERS_IMPORT,
            f"{clause}'{spec.helpers_import_path}';",
            text,
            what="helpers",
            template=spec.template_path,
            strict=strict,
        )

    return text


def inject(ctx: Context, contract: Path, target: BuildTarget = BuildTarget.NODE) -> Path:
    """Write the specialized wrapper for a contract into build/lib.

    Returns the path of the generated wrapper. The template and the contract
    are never modified.
    """
    spec = specialize(ctx, contract, target)

    logger.info("Injecting %s into %s", contract.name, spec.output_path)
    logger.debug("Contract import: %s", spec.contract_import_path)

    try:
        template = spec.template_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise WriteError(f"Unable to read wrapper template {spec.template_path}: {exc}") from exc

    text = rewrite(template, spec, strict=ctx.config.strict_imports)

    try:
        Present(Directory(ctx.env.build_lib_dir))(ctx)
        shutil.copyfile(spec.template_path, spec.output_path)
        spec.output_path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise WriteError(f"Unable to write wrapper {spec.output_path}: {exc}") from exc

    return spec.output_path
