"""Filesystem specifications and the strategies that apply them."""

from __future__ import annotations

import filecmp
import logging
import shutil
from abc import ABC, abstractmethod
from pathlib import Path

from .context import Context

logger = logging.getLogger(__name__)

# -- Specification ABC --


class Specification(ABC):
    """Desired state of one filesystem resource."""

    @abstractmethod
    def equals(self, ctx: Context) -> bool:
        """Current state matches desired state."""

    def exists(self, ctx: Context) -> bool:
        """Resource exists (defaults to equals)."""
        return self.equals(ctx)

    @abstractmethod
    def apply(self, ctx: Context) -> None:
        """Create or update resource."""


# -- SpecOp Strategies --


class SpecOp(ABC):
    """Wraps a Specification with conditional execution logic."""

    def __init__(self, spec: Specification) -> None:
        self.spec = spec

    @abstractmethod
    def __call__(self, ctx: Context) -> None: ...


class Present(SpecOp):
    """Apply only if resource doesn't exist."""

    def __call__(self, ctx: Context) -> None:
        if self.spec.exists(ctx):
            logger.debug("Skipping %s; already exists", self.spec)
        elif ctx.dry_run:
            logger.info("[DRY RUN] Would create %s", self.spec)
        else:
            logger.info("Creating %s", self.spec)
            self.spec.apply(ctx)


class Ensure(SpecOp):
    """Apply if current state doesn't match."""

    def __call__(self, ctx: Context) -> None:
        if self.spec.equals(ctx):
            logger.debug("Skipping %s; up to date", self.spec)
        elif ctx.dry_run:
            logger.info("[DRY RUN] Would update %s", self.spec)
        else:
            logger.info("Updating %s", self.spec)
            self.spec.apply(ctx)


# -- Concrete specs --


class Directory(Specification):
    """A directory, created with any missing parents."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def __str__(self) -> str:
        return f"directory {self.path}"

    def equals(self, ctx: Context) -> bool:
        return self.path.is_dir()

    def apply(self, ctx: Context) -> None:
        self.path.mkdir(parents=True, exist_ok=True)


class CopiedFile(Specification):
    """A file whose content mirrors a source file."""

    def __init__(self, source: Path, dest: Path) -> None:
        self.source = source
        self.dest = dest

    def __str__(self) -> str:
        return f"file {self.dest}"

    def equals(self, ctx: Context) -> bool:
        return self.dest.is_file() and filecmp.cmp(self.source, self.dest, shallow=False)

    def apply(self, ctx: Context) -> None:
        self.dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(self.source, self.dest)
