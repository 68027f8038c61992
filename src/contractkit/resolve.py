"""Resolver for ${...} references in configured commands."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Sequence
from typing import Any

from .errors import ConfigError

logger = logging.getLogger(__name__)

_INTERP_PATTERN = re.compile(r"\$\$\{|(\$\{([^{}]+)\})")


class Resolver:
    """Expand ${name} and ${env.NAME} references against a set of variables.

    Values may be plain objects, mappings or zero-argument callables; dotted
    references walk into mappings and attributes. ``$${`` escapes a literal
    ``${``.
    """

    def __init__(self, variables: dict[str, Any] | None = None) -> None:
        self._variables: dict[str, Any] = {"env": os.environ}
        self._variables.update(variables or {})

    def _lookup(self, ref: str) -> Any:
        current: Any = self._variables

        for part in ref.split("."):
            try:
                current = current[part]
            except (KeyError, TypeError):
                try:
                    current = getattr(current, part)
                except AttributeError:
                    raise ConfigError(f"undefined variable '{ref}'") from None

        if callable(current) and not isinstance(current, type):
            current = current()

        return current

    def expand(self, value: str) -> str:
        """Expand all references in a single string."""
        if "${" not in value:
            return value

        def _replace(m: re.Match) -> str:  # type: ignore[type-arg]
            if m.group(0) == "$${":
                return "${"
            return str(self._lookup(m.group(2).strip()))

        return _INTERP_PATTERN.sub(_replace, value)

    def command(self, argv: Sequence[str]) -> list[str]:
        """Expand every argument of a configured command."""
        expanded = [self.expand(arg) for arg in argv]
        logger.debug("Expanded command %s -> %s", list(argv), expanded)
        return expanded

