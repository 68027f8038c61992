"""Build targets and the artifact each one produces."""

from __future__ import annotations

from enum import StrEnum


class BuildTarget(StrEnum):
    """The deployable artifact kind."""

    NODE = "node"
    WASM = "wasm"

    @property
    def wrapper_name(self) -> str:
        """File name of the wrapper template and of its specialized copy."""
        return f"{self.value}-wrapper.js"

    @property
    def artifact(self) -> str:
        """Artifact path relative to the project root."""
        if self is BuildTarget.NODE:
            return f"build/lib/{self.wrapper_name}"
        return "build/build.wasm"


# probe order used when the target is not given explicitly
ARTIFACT_PROBE_ORDER: tuple[BuildTarget, ...] = (BuildTarget.NODE, BuildTarget.WASM)
