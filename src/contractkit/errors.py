"""Exception hierarchy for the build and test pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .shell import ToolResult
    from .stages import StageResult


class ContractKitError(Exception):
    """Base class for all contractkit errors."""


class ConfigError(ContractKitError):
    """The project configuration file could not be loaded."""


class WriteError(ContractKitError):
    """A generated file could not be written."""


class PreconditionFailure(ContractKitError):
    """The invocation cannot proceed; always fatal."""


class NoArtifactError(PreconditionFailure):
    """Neither the node wrapper nor the wasm binary has been built."""


class WrapperNotFoundError(PreconditionFailure):
    """The wrapper template for a target is missing under the resolved root."""


class HelpersNotFoundError(PreconditionFailure):
    """The runtime helpers module imported by the wasm wrapper is missing."""


class TemplateShapeError(PreconditionFailure):
    """A wrapper template does not contain the expected import line."""


class ContractNotFoundError(PreconditionFailure):
    """The contract file given to build does not exist."""


class InputNotFoundError(PreconditionFailure):
    """The test input path is neither a file nor a directory."""


class ExampleNotFoundError(PreconditionFailure):
    """The requested example is not in the catalog."""


class PrereqCheckFailed(PreconditionFailure):
    """A system or runtime check script returned a failure."""

    def __init__(self, message: str, result: ToolResult | None = None) -> None:
        super().__init__(message)
        self.result = result


class StageFailure(ContractKitError):
    """A build stage failed; later stages did not run."""

    def __init__(self, result: StageResult) -> None:
        super().__init__(f"Stage '{result.stage}' failed: {result.detail}")
        self.result = result


class TestFailed(ContractKitError):
    """A single test input failed; captured per outcome."""

    __test__ = False

    def __init__(self, input_name: str, reason: str) -> None:
        super().__init__(f"{input_name}: {reason}")
        self.input_name = input_name
        self.reason = reason
