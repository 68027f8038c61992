"""contractkit - Build, wrap and test smart-contract modules for node and wasm runtimes."""

from .builder import ContractBuild as ContractBuild
from .catalog import Example as Example
from .catalog import ExampleCatalog as ExampleCatalog
from .config import ProjectConfig as ProjectConfig
from .config import Toolchain as Toolchain
from .context import Context as Context
from .environment import ExecutionContext as ExecutionContext
from .environment import resolve as resolve
from .harness import TestHarness as TestHarness
from .harness import TestOutcome as TestOutcome
from .harness import TestStatus as TestStatus
from .pipeline import Pipeline as Pipeline
from .stages import Stage as Stage
from .stages import StageResult as StageResult
from .targets import BuildTarget as BuildTarget
from .wrapper import inject as inject
