"""frs: compose layered shell contexts and run commands inside them."""

__version__ = "0.1.0"

# Public API
from frs.composer import ComposeOptions, InvocationPlan, compose
from frs.config import Config, load_config
from frs.context import (
    CommandStep,
    ContainerStep,
    Context,
    ContextStore,
    EnvStep,
    ExtensionStep,
    PathStep,
    Step,
    StepLogEntry,
    UnknownStep,
    WorkdirStep,
)
from frs.errors import (
    ContextNotFound,
    ExtensionError,
    ExtensionFailure,
    ExtensionNotFound,
    FrsError,
    InvalidExtensionOutput,
    StoreIOError,
)
from frs.extension import ExtensionResult, ExtensionRunner
from frs.session import CurrentContext, SessionEngine, SessionStore
from frs.terminal import ForegroundExecutor, RunResult

__all__ = [
    # Data model
    "Context",
    "StepLogEntry",
    "Step",
    "CommandStep",
    "ContainerStep",
    "EnvStep",
    "ExtensionStep",
    "PathStep",
    "UnknownStep",
    "WorkdirStep",
    # Components
    "ContextStore",
    "ComposeOptions",
    "InvocationPlan",
    "compose",
    "ExtensionResult",
    "ExtensionRunner",
    "ForegroundExecutor",
    "RunResult",
    "CurrentContext",
    "SessionEngine",
    "SessionStore",
    # Config
    "Config",
    "load_config",
    # Errors
    "FrsError",
    "ContextNotFound",
    "ExtensionError",
    "ExtensionFailure",
    "ExtensionNotFound",
    "InvalidExtensionOutput",
    "StoreIOError",
]
