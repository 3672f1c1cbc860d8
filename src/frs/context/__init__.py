"""Context data model and storage."""

from frs.context.model import (
    DEFAULT_NAMESPACE,
    UNSAVED_LABEL,
    Context,
    StepLogEntry,
)
from frs.context.steps import (
    CommandStep,
    ContainerStep,
    EnvStep,
    ExtensionStep,
    PathStep,
    Step,
    UnknownStep,
    WorkdirStep,
    is_env_key,
    step_from_dict,
    step_to_dict,
)
from frs.context.store import ContextStore, atomic_write_text

__all__ = [
    "DEFAULT_NAMESPACE",
    "UNSAVED_LABEL",
    "Context",
    "StepLogEntry",
    "ContextStore",
    "atomic_write_text",
    # Steps
    "Step",
    "CommandStep",
    "ContainerStep",
    "EnvStep",
    "ExtensionStep",
    "PathStep",
    "UnknownStep",
    "WorkdirStep",
    "is_env_key",
    "step_from_dict",
    "step_to_dict",
]
