"""Step variants: the atomic modifiers a context is built from.

Steps form a closed set. Each variant is a frozen dataclass; code that
interprets steps (the composer, the log renderer) dispatches with a
``match`` over the variants below. Adding a kind means adding a class here,
a case to ``step_from_dict``, and a case to every consumer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Union

_ENV_KEY = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def is_env_key(name: str) -> bool:
    """True if ``name`` can be exported by a POSIX shell as is."""
    return _ENV_KEY.fullmatch(name) is not None


@dataclass(frozen=True)
class CommandStep:
    """A shell statement run before the scoped part of the plan."""

    text: str

    kind = "command"


@dataclass(frozen=True)
class EnvStep:
    """An environment binding for everything nested inside it."""

    key: str
    value: str

    kind = "env"

    @property
    def valid(self) -> bool:
        return is_env_key(self.key)


@dataclass(frozen=True)
class PathStep:
    """A directory appended to $PATH for everything nested inside it."""

    path: str

    kind = "path"


@dataclass(frozen=True)
class WorkdirStep:
    """Working directory for everything nested inside it."""

    path: str

    kind = "workdir"


@dataclass(frozen=True)
class ContainerStep:
    """Runs everything nested inside it in a container started from ``image``."""

    image: str

    kind = "container"


@dataclass(frozen=True)
class ExtensionStep:
    """A step computed by an extension program.

    Attributes:
        source: The program and arguments that produced it.
        payload: The program's full JSON reply, kept verbatim. Its optional
            ``step`` member declares whether the step is a prefix or a scope.
    """

    source: tuple[str, ...]
    payload: dict[str, Any] = field(default_factory=dict)

    kind = "extension"

    @property
    def declaration(self) -> Any:
        return self.payload.get("step")


@dataclass(frozen=True)
class UnknownStep:
    """A step of a kind this version does not understand.

    Kept so that a load/save round-trip does not lose it; never composed.
    """

    kind: str
    data: dict[str, Any] = field(default_factory=dict)


Step = Union[
    CommandStep,
    EnvStep,
    PathStep,
    WorkdirStep,
    ContainerStep,
    ExtensionStep,
    UnknownStep,
]


def step_to_dict(step: Step) -> dict[str, Any]:
    """Serialize a step as ``{"kind": tag, ...fields}``."""
    match step:
        case CommandStep(text=text):
            return {"kind": step.kind, "text": text}
        case EnvStep(key=key, value=value):
            return {"kind": step.kind, "key": key, "value": value}
        case PathStep(path=path) | WorkdirStep(path=path):
            return {"kind": step.kind, "path": path}
        case ContainerStep(image=image):
            return {"kind": step.kind, "image": image}
        case ExtensionStep(source=source, payload=payload):
            return {"kind": step.kind, "source": list(source), "payload": payload}
        case UnknownStep(kind=kind, data=data):
            return {**data, "kind": kind}
    raise TypeError(f"not a step: {step!r}")


def step_from_dict(data: dict[str, Any]) -> Step:
    """Deserialize a step; unrecognized kinds come back as UnknownStep.

    Raises:
        KeyError, TypeError: If a known kind is missing a required field.
    """
    kind = data.get("kind")
    match kind:
        case "command":
            return CommandStep(text=str(data["text"]))
        case "env":
            return EnvStep(key=str(data["key"]), value=str(data["value"]))
        case "path":
            return PathStep(path=str(data["path"]))
        case "workdir":
            return WorkdirStep(path=str(data["path"]))
        case "container":
            return ContainerStep(image=str(data["image"]))
        case "extension":
            payload = data.get("payload", {})
            if not isinstance(payload, dict):
                raise TypeError("extension payload must be an object")
            return ExtensionStep(
                source=tuple(str(s) for s in data.get("source", [])),
                payload=payload,
            )
    rest = {k: v for k, v in data.items() if k != "kind"}
    return UnknownStep(kind=str(kind), data=rest)
