"""Context: a named, ordered, append-only sequence of steps plus a log.

Contexts are immutable values. Building a context means producing a new
one with ``append``; switching contexts means replacing the whole value.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from typing import Any

from frs.context.steps import Step, step_from_dict, step_to_dict

DEFAULT_NAMESPACE = "default"
UNSAVED_LABEL = "(unsaved)"


@dataclass(frozen=True)
class StepLogEntry:
    """Human-readable record of one transition.

    Attributes:
        description: What was done, e.g. ``core::with_env "FOO"="bar"``.
        prompt: Short tag shown in the shell prompt, e.g. ``env(FOO)``.
    """

    description: str
    prompt: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"description": self.description, "prompt": self.prompt}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StepLogEntry:
        description = data["description"]
        prompt = data.get("prompt")
        if not isinstance(description, str):
            raise TypeError("step_log description must be a string")
        if prompt is not None and not isinstance(prompt, str):
            raise TypeError("step_log prompt must be a string or null")
        return cls(description=description, prompt=prompt)


@dataclass(frozen=True)
class Context:
    """One layered execution environment.

    Attributes:
        name: Saved name, or None while the context has no identity.
        namespace: Namespace of the saved record.
        steps: Steps in declaration order.
        log: One or more entries per transition, in order.
        dirty: True when steps were appended since the last save or load.
        extra: Unknown top-level fields of the persisted record.
        meta_extra: Unknown fields of the persisted ``meta`` object.
    """

    name: str | None = None
    namespace: str = DEFAULT_NAMESPACE
    steps: tuple[Step, ...] = ()
    log: tuple[StepLogEntry, ...] = ()
    dirty: bool = False
    extra: dict[str, Any] = field(default_factory=dict)
    meta_extra: dict[str, Any] = field(default_factory=dict)

    @property
    def saved(self) -> bool:
        return self.name is not None

    @property
    def label(self) -> str:
        """Display name: ``name`` or ``namespace::name``."""
        if self.name is None:
            return UNSAVED_LABEL
        if self.namespace == DEFAULT_NAMESPACE:
            return self.name
        return f"{self.namespace}::{self.name}"

    def append(self, step: Step | None, *entries: StepLogEntry) -> Context:
        """Return a copy with ``step`` (if any) and log ``entries`` appended."""
        steps = self.steps if step is None else self.steps + (step,)
        return replace(self, steps=steps, log=self.log + entries, dirty=True)

    def identified(self, namespace: str, name: str) -> Context:
        """Return a copy carrying the identity ``(namespace, name)``."""
        return replace(self, namespace=namespace, name=name, dirty=False)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted JSON shape."""
        meta = {
            **self.meta_extra,
            "namespace": self.namespace,
            "name": self.name,
            "is_dirty": self.dirty,
            "step_log": [entry.to_dict() for entry in self.log],
        }
        return {
            **self.extra,
            "meta": meta,
            "steps": [step_to_dict(step) for step in self.steps],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Context:
        """Deserialize from the persisted JSON shape.

        Raises:
            KeyError, TypeError, ValueError: If the record is malformed.
        """
        meta = data.get("meta", {})
        if not isinstance(meta, dict):
            raise TypeError("meta must be an object")
        log_data = meta.get("step_log", [])
        steps_data = data.get("steps", [])
        if not isinstance(log_data, list) or not isinstance(steps_data, list):
            raise TypeError("meta.step_log and steps must be arrays")

        name = meta.get("name")
        return cls(
            name=str(name) if name is not None else None,
            namespace=str(meta.get("namespace") or DEFAULT_NAMESPACE),
            steps=tuple(step_from_dict(s) for s in steps_data),
            log=tuple(StepLogEntry.from_dict(e) for e in log_data),
            dirty=bool(meta.get("is_dirty", False)),
            extra={k: v for k, v in data.items() if k not in ("meta", "steps")},
            meta_extra={
                k: v
                for k, v in meta.items()
                if k not in ("namespace", "name", "is_dirty", "step_log")
            },
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str | bytes) -> Context:
        data = json.loads(text)
        if not isinstance(data, dict):
            raise TypeError("context record must be a JSON object")
        return cls.from_dict(data)
