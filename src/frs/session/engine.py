"""Session engine: the transitions frs performs on a session's active context.

Each CLI invocation runs exactly one transition. Every method takes the
session key explicitly; the engine itself holds no per-session state.
"""

from __future__ import annotations

import json
import shlex
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any

from frs.composer import PLACEHOLDER_LEAF, ComposeOptions, InvocationPlan, compose
from frs.context.model import DEFAULT_NAMESPACE, Context, StepLogEntry
from frs.context.steps import (
    CommandStep,
    ContainerStep,
    EnvStep,
    PathStep,
    Step,
    WorkdirStep,
)
from frs.context.store import ContextStore
from frs.extension.runner import ExtensionRunner
from frs.logging import get_logger
from frs.session.keys import SESSION_ENV
from frs.session.state import SessionStore
from frs.terminal.protocol import PlanExecutor

log = get_logger("engine")


@dataclass(frozen=True)
class CurrentContext:
    """Read-only summary consumed by prompt renderers."""

    context_name: str
    last_step_description: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "contextName": self.context_name,
            "lastStepDescription": self.last_step_description,
        }


def _quoted(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def _last_part(path: str) -> str:
    return PurePath(path).name or path


def _sanitize_prompt(text: str) -> str:
    return "".join(c for c in text if not c.isspace() or c == " ")


def describe(step: Step) -> StepLogEntry:
    """The log entry recorded when a built-in step is appended."""
    match step:
        case CommandStep(text=text):
            words = text.split()
            first = words[0] if words else ""
            return StepLogEntry(f"core::with_command {_quoted(text)}", f"exec({first})")
        case EnvStep(key=key, value=value):
            return StepLogEntry(f"core::with_env {_quoted(key)}={_quoted(value)}", f"env({key})")
        case PathStep(path=path):
            pure = PurePath(path)
            if pure.name == "bin":
                prompt = f"toolchain({_last_part(str(pure.parent)) or 'bin'})"
            else:
                prompt = f"path({_last_part(path)})"
            return StepLogEntry(f"core::with_path {_quoted(path)}", prompt)
        case WorkdirStep(path=path):
            return StepLogEntry(f"core::with_workdir {_quoted(path)}", f"wd(..{_last_part(path)})")
        case ContainerStep(image=image):
            return StepLogEntry(f"core::with_docker {_quoted(image)}", f"ctr({_quoted(image)})")
    raise TypeError(f"no built-in description for {step!r}")


class SessionEngine:
    """Dispatches with/save/run/inspect/prompt over the session store."""

    def __init__(
        self,
        *,
        store: ContextStore,
        sessions: SessionStore,
        runner: ExtensionRunner,
        executor: PlanExecutor,
        options: ComposeOptions | None = None,
        shell: str = "/bin/sh",
    ) -> None:
        self._store = store
        self._sessions = sessions
        self._runner = runner
        self._executor = executor
        self._options = options or ComposeOptions()
        self._shell = shell

    @property
    def store(self) -> ContextStore:
        return self._store

    # -- with -------------------------------------------------------------

    def _append(self, key: str, step: Step) -> Context:
        entry = describe(step)
        with self._sessions.transaction(key) as txn:
            txn.context = txn.context.append(step, entry)
        log.info("%s: %s", key, entry.description)
        return txn.context

    def with_command(self, key: str, argv: Sequence[str]) -> Context:
        return self._append(key, CommandStep(shlex.join(argv)))

    def with_env(self, key: str, name: str, value: str) -> Context:
        """Append an env binding.

        Raises:
            ValueError: ``name`` is not a valid environment variable name.
        """
        step = EnvStep(name, value)
        if not step.valid:
            raise ValueError(f"invalid environment variable name: {name!r}")
        return self._append(key, step)

    def with_path(self, key: str, path: str) -> Context:
        return self._append(key, PathStep(path))

    def with_workdir(self, key: str, path: str) -> Context:
        return self._append(key, WorkdirStep(path))

    def with_docker(self, key: str, image: str) -> Context:
        return self._append(key, ContainerStep(image))

    async def with_ext(self, key: str, program: str, args: Sequence[str]) -> Context:
        """Run an extension and append what it returns.

        The session stays locked while the extension runs, and nothing is
        written if it fails.
        """
        with self._sessions.transaction(key) as txn:
            result = await self._runner.run(program, list(args), txn.context)
            txn.context = txn.context.append(result.step, *result.log)
        log.info("%s: extension %s added %d log entries", key, program, len(result.log))
        return txn.context

    def with_context(self, key: str, name: str, namespace: str = DEFAULT_NAMESPACE) -> Context:
        """Replace the active context with a saved one.

        Raises:
            ContextNotFound: No such saved context.
        """
        with self._sessions.transaction(key) as txn:
            txn.context = self._store.load(namespace, name)
        return txn.context

    def with_empty(self, key: str) -> Context:
        with self._sessions.transaction(key, fresh=True) as txn:
            txn.context = Context()
        return txn.context

    # -- save / list ------------------------------------------------------

    def save(self, key: str, name: str, namespace: str = DEFAULT_NAMESPACE) -> Context:
        """Give the active context an identity, persist it, keep it active."""
        with self._sessions.transaction(key) as txn:
            saved = txn.context.identified(namespace, name)
            self._store.save(saved)
            txn.context = saved
        return saved

    def list_contexts(self, namespace: str | None = None) -> list[tuple[str, str]]:
        return self._store.list(namespace)

    # -- inspect / run ----------------------------------------------------

    def active(self, key: str) -> Context:
        return self._sessions.peek(key)

    def plan(self, key: str, leaf: Sequence[str] | str) -> InvocationPlan:
        return compose(self._sessions.peek(key), leaf, self._options)

    def inspect(
        self, key: str, name: str | None = None, namespace: str = DEFAULT_NAMESPACE
    ) -> tuple[Context, InvocationPlan]:
        """Compose a context around a placeholder without executing anything.

        Inspects the active context, or a saved one when ``name`` is given.
        """
        context = self._store.load(namespace, name) if name else self._sessions.peek(key)
        return context, compose(context, PLACEHOLDER_LEAF, self._options)

    async def run(self, key: str, argv: Sequence[str], show: bool = False) -> int:
        """Compose the active context around ``argv`` and execute it.

        Returns:
            0 when ``show`` is set (nothing runs), otherwise the wrapped
            command's exit status.
        """
        plan = self.plan(key, argv)
        if show:
            return 0
        result = await self._executor.execute(plan.argv(self._shell), env={SESSION_ENV: key})
        log.debug("Plan finished: %r", result)
        return result.exit_code

    # -- prompt -----------------------------------------------------------

    def query_current(self, key: str) -> CurrentContext:
        context = self._sessions.peek(key)
        last = context.log[-1].description if context.log else None
        return CurrentContext(context_name=context.label, last_step_description=last)

    def prompt_text(self, key: str) -> str:
        """``(label)``, followed by each step's prompt tag while unsaved changes exist."""
        context = self._sessions.peek(key)
        parts = [f"({context.label})"]
        if context.dirty:
            parts.extend(_sanitize_prompt(e.prompt) for e in context.log if e.prompt)
        return " ".join(parts)
