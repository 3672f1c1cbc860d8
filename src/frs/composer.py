"""Composition of a context and a leaf command into one shell invocation.

Steps are read in declaration order and sorted into two groups:

- prefixes: statements run one after another before anything else
  (command steps, prefix-kind extensions)
- scopes: wrappers that enclose everything declared after them
  (env, path, workdir, container, scope-kind extensions)

The plan is ``P1; ...; Pk; W1(W2(...Wn(leaf)...))`` with the first declared
wrapper outermost. Composition is a pure function of its arguments.
"""

from __future__ import annotations

import shlex
from collections.abc import Sequence
from dataclasses import dataclass, field

from frs.context.model import Context
from frs.context.steps import (
    CommandStep,
    ContainerStep,
    EnvStep,
    ExtensionStep,
    PathStep,
    Step,
    UnknownStep,
    WorkdirStep,
)
from frs.logging import get_logger

log = get_logger("composer")

STATEMENT_SEPARATOR = "; "
PLACEHOLDER_LEAF = "<command>"


@dataclass(frozen=True)
class ComposeOptions:
    """Rendering knobs taken from configuration."""

    docker: str = "docker"
    docker_run_args: tuple[str, ...] = ()
    container_shell: str = "sh"


@dataclass(frozen=True)
class Scope:
    """One scope wrapper.

    Attributes:
        kind: "env", "path", "workdir", "container" or "extension".
        opener: Statement run at the start of the scope (env, path, workdir,
            extension), or None for containers.
        command: Argument vector that receives the inner plan (containers).
        shell: Shell that runs a nested scope inside the container.
    """

    kind: str
    opener: str | None = None
    command: tuple[str, ...] = ()
    shell: str = "sh"

    def wrap(self, inner: str, inner_is_leaf: bool) -> str:
        if self.opener is not None:
            return f"({self.opener}{STATEMENT_SEPARATOR}{inner})"
        runner = shlex.join(self.command)
        if inner_is_leaf:
            return f"({runner} {inner})"
        # A nested scope is shell syntax; hand it to a shell inside the container.
        return f"({runner} {shlex.join([self.shell, '-c', inner])})"


@dataclass(frozen=True)
class InvocationPlan:
    """Structured result of composition.

    Attributes:
        prefixes: Sequential statements, in declaration order.
        scopes: Scope wrappers, outermost first.
        leaf: Shell text of the leaf command.
        skipped: Indexes of steps that were not composed.
    """

    prefixes: tuple[str, ...]
    scopes: tuple[Scope, ...]
    leaf: str
    skipped: tuple[int, ...] = field(default=())

    @property
    def text(self) -> str:
        body = self.leaf
        for depth, scope in enumerate(reversed(self.scopes)):
            body = scope.wrap(body, inner_is_leaf=depth == 0)
        return STATEMENT_SEPARATOR.join((*self.prefixes, body))

    def argv(self, shell: str) -> list[str]:
        """The exact argument vector used to execute this plan."""
        return [shell, "-c", self.text]

    def __str__(self) -> str:
        return self.text


def render_leaf(leaf: Sequence[str] | str) -> str:
    """Argument vectors are shell-quoted; a str is taken as shell text."""
    if isinstance(leaf, str):
        return leaf
    return shlex.join(leaf)


def _extension_part(step: ExtensionStep) -> tuple[str, str] | None:
    """Return ("prefix"|"scope", text) for a well-formed declaration."""
    declaration = step.declaration
    if not isinstance(declaration, dict):
        return None
    kind = declaration.get("kind")
    if kind == "prefix" and isinstance(declaration.get("command"), str):
        return "prefix", declaration["command"]
    if kind == "scope" and isinstance(declaration.get("prelude"), str):
        return "scope", declaration["prelude"]
    return None


def compose(
    context: Context,
    leaf: Sequence[str] | str,
    options: ComposeOptions | None = None,
) -> InvocationPlan:
    """Compose ``context`` around ``leaf``.

    Unknown steps, env steps whose key is not a shell identifier, and
    extension steps with an unrecognized declaration are skipped with a
    warning; the remaining steps keep their order.
    """
    options = options or ComposeOptions()
    prefixes: list[str] = []
    scopes: list[Scope] = []
    skipped: list[int] = []

    for index, step in enumerate(context.steps):
        match step:
            case CommandStep(text=text):
                prefixes.append(text)
            case EnvStep(key=key, value=value):
                if not step.valid:
                    log.warning("Skipping env step %d: invalid variable name %r", index, key)
                    skipped.append(index)
                    continue
                scopes.append(Scope("env", opener=f"export {key}={shlex.quote(value)}"))
            case PathStep(path=path):
                scopes.append(
                    Scope("path", opener=f"export PATH=${{PATH}}:{shlex.quote(path)}")
                )
            case WorkdirStep(path=path):
                scopes.append(Scope("workdir", opener=f"cd {shlex.quote(path)}"))
            case ContainerStep(image=image):
                scopes.append(
                    Scope(
                        "container",
                        command=(options.docker, "run", *options.docker_run_args, image),
                        shell=options.container_shell,
                    )
                )
            case ExtensionStep():
                part = _extension_part(step)
                if part is None:
                    if step.declaration is None:
                        log.debug("Extension step %d contributes no composition", index)
                    else:
                        log.warning(
                            "Skipping extension step %d from %s: unrecognized declaration %r",
                            index,
                            " ".join(step.source),
                            step.declaration,
                        )
                    skipped.append(index)
                elif part[0] == "prefix":
                    prefixes.append(part[1])
                else:
                    scopes.append(Scope("extension", opener=part[1]))
            case UnknownStep(kind=kind):
                log.warning("Skipping step %d of unknown kind %r", index, kind)
                skipped.append(index)

    return InvocationPlan(
        prefixes=tuple(prefixes),
        scopes=tuple(scopes),
        leaf=render_leaf(leaf),
        skipped=tuple(skipped),
    )
