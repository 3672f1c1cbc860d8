"""Command-line interface for frs."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence
from pathlib import Path

from rich.console import Console
from rich.text import Text

from frs import __version__
from frs.composer import ComposeOptions
from frs.config import Config, load_config
from frs.context.model import DEFAULT_NAMESPACE, Context
from frs.context.steps import is_env_key
from frs.context.store import ContextStore
from frs.errors import FrsError
from frs.extension.runner import ExtensionRunner
from frs.logging import get_logger, setup_logging
from frs.session.engine import SessionEngine
from frs.session.keys import resolve_session_key
from frs.session.state import SessionStore
from frs.terminal.executor import ForegroundExecutor

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

log = get_logger("cli")

# Colors of the inspect view
STRING = "#9ece6a"
KEYWORD = "#bb9af7"
FUNCTION = "#7aa2f7"

def _env_key(value: str) -> str:
    if not is_env_key(value):
        raise argparse.ArgumentTypeError(f"invalid environment variable name: {value!r}")
    return value


def _add_namespace(parser: argparse.ArgumentParser, help_text: str) -> None:
    parser.add_argument("--namespace", "-n", default=None, help=help_text)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="frs",
        description="Compose layered shell contexts and run commands inside them",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (can be repeated)",
    )
    parser.add_argument(
        "--session",
        help="Session key (default: $FRS_SESSION or the parent shell)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Additional config file, applied over the user config",
    )

    subparsers = parser.add_subparsers(dest="command", help="Operation")

    # with
    with_parser = subparsers.add_parser("with", help="Add a layer to the active context")
    builders = with_parser.add_subparsers(dest="builder", help="Kind of layer")

    p = builders.add_parser("command", help="Run a command before the wrapped command")
    p.add_argument("argv", nargs=argparse.REMAINDER, help="-- CMD ARGS...")

    p = builders.add_parser("env", help="Export an environment variable")
    p.add_argument("key", type=_env_key)
    p.add_argument("value")

    p = builders.add_parser("path", help="Append a directory to PATH")
    p.add_argument("path")

    p = builders.add_parser("workdir", help="Change the working directory")
    p.add_argument("path")

    p = builders.add_parser("docker", help="Run inside a container")
    p.add_argument("image")

    p = builders.add_parser("ext", help="Add a step computed by an extension program")
    p.add_argument("argv", nargs=argparse.REMAINDER, help="-- PROGRAM ARGS...")

    p = builders.add_parser("context", help="Switch to a saved context")
    p.add_argument("name", help="NAME or NAMESPACE::NAME")
    _add_namespace(p, "Namespace of the saved context")

    builders.add_parser("empty", help="Start over with a blank context")

    # run
    run_parser = subparsers.add_parser("run", help="Run a command inside the active context")
    run_parser.add_argument(
        "--show",
        action="store_true",
        help="Print the composed command instead of running it",
    )
    run_parser.add_argument("argv", nargs=argparse.REMAINDER, help="-- CMD ARGS...")

    # save
    save_parser = subparsers.add_parser("save", help="Save the active context")
    save_parser.add_argument("name", help="NAME or NAMESPACE::NAME")
    _add_namespace(save_parser, "Save into namespace")

    # inspect
    inspect_parser = subparsers.add_parser("inspect", help="Show a context and its composition")
    inspect_parser.add_argument("name", nargs="?", help="Saved context (default: active)")
    _add_namespace(inspect_parser, "Namespace of the saved context")
    inspect_parser.add_argument("--json", action="store_true", help="Print the raw record")

    # list
    list_parser = subparsers.add_parser("list", help="List saved contexts")
    _add_namespace(list_parser, "Only this namespace")

    # prompt
    prompt_parser = subparsers.add_parser("prompt", help="Print the prompt fragment")
    prompt_parser.add_argument("--json", action="store_true", help="Print a JSON summary")

    return parser


def split_ref(name: str, namespace: str | None) -> tuple[str, str]:
    """Resolve ``NAME``/``--namespace`` or ``NAMESPACE::NAME`` to (namespace, name)."""
    if namespace is None and "::" in name:
        namespace, name = name.split("::", 1)
    return namespace or DEFAULT_NAMESPACE, name


def _trailing(argv: list[str]) -> list[str]:
    # REMAINDER keeps the "--" separator
    return argv[1:] if argv and argv[0] == "--" else argv


def build_engine(config: Config) -> SessionEngine:
    """Wire the engine from configuration."""
    return SessionEngine(
        store=ContextStore(config.store.root),
        sessions=SessionStore(config.session.state_dir),
        runner=ExtensionRunner(),
        executor=ForegroundExecutor(),
        options=ComposeOptions(
            docker=config.execution.docker,
            docker_run_args=tuple(config.execution.docker_run_args),
        ),
        shell=config.execution.shell,
    )


def print_context(context: Context, plan_text: str) -> None:
    """Pretty-print a context the way a shell script would annotate it."""
    out = Text()
    out.append(f"# name: {context.label}\n", style=STRING)
    for entry in context.log:
        if entry.prompt:
            out.append(f"# $ {entry.prompt}\n", style=KEYWORD)
        out.append(f"# ! {entry.description}\n", style=KEYWORD)
    out.append(plan_text, style=FUNCTION)
    console.print(out, soft_wrap=True)


def _dispatch_with(engine: SessionEngine, key: str, parsed: argparse.Namespace) -> int:
    builder = parsed.builder
    if builder == "command":
        argv = _trailing(parsed.argv)
        if not argv:
            err_console.print("[red]error:[/red] with command needs a command after --")
            return 2
        engine.with_command(key, argv)
    elif builder == "env":
        engine.with_env(key, parsed.key, parsed.value)
    elif builder == "path":
        engine.with_path(key, parsed.path)
    elif builder == "workdir":
        engine.with_workdir(key, parsed.path)
    elif builder == "docker":
        engine.with_docker(key, parsed.image)
    elif builder == "ext":
        argv = _trailing(parsed.argv)
        if not argv:
            err_console.print("[red]error:[/red] with ext needs a program after --")
            return 2
        asyncio.run(engine.with_ext(key, argv[0], argv[1:]))
    elif builder == "context":
        namespace, name = split_ref(parsed.name, parsed.namespace)
        engine.with_context(key, name, namespace)
    elif builder == "empty":
        engine.with_empty(key)
    else:
        err_console.print("[red]error:[/red] missing layer kind (see frs with --help)")
        return 2
    return 0


def run_cli(args: Sequence[str]) -> int:
    """Run the CLI with the given arguments and return the exit code."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    if parsed.command is None:
        parser.print_help()
        return 1

    config = load_config(parsed.config)
    if parsed.verbose:
        # Warnings are shown by default, so -v starts at info.
        config.logging.verbose = 1 + parsed.verbose
    setup_logging(config.logging)

    engine = build_engine(config)
    key = resolve_session_key(parsed.session)
    log.debug("Session key %s, command %s", key, parsed.command)

    try:
        if parsed.command == "with":
            return _dispatch_with(engine, key, parsed)

        if parsed.command == "run":
            argv = _trailing(parsed.argv)
            if not argv:
                err_console.print("[red]error:[/red] run needs a command after --")
                return 2
            if parsed.show:
                sys.stdout.write(engine.plan(key, argv).text + "\n")
                return 0
            return asyncio.run(engine.run(key, argv))

        if parsed.command == "save":
            namespace, name = split_ref(parsed.name, parsed.namespace)
            saved = engine.save(key, name, namespace)
            console.print(Text(f"Saved context {saved.label}"))
            return 0

        if parsed.command == "inspect":
            name = None
            namespace = DEFAULT_NAMESPACE
            if parsed.namespace is not None and not parsed.name:
                err_console.print("[red]error:[/red] inspect --namespace needs a context NAME")
                return 2
            if parsed.name:
                namespace, name = split_ref(parsed.name, parsed.namespace)
            context, plan = engine.inspect(key, name, namespace)
            if parsed.json:
                sys.stdout.write(json.dumps(context.to_dict(), indent=2) + "\n")
            else:
                print_context(context, plan.text)
            return 0

        if parsed.command == "list":
            for namespace, name in engine.list_contexts(parsed.namespace):
                label = name if namespace == DEFAULT_NAMESPACE else f"{namespace}::{name}"
                sys.stdout.write(label + "\n")
            return 0

        if parsed.command == "prompt":
            if parsed.json:
                sys.stdout.write(json.dumps(engine.query_current(key).to_dict()) + "\n")
            else:
                sys.stdout.write(engine.prompt_text(key))
            return 0

    except FrsError as e:
        log.debug("%s failed: %s", parsed.command, e)
        err_console.print(Text(f"error: {e}", style="red"))
        return e.exit_code

    parser.print_help()
    return 1
