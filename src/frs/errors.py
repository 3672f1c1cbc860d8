"""Error taxonomy for frs.

Every error the engine reports derives from FrsError and carries the
process exit code the CLI should use for it. A wrapped command that exits
nonzero is not an error: its status is returned to the caller as-is.
"""

from __future__ import annotations


class FrsError(Exception):
    """Base class for errors reported to the user."""

    exit_code: int = 1


class ContextNotFound(FrsError):
    """A named context was requested but no record exists for it."""

    exit_code = 3

    def __init__(self, namespace: str, name: str) -> None:
        self.namespace = namespace
        self.name = name
        label = name if namespace == "default" else f"{namespace}::{name}"
        super().__init__(f"context not found: {label}")


class ExtensionError(FrsError):
    """Error at the extension subprocess boundary."""

    def __init__(self, program: str, message: str) -> None:
        self.program = program
        super().__init__(message)


class ExtensionFailure(ExtensionError):
    """The extension program exited with a nonzero status."""

    exit_code = 4

    def __init__(self, program: str, returncode: int) -> None:
        self.returncode = returncode
        super().__init__(program, f"extension {program} failed with exit code {returncode}")


class InvalidExtensionOutput(ExtensionError):
    """The extension's output is not a JSON object of the required shape."""

    exit_code = 5

    def __init__(self, program: str, reason: str) -> None:
        self.reason = reason
        super().__init__(program, f"invalid output from extension {program}: {reason}")


class ExtensionNotFound(ExtensionError):
    """The extension program could not be found or executed."""

    exit_code = 6

    def __init__(self, program: str, reason: str = "not found") -> None:
        super().__init__(program, f"extension {program}: {reason}")


class StoreIOError(FrsError):
    """Filesystem failure while reading or writing a context record."""

    exit_code = 7

    def __init__(self, path: object, reason: str) -> None:
        self.path = path
        super().__init__(f"{path}: {reason}")
