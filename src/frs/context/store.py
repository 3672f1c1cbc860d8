"""Durable storage for saved contexts.

One JSON file per context:
  <root>/<namespace>/<name>.json

Writes go to a temp file in the same directory and are published with
os.replace, so readers see either the old record or the new one.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from frs.context.model import DEFAULT_NAMESPACE, Context
from frs.errors import ContextNotFound, StoreIOError
from frs.logging import get_logger

log = get_logger("store")

RECORD_SUFFIX = ".json"


# Components that name a directory themselves instead of an entry in one.
_RESERVED = {"": "·", ".": "·.", "..": "·.."}


def _component(value: str) -> str:
    # Path separators would escape the namespace directory.
    if value in _RESERVED:
        return _RESERVED[value]
    return value.replace("/", "·").replace("\\", "·")


def atomic_write_text(path: Path, text: str) -> None:
    """Write ``text`` to ``path`` through a temp file and an atomic rename.

    Raises:
        OSError: If the directory cannot be created or the write fails.
            The temp file is removed in that case.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_name, path)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise


class ContextStore:
    """Maps ``(namespace, name)`` to saved Context records."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, namespace: str, name: str) -> Path:
        """Record location for a key.

        Raises:
            StoreIOError: The location resolves outside the store root.
        """
        path = self._root / _component(namespace) / f"{_component(name)}{RECORD_SUFFIX}"
        if not path.resolve().is_relative_to(self._root.resolve()):
            raise StoreIOError(path, "context location is outside the store")
        return path

    def exists(self, namespace: str, name: str) -> bool:
        return self.path_for(namespace, name).is_file()

    def load(self, namespace: str, name: str) -> Context:
        """Load a saved context.

        Raises:
            ContextNotFound: No record exists for the key.
            StoreIOError: The record exists but cannot be read or parsed.
        """
        path = self.path_for(namespace, name)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise ContextNotFound(namespace, name) from None
        except OSError as e:
            raise StoreIOError(path, f"cannot read context: {e}") from e

        try:
            context = Context.from_json(text)
        except (ValueError, KeyError, TypeError) as e:
            raise StoreIOError(path, f"malformed context record: {e}") from e

        log.debug("Loaded context %s from %s", context.label, path)
        return context

    def save(self, context: Context) -> Path:
        """Persist a context, replacing any record with the same identity.

        Raises:
            ValueError: The context has no name.
            StoreIOError: The record could not be written.
        """
        if context.name is None:
            raise ValueError("cannot save a context without a name")

        path = self.path_for(context.namespace, context.name)
        try:
            atomic_write_text(path, context.to_json())
        except OSError as e:
            raise StoreIOError(path, f"cannot save context: {e}") from e

        log.debug("Saved context %s to %s", context.label, path)
        return path

    def list(self, namespace: str | None = None) -> list[tuple[str, str]]:
        """List saved ``(namespace, name)`` pairs, sorted.

        Identities are read from each record's meta, since file names are
        sanitized. Unreadable records are skipped with a warning.
        """
        if not self._root.is_dir():
            return []

        if namespace is None:
            dirs = sorted(p for p in self._root.iterdir() if p.is_dir())
        else:
            dirs = [self._root / _component(namespace)]

        found: list[tuple[str, str]] = []
        for directory in dirs:
            if not directory.is_dir():
                continue
            for path in sorted(directory.glob(f"*{RECORD_SUFFIX}")):
                try:
                    meta = json.loads(path.read_text(encoding="utf-8"))["meta"]
                    found.append(
                        (str(meta.get("namespace") or DEFAULT_NAMESPACE), str(meta["name"]))
                    )
                except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
                    log.warning("Skipping unreadable context record %s: %s", path, e)
        return sorted(found)
