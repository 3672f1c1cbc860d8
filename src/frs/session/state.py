"""Per-session active context.

Each session key owns one file in the state directory:
  <state_dir>/<key>.json   the serialized active context
  <state_dir>/<key>.lock   lock held during read-modify-write
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from filelock import FileLock, Timeout

from frs.context.model import Context
from frs.context.store import atomic_write_text
from frs.errors import StoreIOError
from frs.logging import get_logger
from frs.session.keys import sanitize_key

log = get_logger("session")


class SessionTransaction:
    """Holds the active context for one transition.

    Assign ``context`` to change it; the new value is written when the
    transaction block exits without an exception.
    """

    def __init__(self, key: str, context: Context) -> None:
        self.key = key
        self.context = context
        self._original = context

    @property
    def changed(self) -> bool:
        return self.context is not self._original


class SessionStore:
    """Active contexts keyed by session."""

    def __init__(self, state_dir: Path | str, lock_timeout: float = 10.0) -> None:
        self._state_dir = Path(state_dir)
        self._lock_timeout = lock_timeout

    def state_path(self, key: str) -> Path:
        return self._state_dir / f"{sanitize_key(key)}.json"

    def _lock_path(self, key: str) -> Path:
        return self._state_dir / f"{sanitize_key(key)}.lock"

    def peek(self, key: str) -> Context:
        """Read the active context without locking.

        Writes are atomic, so an unlocked read sees a whole record. A
        session with no file has a blank, unsaved context.

        Raises:
            StoreIOError: The state file exists but cannot be read.
        """
        path = self.state_path(key)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return Context()
        except OSError as e:
            raise StoreIOError(path, f"cannot read session state: {e}") from e
        try:
            return Context.from_json(text)
        except (ValueError, KeyError, TypeError) as e:
            raise StoreIOError(
                path, f"corrupt session state ({e}); run 'frs with empty' to reset"
            ) from e

    def write(self, key: str, context: Context) -> None:
        path = self.state_path(key)
        try:
            atomic_write_text(path, context.to_json())
        except OSError as e:
            raise StoreIOError(path, f"cannot write session state: {e}") from e
        log.debug("Session %s now at %s (%d steps)", key, context.label, len(context.steps))

    @contextmanager
    def transaction(self, key: str, fresh: bool = False) -> Iterator[SessionTransaction]:
        """Lock the session, yield its active context, persist any change.

        Args:
            key: Session key.
            fresh: Start from a blank context instead of reading the file.
        """
        lock_path = self._lock_path(key)
        try:
            self._state_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreIOError(self._state_dir, f"cannot create state directory: {e}") from e

        lock = FileLock(lock_path, timeout=self._lock_timeout)
        try:
            lock.acquire()
        except Timeout:
            raise StoreIOError(lock_path, "session is locked by another frs process") from None
        try:
            txn = SessionTransaction(key, Context() if fresh else self.peek(key))
            yield txn
            if txn.changed:
                self.write(key, txn.context)
        finally:
            lock.release()
