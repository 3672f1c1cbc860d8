"""Sessions: per-terminal active contexts and the engine driving them."""

from frs.session.engine import CurrentContext, SessionEngine, describe
from frs.session.keys import resolve_session_key, sanitize_key
from frs.session.state import SessionStore, SessionTransaction

__all__ = [
    "CurrentContext",
    "SessionEngine",
    "SessionStore",
    "SessionTransaction",
    "describe",
    "resolve_session_key",
    "sanitize_key",
]
