"""Extension reply format.

An extension prints exactly one JSON object on stdout:

    {
      "meta": {"step_log": [{"description": "...", "prompt": "..."}]},
      "step": {"kind": "scope", "prelude": "source .venv/bin/activate"},
      ...any other fields, kept verbatim...
    }

``meta.step_log`` is required. ``step`` is optional; without it the
extension only contributes log entries.
"""

from __future__ import annotations

import json
from typing import Any

from frs.context.model import StepLogEntry
from frs.errors import InvalidExtensionOutput

CONTEXT_PLACEHOLDER = "{context}"
CONTEXT_FILE_ENV = "FRS_CONTEXT_FILE"


def parse_reply(program: str, raw: bytes) -> tuple[dict[str, Any], tuple[StepLogEntry, ...]]:
    """Parse an extension's stdout.

    Returns:
        The full reply object and its step log entries.

    Raises:
        InvalidExtensionOutput: If the output is not a single JSON object with
            a well-formed ``meta.step_log`` array.
    """
    try:
        reply = json.loads(raw.decode("utf-8"))
    except UnicodeDecodeError:
        raise InvalidExtensionOutput(program, "output is not UTF-8") from None
    except json.JSONDecodeError as e:
        raise InvalidExtensionOutput(program, f"output is not JSON ({e.msg})") from e

    if not isinstance(reply, dict):
        raise InvalidExtensionOutput(program, "output is not a JSON object")
    meta = reply.get("meta")
    if not isinstance(meta, dict) or not isinstance(meta.get("step_log"), list):
        raise InvalidExtensionOutput(program, "missing meta.step_log array")

    entries: list[StepLogEntry] = []
    for item in meta["step_log"]:
        if not isinstance(item, dict):
            raise InvalidExtensionOutput(program, "step_log entries must be objects")
        try:
            entries.append(StepLogEntry.from_dict(item))
        except (KeyError, TypeError) as e:
            raise InvalidExtensionOutput(program, f"bad step_log entry: {e}") from e

    return reply, tuple(entries)
