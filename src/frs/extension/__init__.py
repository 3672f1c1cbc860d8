"""Subprocess extensions: external programs that compute context steps."""

from frs.extension.protocol import CONTEXT_FILE_ENV, CONTEXT_PLACEHOLDER, parse_reply
from frs.extension.runner import ExtensionResult, ExtensionRunner

__all__ = [
    "CONTEXT_FILE_ENV",
    "CONTEXT_PLACEHOLDER",
    "ExtensionResult",
    "ExtensionRunner",
    "parse_reply",
]
