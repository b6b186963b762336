"""Error taxonomy.

Startup errors (word lists, templates, target) are fatal and raised before any
request leaves the process. Per-request failures never surface as exceptions:
they travel inside `RequestResult.error`.
"""

from __future__ import annotations


class FormSprayError(Exception):
    """Base class for every fatal error the CLI reports and exits on."""


class WordListError(FormSprayError, OSError):
    """A username/password list could not be opened or decoded."""

    def __init__(self, path: object, reason: str) -> None:
        super().__init__(f"cannot read word list {path}: {reason}")
        self.path = path
        self.reason = reason


class MalformedTemplateError(FormSprayError, ValueError):
    """A `key:value` field template is missing its delimiter or its key."""

    def __init__(self, raw: str, reason: str = "expected 'key:value'") -> None:
        super().__init__(f"malformed form field {raw!r}: {reason}")
        self.raw = raw


class InvalidTargetError(FormSprayError, ValueError):
    """The target is not an absolute http(s) URL."""
