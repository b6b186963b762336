"""Word list loading (usernames / passwords).

Lists are streamed line by line and returned as immutable tuples: both lists
must be fully known before the size of the cartesian product is.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

from core.domain.errors import WordListError

logger = logging.getLogger(__name__)


def iter_wordlist(path: Path, *, encoding: str = "utf-8") -> Iterator[str]:
    """Yield non-empty lines of `path` in file order.

    Universal newlines: `\\n` and `\\r\\n` end a line the same way. Only the
    terminator is stripped, surrounding spaces are part of the entry.
    """

    with path.open("r", encoding=encoding, newline=None) as handle:
        for line in handle:
            entry = line.rstrip("\r\n")
            if entry:
                yield entry


def load_wordlist(path: Path | str, *, encoding: str = "utf-8") -> tuple[str, ...]:
    """Load a whole list or fail; a partial list is never returned."""

    path = Path(path)
    try:
        entries = tuple(iter_wordlist(path, encoding=encoding))
    except OSError as exc:
        raise WordListError(path, exc.strerror or str(exc)) from exc
    except UnicodeDecodeError as exc:
        raise WordListError(path, f"not valid {encoding} ({exc.reason} at byte {exc.start})") from exc

    logger.debug("Loaded %d entries from %s", len(entries), path)
    return entries


def load_wordlists(
    user_file: Path | str,
    pass_file: Path | str,
    *,
    encoding: str = "utf-8",
) -> tuple[tuple[str, ...], tuple[str, ...]]:
    usernames = load_wordlist(user_file, encoding=encoding)
    passwords = load_wordlist(pass_file, encoding=encoding)
    return usernames, passwords
