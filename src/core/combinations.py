"""Lazy cartesian product of credentials into request jobs.

Passwords vary fastest: every password is tried against one account before
moving to the next one. Jobs are produced one at a time, memory stays
proportional to the inputs, not to their product.
"""

from __future__ import annotations

from typing import Iterator, Sequence

from core.domain.models import Credential, FieldTemplate, RequestJob
from core.templates import substitute


def count_jobs(usernames: Sequence[str], passwords: Sequence[str]) -> int:
    return len(usernames) * len(passwords)


def launch_offset(index: int, interval_ms: int | None) -> float:
    """Earliest launch of job `index`, in seconds after dispatch start."""

    if not interval_ms:
        return 0.0
    return index * interval_ms / 1000.0


def generate_jobs(
    usernames: Sequence[str],
    passwords: Sequence[str],
    templates: Sequence[FieldTemplate],
    *,
    target: str,
    interval_ms: int | None = None,
) -> Iterator[RequestJob]:
    index = 0
    for username in usernames:
        for password in passwords:
            credential = Credential(username=username, password=password)
            yield RequestJob(
                index=index,
                target=target,
                credential=credential,
                fields=tuple(substitute(t, credential) for t in templates),
                launch_offset_seconds=launch_offset(index, interval_ms),
            )
            index += 1
