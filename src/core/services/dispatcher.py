"""Request dispatch: bounded worker pool with soft stagger and retries.

A fixed number of workers pull jobs from the lazy job iterator, so jobs are
launched in emission order and never more than `max_concurrency` are in
flight. The stagger is per job: job *i* waits until `start + i * interval`
and never waits for another job to complete. Results are yielded as they
complete.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Iterable

from core.domain.models import RequestJob, RequestResult
from core.interfaces.submitter import FormSubmitter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded, idempotent re-submission of a single job.

    A login attempt can safely be repeated, so the same job (same credential,
    same fields) is sent again while its outcome is a transport error or one
    of `retry_statuses`.
    """

    max_attempts: int = 1
    backoff_seconds: float = 0.5
    retry_statuses: frozenset[int] = frozenset()

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.backoff_seconds < 0:
            raise ValueError("backoff_seconds must be >= 0")

    def should_retry(self, result: RequestResult) -> bool:
        if result.error is not None:
            return True
        return result.status in self.retry_statuses

    def delay_for(self, attempt: int) -> float:
        """Pause after the `attempt`-th failed try (1-based)."""

        return self.backoff_seconds * (2 ** (attempt - 1))


async def _submit_once(submitter: FormSubmitter, job: RequestJob) -> RequestResult:
    try:
        return await submitter.submit(job)
    except Exception as exc:
        # A misbehaving submitter must not take its worker (and the run) down.
        logger.exception("Submitter raised on job %d", job.index)
        return RequestResult(
            job_index=job.index,
            credential=job.credential,
            error=f"{exc.__class__.__name__}: {exc}",
        )


async def submit_with_retry(
    submitter: FormSubmitter,
    job: RequestJob,
    policy: RetryPolicy | None = None,
) -> RequestResult:
    policy = policy or RetryPolicy()
    attempt = 0
    while True:
        attempt += 1
        result = await _submit_once(submitter, job)
        if attempt >= policy.max_attempts or not policy.should_retry(result):
            return result.model_copy(update={"attempts": attempt})

        delay = policy.delay_for(attempt)
        logger.info(
            "Retrying job %d (%s) in %.2fs after attempt %d/%d: %s",
            job.index,
            job.credential.username,
            delay,
            attempt,
            policy.max_attempts,
            result.error or f"HTTP {result.status}",
        )
        if delay:
            await asyncio.sleep(delay)


async def dispatch(
    jobs: Iterable[RequestJob],
    submitter: FormSubmitter,
    *,
    max_concurrency: int = 20,
    retry: RetryPolicy | None = None,
) -> AsyncIterator[RequestResult]:
    """Submit every job and yield results in completion order.

    Closing the iterator (or cancelling the consuming task) cancels the
    workers and abandons whatever is still in flight.
    """

    if max_concurrency < 1:
        raise ValueError("max_concurrency must be >= 1")

    loop = asyncio.get_running_loop()
    start = loop.time()
    source = iter(jobs)
    queue: asyncio.Queue[RequestResult | None] = asyncio.Queue()

    async def worker() -> None:
        try:
            # Workers share `source`; next() is synchronous, so pulls never interleave.
            for job in source:
                delay = start + job.launch_offset_seconds - loop.time()
                if delay > 0:
                    await asyncio.sleep(delay)
                logger.debug("Launching job %d (%s)", job.index, job.credential.username)
                result = await submit_with_retry(submitter, job, retry)
                logger.debug("Job %d done: %s", job.index, result.record())
                queue.put_nowait(result)
        finally:
            queue.put_nowait(None)

    workers = [
        asyncio.create_task(worker(), name=f"formspray-worker-{n}")
        for n in range(max_concurrency)
    ]
    remaining = len(workers)
    try:
        while remaining:
            item = await queue.get()
            if item is None:
                remaining -= 1
                continue
            yield item
        # Surfaces errors raised by the job iterator itself.
        await asyncio.gather(*workers)
    finally:
        for task in workers:
            if not task.done():
                task.cancel()
        await asyncio.gather(*workers, return_exceptions=True)
