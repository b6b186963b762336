"""Spray orchestration.

This module wires the pieces together: startup validation (word lists,
templates, target), dispatch and classification. UI concerns (printing,
progress) stay in the CLI and are reached through `PipelineHooks`, which makes
the pipeline reusable from tests or other entry points.
"""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, aclosing
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, Sequence

import httpx

from adapters.form_submitter import HttpFormSubmitter, encode_form
from adapters.http_client import build_async_client
from core.classifier import classify
from core.combinations import count_jobs, generate_jobs
from core.config import AppSettings
from core.domain.errors import FormSprayError, InvalidTargetError
from core.domain.models import (
    Classification,
    FailureSignature,
    FieldTemplate,
    RequestJob,
    RequestResult,
    SpraySummary,
)
from core.interfaces.submitter import FormSubmitter
from core.services.dispatcher import RetryPolicy, dispatch
from core.templates import PASS_TOKEN, USER_TOKEN, parse_field_templates
from core.wordlists import load_wordlists

logger = logging.getLogger(__name__)


@dataclass
class SprayRequest:
    """Parameters supplied by the CLI for one run."""

    user_file: Path
    pass_file: Path
    target: str
    form_fields: Sequence[str]
    failure_message: str | None = None
    failure_status: int | None = None
    interval_ms: int | None = None


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers (progress, warnings, results)."""

    warning: Callable[[str], None] | None = None
    start: Callable[[int], None] | None = None
    result: Callable[[RequestResult, Classification], None] | None = None


@dataclass
class PreparedSpray:
    """Everything validated at startup; nothing here has touched the network."""

    target: str
    usernames: tuple[str, ...]
    passwords: tuple[str, ...]
    templates: tuple[FieldTemplate, ...]
    signature: FailureSignature
    interval_ms: int | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return count_jobs(self.usernames, self.passwords)

    def jobs(self) -> Iterator[RequestJob]:
        return generate_jobs(
            self.usernames,
            self.passwords,
            self.templates,
            target=self.target,
            interval_ms=self.interval_ms,
        )


def validate_target(target: str) -> str:
    try:
        url = httpx.URL(target)
    except httpx.InvalidURL as exc:
        raise InvalidTargetError(f"invalid target URL {target!r}: {exc}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise InvalidTargetError(f"target must be an absolute http(s) URL, got {target!r}")
    return str(url)


def prepare_spray(request: SprayRequest, settings: AppSettings) -> PreparedSpray:
    """Run every startup check; raises `FormSprayError` before any request."""

    if request.interval_ms is not None and request.interval_ms < 0:
        raise FormSprayError(f"interval must be >= 0 ms, got {request.interval_ms}")

    templates = parse_field_templates(request.form_fields)
    target = validate_target(request.target)
    usernames, passwords = load_wordlists(
        request.user_file,
        request.pass_file,
        encoding=settings.wordlist_encoding,
    )
    signature = FailureSignature(status=request.failure_status, message=request.failure_message or None)

    prepared = PreparedSpray(
        target=target,
        usernames=usernames,
        passwords=passwords,
        templates=templates,
        signature=signature,
        interval_ms=request.interval_ms,
    )

    if not usernames:
        prepared.warnings.append(f"Username list {request.user_file} has no entries.")
    if not passwords:
        prepared.warnings.append(f"Password list {request.pass_file} has no entries.")
    if not any(
        USER_TOKEN in t.value_template or PASS_TOKEN in t.value_template for t in templates
    ):
        prepared.warnings.append("No form field references {USER} or {PASS}; every request is identical.")
    if not signature.is_configured:
        prepared.warnings.append("No failure signature configured; every response is reported.")
    return prepared


def retry_policy_from_settings(settings: AppSettings) -> RetryPolicy:
    return RetryPolicy(
        max_attempts=settings.max_attempts,
        backoff_seconds=settings.retry_backoff_seconds,
        retry_statuses=frozenset(settings.retry_statuses),
    )


def _tally(
    summary: SpraySummary,
    result: RequestResult,
    classification: Classification,
    *,
    keep_credentials: bool,
) -> None:
    summary.dispatched += 1
    if result.error is not None:
        summary.transport_errors += 1
    if classification.notable:
        summary.notable += 1
        # Without a signature every result is notable and the list would grow with |U|x|P|.
        if keep_credentials:
            summary.notable_credentials.append(result.credential)
    else:
        summary.expected_failures += 1


async def run_spray(
    *,
    settings: AppSettings,
    request: SprayRequest,
    hooks: PipelineHooks | None = None,
    submitter: FormSubmitter | None = None,
) -> SpraySummary:
    hooks = hooks or PipelineHooks()
    prepared = prepare_spray(request, settings)
    for message in prepared.warnings:
        if hooks.warning:
            hooks.warning(message)
        else:
            logger.warning(message)

    summary = SpraySummary(total=prepared.total)
    if not summary.total:
        return summary

    logger.info(
        "Dispatching %d submissions to %s (%d usernames x %d passwords, concurrency %d)",
        summary.total,
        prepared.target,
        len(prepared.usernames),
        len(prepared.passwords),
        settings.max_concurrency,
    )
    if hooks.start:
        hooks.start(summary.total)

    async with AsyncExitStack() as stack:
        if submitter is None:
            client = await stack.enter_async_context(build_async_client(settings))
            submitter = HttpFormSubmitter(
                client,
                expect_json=settings.expect_json,
                timeout_seconds=settings.http_timeout_seconds,
            )

        results = await stack.enter_async_context(
            aclosing(
                dispatch(
                    prepared.jobs(),
                    submitter,
                    max_concurrency=settings.max_concurrency,
                    retry=retry_policy_from_settings(settings),
                )
            )
        )
        async for result in results:
            classification = classify(result, prepared.signature)
            _tally(
                summary,
                result,
                classification,
                keep_credentials=prepared.signature.is_configured,
            )
            if hooks.result:
                hooks.result(result, classification)

    return summary


def preview_body(prepared: PreparedSpray) -> str | None:
    """Encoded body of the first submission (what `doctor` shows)."""

    if not prepared.total:
        return None
    first = next(prepared.jobs())
    return encode_form(first.fields).decode("ascii")
