"""Submitter HTTP de formularios.

Implementa `core.interfaces.submitter.FormSubmitter` sobre un `httpx.AsyncClient`
compartido. Un POST por job; todo fallo de transporte se pliega en el
`RequestResult` devuelto.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import Any, Iterable
from urllib.parse import urlencode

import httpx

from adapters.http_client import FORM_CONTENT_TYPE
from core.domain.models import RequestJob, RequestResult, SubstitutedField
from core.interfaces.submitter import FormSubmitter

logger = logging.getLogger(__name__)


def encode_form(fields: Iterable[SubstitutedField]) -> bytes:
    """`application/x-www-form-urlencoded` body.

    Pairs keep their order and repeated keys are sent as repeated pairs.
    """

    return urlencode([(f.key, f.value) for f in fields]).encode("ascii")


def _is_json_response(response: httpx.Response) -> bool:
    content_type = response.headers.get("content-type", "").lower()
    return "json" in content_type.split(";", 1)[0]


def describe_transport_error(exc: Exception) -> str:
    message = str(exc).strip()
    name = exc.__class__.__name__
    return f"{name}: {message}" if message else name


class HttpFormSubmitter(FormSubmitter):
    """POSTs each job's fields to its target.

    `timeout_seconds` caps the whole submission (redirects and body included);
    httpx's own timeout only bounds each connect/read/write/pool wait.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        expect_json: bool = False,
        timeout_seconds: float | None = None,
    ) -> None:
        self._client = client
        self._expect_json = expect_json
        self._timeout_seconds = timeout_seconds

    def _parse_body(self, response: httpx.Response) -> tuple[Any, str | None]:
        text = response.text
        if not (self._expect_json or _is_json_response(response)):
            return text, None
        try:
            return json.loads(text), None
        except json.JSONDecodeError as exc:
            return text, f"invalid JSON ({exc.msg})"

    def _failed(self, job: RequestJob, error: str, started: float) -> RequestResult:
        logger.debug("Job %d (%s) failed: %s", job.index, job.credential.username, error)
        return RequestResult(
            job_index=job.index,
            credential=job.credential,
            error=error,
            elapsed_seconds=time.perf_counter() - started,
        )

    async def submit(self, job: RequestJob) -> RequestResult:
        started = time.perf_counter()
        request = self._client.post(
            job.target,
            content=encode_form(job.fields),
            headers={"Content-Type": FORM_CONTENT_TYPE},
        )
        try:
            response = await asyncio.wait_for(request, timeout=self._timeout_seconds)
        except asyncio.TimeoutError:
            return self._failed(
                job,
                f"TimeoutError: no complete response within {self._timeout_seconds:g}s",
                started,
            )
        except httpx.HTTPError as exc:
            return self._failed(job, describe_transport_error(exc), started)

        body, parse_error = self._parse_body(response)
        return RequestResult(
            job_index=job.index,
            credential=job.credential,
            status=response.status_code,
            status_text=response.reason_phrase,
            body=body,
            text=response.text,
            body_parse_error=parse_error,
            elapsed_seconds=time.perf_counter() - started,
        )
