"""Response classification against the expected-failure signature.

Anything that does not clearly look like a known failure is notable: the
operator reviews it. Success detection itself is left to the operator, a
status-code heuristic does not carry over between applications.
"""

from __future__ import annotations

from core.domain.models import Classification, FailureSignature, RequestResult, Verdict


def classify(result: RequestResult, signature: FailureSignature | None = None) -> Classification:
    if signature is None or not signature.is_configured:
        return Classification(verdict=Verdict.NOTABLE, reason="no failure signature configured")

    if result.error is not None:
        return Classification(verdict=Verdict.NOTABLE, reason="transport error", ambiguous=True)

    if signature.status is not None and result.status == signature.status:
        return Classification(
            verdict=Verdict.EXPECTED_FAILURE,
            reason=f"status {result.status} matches failure status",
        )

    if signature.message is not None and signature.message in result.text:
        return Classification(
            verdict=Verdict.EXPECTED_FAILURE,
            reason="body contains failure message",
        )

    # Fail open: an unparseable body is shown rather than dropped.
    if result.body_parse_error is not None:
        return Classification(
            verdict=Verdict.NOTABLE,
            reason=f"unparseable body: {result.body_parse_error}",
            ambiguous=True,
        )

    return Classification(verdict=Verdict.NOTABLE, reason="response differs from failure signature")
