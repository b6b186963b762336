"""Form field templates.

A template is `key:value` where the value may reference the current credential
through `{USER}` and `{PASS}`. Unknown `{...}` tokens are left untouched so
literal braces can be sent as-is.
"""

from __future__ import annotations

import re
from typing import Iterable

from core.domain.errors import MalformedTemplateError
from core.domain.models import Credential, FieldTemplate, SubstitutedField

USER_TOKEN = "{USER}"
PASS_TOKEN = "{PASS}"

_TOKEN_RE = re.compile(re.escape(USER_TOKEN) + "|" + re.escape(PASS_TOKEN))


def parse_field_template(raw: str) -> FieldTemplate:
    """Split on the first `:`; later colons belong to the value."""

    key, sep, value = raw.partition(":")
    if not sep:
        raise MalformedTemplateError(raw)
    if not key:
        raise MalformedTemplateError(raw, "empty field name")
    return FieldTemplate(key=key, value_template=value)


def parse_field_templates(raws: Iterable[str]) -> tuple[FieldTemplate, ...]:
    templates = tuple(parse_field_template(raw) for raw in raws)
    if not templates:
        raise MalformedTemplateError("", "at least one form field is required")
    return templates


def substitute(template: FieldTemplate, credential: Credential) -> SubstitutedField:
    # Single pass: a username containing "{PASS}" is not expanded again.
    values = {USER_TOKEN: credential.username, PASS_TOKEN: credential.password}
    value = _TOKEN_RE.sub(lambda m: values[m.group(0)], template.value_template)
    return SubstitutedField(key=template.key, value=value)
