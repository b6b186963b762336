"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers, límites del pool y política de proxy.
- Facilita testeo: se puede inyectar un `transport` (p.ej. `httpx.MockTransport`).
"""

from __future__ import annotations

from http.cookiejar import CookieJar, DefaultCookiePolicy

import httpx

from core.config import AppSettings

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

_BODYLESS_METHODS = ("GET", "HEAD")


def _cookieless_jar() -> CookieJar:
    # Allow-list vacía: se rechaza todo Set-Cookie, nunca se reenvía nada.
    # Se pasa el jar crudo: envolverlo en httpx.Cookies lo copia y pierde la policy.
    return CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))


async def _drop_body_headers(request: httpx.Request) -> None:
    """Un 302/303 reenvía los headers del POST original a un GET sin body."""

    if request.method in _BODYLESS_METHODS:
        request.headers.pop("Content-Type", None)


def build_async_client(
    settings: AppSettings | None = None,
    *,
    max_connections: int | None = None,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` para envíos de formularios.

    Por qué un builder:
    - Un único pool de conexiones, dimensionado igual que el pool de workers.
    - Sin cookies entre envíos y sin Referer: cada intento es independiente.

    Nota: el `Content-Type` del formulario va en cada POST, no como default.
    """

    settings = settings or AppSettings()
    pool_size = max_connections or settings.max_concurrency
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Cache-Control": "no-cache",
    }
    if extra_headers:
        headers.update(extra_headers)

    kwargs: dict[str, object] = {}
    if transport is not None:
        kwargs["transport"] = transport
    elif settings.proxy:
        kwargs["proxy"] = settings.proxy

    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        limits=httpx.Limits(
            max_connections=pool_size,
            max_keepalive_connections=pool_size,
        ),
        follow_redirects=True,
        verify=settings.verify_tls,
        headers=headers,
        cookies=_cookieless_jar(),
        event_hooks={"request": [_drop_body_headers]},
        **kwargs,
    )
