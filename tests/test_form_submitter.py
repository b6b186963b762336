from __future__ import annotations

import asyncio
from urllib.parse import parse_qsl

import httpx

from adapters.form_submitter import HttpFormSubmitter, encode_form
from adapters.http_client import FORM_CONTENT_TYPE, build_async_client
from core.config import AppSettings
from core.domain.models import Credential, RequestJob, SubstitutedField

TARGET = "https://app.test/login"


def _settings(**kwargs) -> AppSettings:
    return AppSettings(_env_file=None, **kwargs)


def _job(index: int = 0, **fields: str) -> RequestJob:
    fields = fields or {"user": "bob", "pass": "pw"}
    return RequestJob(
        index=index,
        target=TARGET,
        credential=Credential(username=fields.get("user", "bob"), password=fields.get("pass", "pw")),
        fields=tuple(SubstitutedField(key=k, value=v) for k, v in fields.items()),
    )


def _submit(handler, jobs, **settings_kwargs):
    async def go():
        settings = _settings(**settings_kwargs)
        async with build_async_client(settings, transport=httpx.MockTransport(handler)) as client:
            submitter = HttpFormSubmitter(client, expect_json=settings.expect_json)
            return [await submitter.submit(job) for job in jobs]

    return asyncio.run(go())


def test_encode_form_percent_encodes_and_repeats_keys():
    fields = [
        SubstitutedField(key="user", value="bob@example.test"),
        SubstitutedField(key="pass", value="p&ss word=1"),
        SubstitutedField(key="user", value="second"),
    ]

    body = encode_form(fields)

    assert body == b"user=bob%40example.test&pass=p%26ss+word%3D1&user=second"
    assert parse_qsl(body.decode()) == [("user", "bob@example.test"), ("pass", "p&ss word=1"), ("user", "second")]


def test_submit_posts_form_body():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(401, json={"error": "bad login"})

    [result] = _submit(handler, [_job(user="alice", **{"pass": "s3cret"})])

    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == TARGET
    assert request.headers["content-type"] == FORM_CONTENT_TYPE
    assert "referer" not in request.headers
    assert parse_qsl(request.content.decode()) == [("user", "alice"), ("pass", "s3cret")]

    assert result.status == 401
    assert result.status_text == "Unauthorized"
    assert result.body == {"error": "bad login"}
    assert result.error is None
    assert result.record() == {"status": 401, "statusText": "Unauthorized", "body": {"error": "bad login"}}


def test_plain_text_body_is_kept_as_text():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="Welcome back")

    [result] = _submit(handler, [_job()])

    assert result.body == "Welcome back"
    assert result.body_parse_error is None


def test_expect_json_flags_non_json_bodies():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>Bad gateway</html>")

    [result] = _submit(handler, [_job()], expect_json=True)

    assert result.status == 502
    assert result.body == "<html>Bad gateway</html>"
    assert result.body_parse_error is not None


def test_transport_error_becomes_result():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    [result] = _submit(handler, [_job(index=3)])

    assert result.job_index == 3
    assert result.status is None
    assert result.error is not None and "ConnectError" in result.error
    assert result.record() == {"error": result.error}


def test_timeout_becomes_result():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    [result] = _submit(handler, [_job()])

    assert "ReadTimeout" in result.error


def test_redirects_are_followed():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/login":
            return httpx.Response(302, headers={"Location": "https://app.test/home"})
        return httpx.Response(200, text="home")

    [result] = _submit(handler, [_job()])

    assert result.status == 200
    assert result.body == "home"


def test_cookies_are_never_sent_back():
    cookie_headers: list[str | None] = []

    def handler(request: httpx.Request) -> httpx.Response:
        cookie_headers.append(request.headers.get("cookie"))
        return httpx.Response(200, text="ok", headers={"Set-Cookie": "session=abc; Path=/"})

    _submit(handler, [_job(index=0), _job(index=1)])

    assert cookie_headers == [None, None]


def test_redirect_to_get_drops_form_content_type():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/login":
            return httpx.Response(303, headers={"Location": "https://app.test/home"})
        return httpx.Response(200, text="home")

    [result] = _submit(handler, [_job()])

    assert result.status == 200
    post, follow_up = seen
    assert post.method == "POST"
    assert post.headers["content-type"] == FORM_CONTENT_TYPE
    assert follow_up.method == "GET"
    assert follow_up.content == b""
    assert "content-type" not in follow_up.headers


def test_declared_json_that_does_not_parse_is_flagged():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>oops", headers={"Content-Type": "application/json"})

    [result] = _submit(handler, [_job()])

    assert result.status == 200
    assert result.body == "<html>oops"
    assert result.body_parse_error is not None


def test_slow_body_is_abandoned_after_total_timeout():
    async def trickle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        try:
            await reader.readuntil(b"\r\n\r\n")
            writer.write(b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\nContent-Length: 15\r\n\r\n")
            for _ in range(15):
                writer.write(b"x")
                await writer.drain()
                await asyncio.sleep(0.2)
        except (ConnectionError, asyncio.IncompleteReadError):
            pass
        finally:
            writer.close()

    async def go():
        server = await asyncio.start_server(trickle, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        job = _job().model_copy(update={"target": f"http://127.0.0.1:{port}/login"})
        # Each read completes well within httpx's own timeout.
        settings = _settings(http_timeout_seconds=5)
        try:
            async with build_async_client(settings, transport=httpx.AsyncHTTPTransport()) as client:
                return await HttpFormSubmitter(client, timeout_seconds=0.5).submit(job)
        finally:
            server.close()

    result = asyncio.run(go())

    assert result.status is None
    assert result.error is not None and "TimeoutError" in result.error
    assert result.elapsed_seconds < 2
