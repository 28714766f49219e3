"""Tests for the request body parsing stage."""

import pytest

from burrow.http.forms import FormData
from burrow.testing import TestClient


@pytest.fixture
def capturing(make_server):
    """A session whose user middleware records ``ctx.request_body``."""
    seen: list[object] = []

    def capture(session):
        async def stage(ctx, next) -> None:
            seen.append(ctx.request_body)
            ctx.respond("ok", content_type="text/plain")
            await next()

        return stage

    def factory(**overrides):
        server = make_server(**overrides)
        server.use(capture)
        return server

    return factory, seen


class TestBodyParser:
    async def test_json(self, capturing) -> None:
        factory, seen = capturing
        async with TestClient(factory()) as client:
            response = await client.post("/submit", json={"name": "fox", "tags": [1, 2]})
        assert response.status == 200
        assert seen == [{"name": "fox", "tags": [1, 2]}]

    async def test_vendor_json(self, capturing) -> None:
        factory, seen = capturing
        async with TestClient(factory()) as client:
            await client.post(
                "/submit",
                body=b'{"ok": true}',
                headers={"content-type": "application/vnd.api+json"},
            )
        assert seen == [{"ok": True}]

    async def test_malformed_json_is_400(self, capturing) -> None:
        factory, seen = capturing
        async with TestClient(factory()) as client:
            response = await client.post(
                "/submit", body=b"{nope", headers={"content-type": "application/json"}
            )
        assert response.status == 400
        assert seen == []

    async def test_urlencoded_form(self, capturing) -> None:
        factory, seen = capturing
        async with TestClient(factory()) as client:
            await client.post(
                "/submit",
                body=b"name=fox&color=red&color=blue",
                headers={"content-type": "application/x-www-form-urlencoded"},
            )
        [form] = seen
        assert isinstance(form, FormData)
        assert form["name"] == "fox"
        assert form.get_list("color") == ["red", "blue"]

    async def test_multipart_form(self, capturing) -> None:
        factory, seen = capturing
        body = (
            b"--XyZ\r\n"
            b'Content-Disposition: form-data; name="title"\r\n\r\n'
            b"hello\r\n"
            b"--XyZ\r\n"
            b'Content-Disposition: form-data; name="upload"; filename="a.txt"\r\n'
            b"Content-Type: text/plain\r\n\r\n"
            b"file body\r\n"
            b"--XyZ--\r\n"
        )
        async with TestClient(factory()) as client:
            await client.post(
                "/submit",
                body=body,
                headers={"content-type": "multipart/form-data; boundary=XyZ"},
            )
        [form] = seen
        assert form["title"] == "hello"
        upload = form.files["upload"]
        assert upload.filename == "a.txt"
        assert upload.content == b"file body"

    async def test_text(self, capturing) -> None:
        factory, seen = capturing
        async with TestClient(factory()) as client:
            await client.post("/submit", body=b"hello", headers={"content-type": "text/plain"})
        assert seen == ["hello"]

    async def test_other_types_stay_bytes(self, capturing) -> None:
        factory, seen = capturing
        async with TestClient(factory()) as client:
            await client.post(
                "/submit", body=b"\x00\x01", headers={"content-type": "application/octet-stream"}
            )
        assert seen == [b"\x00\x01"]

    async def test_empty_body_is_none(self, capturing) -> None:
        factory, seen = capturing
        async with TestClient(factory()) as client:
            await client.post("/submit")
        assert seen == [None]

    async def test_get_is_not_parsed(self, capturing) -> None:
        factory, seen = capturing
        async with TestClient(factory()) as client:
            await client.get("/submit")
        assert seen == [None]

    async def test_oversized_body_is_413(self, capturing) -> None:
        factory, seen = capturing
        async with TestClient(factory(max_body_size=4)) as client:
            response = await client.post("/submit", body=b"too large")
        assert response.status == 413
        assert seen == []

    async def test_proxy_mode_leaves_body_unread(self, make_server) -> None:
        bodies: list[bytes] = []

        def forward(session):
            async def stage(ctx, next) -> None:
                bodies.append(await ctx.request.body())
                ctx.respond("forwarded", content_type="text/plain")
                await next()

            return stage

        server = make_server(if_proxy=True)
        server.use(forward)
        async with TestClient(server) as client:
            response = await client.post("/upstream", json={"a": 1})
        assert response.text == "forwarded"
        assert bodies == [b'{"a": 1}']
