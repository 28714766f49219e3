"""Tests for HTML script injection."""

import pytest

from burrow.dispatch.route import RouteDescriptor
from burrow.middleware.inject import BuiltinScripts, InjectedScript, is_html, script_tag
from burrow.testing import TestClient

CONNECTOR = '<script type="text/javascript" src="/__burrow_client__/js/builtin/websocket-connector.js"></script>'


class TestScriptTag:
    def test_renders_tag(self) -> None:
        assert script_tag("/a.js") == '<script type="text/javascript" src="/a.js"></script>'

    def test_escapes_attribute(self) -> None:
        tag = script_tag('/a.js"><img src=x onerror=alert(1)>')
        assert '"><img' not in tag
        assert "&quot;&gt;&lt;img" in tag

    @pytest.mark.parametrize(
        ("content_type", "expected"),
        [
            ("text/html; charset=utf-8", True),
            ("TEXT/HTML", True),
            ("application/json", False),
            ("", False),
            (None, False),
        ],
    )
    def test_is_html(self, content_type, expected) -> None:
        assert is_html(content_type) is expected


class TestBuiltinScripts:
    async def test_appended_to_html(self, make_server) -> None:
        async with TestClient(make_server()) as client:
            response = await client.get("/index.html")
        text = response.text
        assert text.index("</html>") < text.index("eventbus.js")
        assert text.index("eventbus.js") < text.index("websocket-connector.js") < text.index("eval.js")
        assert CONNECTOR in text

    async def test_not_added_to_json(self, make_server) -> None:
        server = make_server()
        server.inject_script("/debug.js")
        server.inject_script("/api.js", lambda request: True)
        async with TestClient(server) as client:
            response = await client.get("/api/users")
        assert response.content_type.startswith("application/json")
        assert "<script" not in response.text

    async def test_not_added_to_plain_text(self, make_server, tmp_path) -> None:
        (tmp_path / "readme.txt").write_text("hi")
        server = make_server()
        server.inject_script("/debug.js")
        server.inject_script("/files.js", lambda request: True)
        server.serve("/files", tmp_path)
        async with TestClient(server) as client:
            response = await client.get("/files/readme.txt")
        assert response.text == "hi"

    def test_custom_prefix(self) -> None:
        stage = BuiltinScripts("tools/")
        assert stage._tags[0] == script_tag("/tools/js/builtin/eventbus.js")

    def test_live_path_passed_to_connector(self) -> None:
        stage = BuiltinScripts("/__burrow_client__", "/ws/live")
        assert "websocket-connector.js?live=%2Fws%2Flive" in stage._tags[1]

    def test_default_live_path_adds_no_query(self) -> None:
        stage = BuiltinScripts("/__burrow_client__")
        assert stage._tags[1] == CONNECTOR

    async def test_client_bundle_is_served(self, make_server) -> None:
        async with TestClient(make_server()) as client:
            response = await client.get("/__burrow_client__/js/builtin/websocket-connector.js")
        assert response.status == 200
        assert "javascript" in response.content_type
        assert "WebSocket" in response.text


class TestInjectedScripts:
    async def test_unconditional_script(self, make_server) -> None:
        server = make_server()
        server.inject_script("/debug.js")
        async with TestClient(server) as client:
            response = await client.get("/index.html")
        assert response.text.endswith(script_tag("/debug.js"))

    async def test_after_builtin_scripts(self, make_server) -> None:
        server = make_server()
        server.inject_script("/debug.js")
        async with TestClient(server) as client:
            text = (await client.get("/index.html")).text
        assert text.index("eval.js") < text.index("/debug.js")

    async def test_condition_filters_per_request(self, make_server, view_root) -> None:
        (view_root / "admin").mkdir()
        (view_root / "admin" / "panel.html").write_text("<p>panel</p>")
        server = make_server()
        server.inject_script("/admin.js", lambda request: request.path.startswith("/admin"))
        async with TestClient(server) as client:
            admin = await client.get("/admin/panel.html")
            home = await client.get("/index.html")
        assert script_tag("/admin.js") in admin.text
        assert "/admin.js" not in home.text

    async def test_builtin_scripts_ignore_conditions(self, make_server) -> None:
        server = make_server()
        server.register_router_namespace("pages", [RouteDescriptor("/admin", file_path="about.html")])
        server.inject_script("/public.js", lambda request: request.path != "/admin")
        async with TestClient(server) as client:
            admin = await client.get("/admin")
            root = await client.get("/")
        assert "/public.js" not in admin.text
        assert script_tag("/public.js") in root.text
        assert CONNECTOR in admin.text
        assert CONNECTOR in root.text

    async def test_registration_order_kept(self, make_server) -> None:
        server = make_server()
        server.inject_script("/one.js")
        server.inject_script(InjectedScript("/two.js"))
        async with TestClient(server) as client:
            text = (await client.get("/index.html")).text
        assert text.index("/one.js") < text.index("/two.js")

    async def test_registration_after_prepare_applies(self, make_server) -> None:
        server = make_server()
        async with TestClient(server) as client:
            before = await client.get("/index.html")
            server.inject_script("/late.js")
            after = await client.get("/index.html")
        assert "/late.js" not in before.text
        assert script_tag("/late.js") in after.text

    async def test_src_is_escaped(self, make_server) -> None:
        server = make_server()
        server.inject_script('/x.js?a=1&b="2"')
        async with TestClient(server) as client:
            text = (await client.get("/index.html")).text
        assert 'src="/x.js?a=1&amp;b=&quot;2&quot;"' in text

    def test_inject_script_returns_descriptor(self, make_server) -> None:
        server = make_server()
        script = server.inject_script("/a.js")
        assert script == InjectedScript("/a.js")
        assert server.injected_scripts == [script]
