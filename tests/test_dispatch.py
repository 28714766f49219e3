"""Tests for burrow.dispatch: route matching, router and resource dispatch."""

import pytest

from burrow.dispatch.dispatcher import DispatchType, read_data_file, resolve_data_path
from burrow.dispatch.resource import ResourceDispatcher
from burrow.dispatch.route import RouteDescriptor, compile_path
from burrow.errors import ConfigurationError
from burrow.testing import TestClient


class TestCompilePath:
    def test_static_path(self) -> None:
        assert compile_path("/users").match("/users")
        assert compile_path("/users").match("/users/")
        assert not compile_path("/users").match("/users/1")

    def test_typed_param(self) -> None:
        found = compile_path("/users/{id:int}").match("/users/42")
        assert found is not None
        assert found.groupdict() == {"id": "42"}
        assert compile_path("/users/{id:int}").match("/users/fox") is None

    def test_colon_param(self) -> None:
        found = compile_path("/users/:name").match("/users/fox")
        assert found is not None
        assert found.group("name") == "fox"

    def test_path_param_spans_segments(self) -> None:
        found = compile_path("/files/{rest:path}").match("/files/a/b/c.txt")
        assert found is not None
        assert found.group("rest") == "a/b/c.txt"

    def test_unknown_converter(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown path converter"):
            compile_path("/x/{id:uuid}")


class TestRouteDescriptor:
    def test_match_returns_params(self) -> None:
        route = RouteDescriptor("/user/{id}", file_path="user/detail.html")
        assert route.match("GET", "/user/7") == {"id": "7"}

    def test_method_must_match(self) -> None:
        route = RouteDescriptor("/login", method="POST", sync=False)
        assert route.match("GET", "/login") is None
        assert route.match("post", "/login") == {}

    def test_wildcard_method(self) -> None:
        route = RouteDescriptor("/any", method="*")
        assert route.match("DELETE", "/any") == {}

    def test_coerce_mapping(self) -> None:
        route = RouteDescriptor.coerce(
            {"method": "POST", "url": "/api/login", "sync": False, "filePath": "login.json"}
        )
        assert route == RouteDescriptor("/api/login", method="POST", sync=False, file_path="login.json")

    def test_coerce_unknown_shape(self) -> None:
        assert RouteDescriptor.coerce("not a route") is None
        assert RouteDescriptor.coerce({"path": "/x"}) is None


class TestDataFiles:
    def test_relative_paths_use_root(self, tmp_path) -> None:
        assert resolve_data_path(tmp_path, "mock/a.json") == tmp_path / "mock" / "a.json"

    def test_absolute_path_kept(self, tmp_path) -> None:
        target = tmp_path / "elsewhere.json"
        assert resolve_data_path(tmp_path / "views", target) == target

    def test_empty_match_is_none(self, tmp_path) -> None:
        assert resolve_data_path(tmp_path, None) is None
        assert resolve_data_path(tmp_path, "") is None

    def test_read_missing_file(self, tmp_path) -> None:
        assert read_data_file(tmp_path / "missing.json") == (False, None)
        assert read_data_file(None) == (False, None)

    def test_read_json(self, tmp_path) -> None:
        path = tmp_path / "data.json"
        path.write_text('{"a": [1, 2]}')
        assert read_data_file(path) == (True, {"a": [1, 2]})


class TestResourceDispatcher:
    def _dispatcher(self, view_root) -> ResourceDispatcher:
        return ResourceDispatcher(
            view_root=view_root,
            extension="html",
            sync_data_match=lambda template: "mock/" + template.removesuffix(".html") + ".json",
            async_data_match=lambda path: path.strip("/") + ".json",
        )

    def test_template_file_is_sync(self, view_root) -> None:
        dispatcher = self._dispatcher(view_root).resolve("/user/detail.html")
        assert dispatcher is not None
        assert dispatcher.type is DispatchType.SYNC
        assert dispatcher.target == "user/detail.html"
        assert dispatcher.data_path == view_root.resolve() / "mock" / "user" / "detail.json"

    def test_data_match_is_async(self, view_root) -> None:
        dispatcher = self._dispatcher(view_root).resolve("/api/users")
        assert dispatcher is not None
        assert dispatcher.type is DispatchType.ASYNC
        assert dispatcher.target == "/api/users"

    def test_directory_is_dir(self, view_root) -> None:
        dispatcher = self._dispatcher(view_root).resolve("/docs")
        assert dispatcher is not None
        assert dispatcher.type is DispatchType.DIR
        assert dispatcher.target == view_root.resolve() / "docs"

    def test_root_is_dir(self, view_root) -> None:
        dispatcher = self._dispatcher(view_root).resolve("/")
        assert dispatcher is not None
        assert dispatcher.type is DispatchType.DIR

    def test_other_extension_is_not_dispatched(self, view_root) -> None:
        assert self._dispatcher(view_root).resolve("/notes.txt") is None

    def test_missing_path(self, view_root) -> None:
        assert self._dispatcher(view_root).resolve("/nope.html") is None

    def test_traversal_is_ignored(self, view_root) -> None:
        (view_root.parent / "secret.html").write_text("secret")
        assert self._dispatcher(view_root).resolve("/../secret.html") is None
        assert self._dispatcher(view_root).resolve("/%2e%2e/secret.html") is None

    def test_extension_with_dot(self, view_root) -> None:
        dispatcher = ResourceDispatcher(view_root=view_root, extension=".html")
        found = dispatcher.resolve("/about.html")
        assert found is not None
        assert found.data_path is None


class TestRouterDispatch:
    async def test_sync_route_renders_template_with_data(self, make_server) -> None:
        server = make_server()
        server.register_router_namespace(
            "mock", [RouteDescriptor("/user/{id}", file_path="user/detail.html")]
        )
        async with TestClient(server) as client:
            response = await client.get("/user/3")
        assert response.status == 200
        assert "<p>Fox #0</p>" in response.text

    async def test_handler_result_overlays_data(self, make_server) -> None:
        server = make_server()
        server.register_router_namespace(
            "mock",
            [
                RouteDescriptor(
                    "/user/{id}",
                    file_path="user/detail.html",
                    handler=lambda ctx: {"id": ctx.params["id"]},
                )
            ],
        )
        async with TestClient(server) as client:
            response = await client.get("/user/3")
        assert "<p>Fox #3</p>" in response.text

    async def test_async_route_reads_data_file(self, make_server) -> None:
        server = make_server()
        server.register_router_namespace(
            "api",
            [{"url": "/people", "sync": False, "filePath": "api/users.json"}],
        )
        async with TestClient(server) as client:
            response = await client.get("/people")
        assert response.status == 200
        assert response.content_type.startswith("application/json")
        assert response.text == '[{"id": 1, "name": "Fox"}]'

    async def test_async_handler(self, make_server) -> None:
        async def login(ctx):
            return {"ok": True, "user": ctx.request_body["user"]}

        server = make_server()
        server.register_router_namespace(
            "api", [RouteDescriptor("/login", method="POST", sync=False, handler=login)]
        )
        async with TestClient(server) as client:
            response = await client.post("/login", json={"user": "fox"})
        assert response.status == 200
        assert response.text == '{"ok": true, "user": "fox"}'

    async def test_first_matching_route_wins(self, make_server) -> None:
        server = make_server()
        server.register_router_namespace(
            "a", [RouteDescriptor("/page", file_path="about.html", handler=lambda ctx: {"name": "A"})]
        )
        server.register_router_namespace(
            "b", [RouteDescriptor("/page", file_path="about.html", handler=lambda ctx: {"name": "B"})]
        )
        async with TestClient(server) as client:
            response = await client.get("/page")
        assert "About A" in response.text

    async def test_routers_edited_after_prepare_apply(self, make_server) -> None:
        server = make_server()
        server.prepare()
        server.register_router_namespace(
            "late", [RouteDescriptor("/late", file_path="about.html")]
        )
        async with TestClient(server) as client:
            response = await client.get("/late")
        assert response.status == 200
        assert "About" in response.text

    async def test_unknown_router_shapes_are_skipped(self, make_server) -> None:
        server = make_server()
        server.register_router_namespace(
            "mixed", [object(), RouteDescriptor("/ok", file_path="about.html")]
        )
        async with TestClient(server) as client:
            response = await client.get("/ok")
        assert response.status == 200

    async def test_route_beats_resource(self, make_server) -> None:
        server = make_server()
        server.register_router_namespace(
            "mock",
            [RouteDescriptor("/index.html", file_path="about.html", handler=lambda ctx: {"name": "route"})],
        )
        async with TestClient(server) as client:
            response = await client.get("/index.html")
        assert "About route" in response.text
