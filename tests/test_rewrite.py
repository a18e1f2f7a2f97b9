"""Tests for rewriters — templates answered by a plain function."""

from crema.app import App
from crema.context import get_request
from crema.controller import Controller
from crema.http.response import Redirect, Response
from crema.testing import TestClient


def legacy_post(slug):
    query = get_request().query_string.decode()
    target = f"/posts/show/{slug}"
    return Redirect(f"{target}?{query}" if query else target, status=301)


def archive(year, month):
    return Response(f"archive {year}-{month or 'all'}").with_header("X-Rewritten", "1")


class Posts(Controller):
    url = "/posts"

    def show(self, slug):
        return f"post {slug}"


def _setup(config) -> None:
    config.rewrite("/legacy/{slug}", legacy_post)
    config.rewrite("/archive/{year}/{month?}", archive)


class TestRewrite:
    async def test_redirect(self) -> None:
        app = App().mount(Posts, setup=_setup)
        async with TestClient(app) as client:
            response = await client.get("/posts/legacy/hello")
        assert response.status == 301
        assert response.header_map["location"] == "/posts/show/hello"

    async def test_request_reachable_from_rewriter(self) -> None:
        app = App().mount(Posts, setup=_setup)
        async with TestClient(app) as client:
            response = await client.get("/posts/legacy/hello?ref=feed")
        assert response.header_map["location"] == "/posts/show/hello?ref=feed"

    async def test_every_verb(self) -> None:
        app = App().mount(Posts, setup=_setup)
        async with TestClient(app) as client:
            response = await client.post("/posts/legacy/hello")
        assert response.status == 301

    async def test_optional_capture(self) -> None:
        app = App().mount(Posts, setup=_setup)
        async with TestClient(app) as client:
            full = await client.get("/posts/archive/2024/05")
            partial = await client.get("/posts/archive/2024")
        assert full.text == "archive 2024-05"
        assert partial.text == "archive 2024-all"
        assert partial.header_map["x-rewritten"] == "1"

    async def test_action_still_served(self) -> None:
        app = App().mount(Posts, setup=_setup)
        async with TestClient(app) as client:
            response = await client.get("/posts/show/hello")
        assert response.text == "post hello"

    def test_listed_in_url_map(self) -> None:
        app = App().mount(Posts, setup=_setup)
        assert app.url_map()["/posts/legacy/{slug}"]["GET"] == "Posts#legacy_post"

    async def test_rewriter_follows_remap(self) -> None:
        app = App().mount(Posts, "/blog", setup=_setup)
        async with TestClient(app) as client:
            response = await client.get("/blog/posts/legacy/hello")
        assert response.status == 301
