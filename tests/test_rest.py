"""End-to-end REST routing through the ASGI interface."""

import json
import logging

import pytest

from crema.app import App
from crema.config import AppConfig
from crema.controller import Controller
from crema.errors import NotFound
from crema.routing.table import HTTP_METHODS
from crema.testing import TestClient


class Posts(Controller):
    url = "/posts"

    def index(self):
        return "posts"

    def post_get_verb(self):
        return "posted"


class Articles(Controller):
    url = "/articles"

    def index(self, *path):
        return f"index {'/'.join(path)}".strip()

    def post_edit(self):
        return "edited"

    def put_create(self):
        return ("created", 201)

    def head_details(self):
        return "details body"

    def post_get_verb(self):
        return "posted"

    def show(self, article_id):
        return {"id": article_id, "script_name": self.request.script_name}


@pytest.fixture
def app(caplog: pytest.LogCaptureFixture) -> App:
    with caplog.at_level(logging.WARNING, logger="crema.routing"):
        return App().mount(Articles)


class TestVerbRouting:
    async def test_index_answers_every_verb(self, app: App) -> None:
        async with TestClient(app) as client:
            for method in HTTP_METHODS:
                response = await client.request(method, "/articles")
                assert response.status == 200
                if method != "HEAD":
                    assert response.text == "index"

    async def test_verb_prefixed_action(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.post("/articles/edit")
        assert response.status == 200
        assert response.text == "edited"

    async def test_wrong_verb_is_501(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.get("/articles/edit")
        assert response.status == 501
        assert response.text == "Resource found but it can be accessed only through POST"
        assert response.content_type.startswith("text/plain")
        assert response.header_map["allow"] == "POST"

    async def test_put_status(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.put("/articles/create")
        assert response.status == 201
        assert response.text == "created"

    async def test_head_action_has_no_body(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.head("/articles/details")
        assert response.status == 200
        assert response.body == b""

    async def test_only_first_verb_counts(self, app: App) -> None:
        async with TestClient(app) as client:
            posted = await client.post("/articles/get_verb")
            got = await client.get("/articles/get_verb")
        assert posted.text == "posted"
        assert got.status == 501

    async def test_second_verb_is_not_a_route(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="crema.routing"):
            app = App().mount(Posts)
        async with TestClient(app) as client:
            posted = await client.post("/posts/get_verb")
            got = await client.get("/posts/verb")
        assert posted.status == 200
        assert posted.text == "posted"
        assert got.status == 404
        assert got.header_map["x-cascade"] == "pass"

    def test_second_verb_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="crema.routing"):
            App().mount(Articles)
        assert "post_get_verb" in caplog.text


class TestPathInfo:
    async def test_segments_become_arguments(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.get("/articles/show/42")
        assert json.loads(response.text) == {"id": "42", "script_name": "/articles/show"}

    async def test_index_receives_trailing_segments(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.get("/articles/2024/05")
        assert response.text == "index 2024/05"

    async def test_arity_mismatch_is_404(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.post("/articles/edit/5")
        assert response.status == 404
        assert response.text == "Not Found: /articles/edit/5"
        assert response.header_map["x-cascade"] == "pass"

    async def test_missing_argument_is_404(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.get("/articles/show")
        assert response.status == 404


class TestUnmatched:
    async def test_unknown_path(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.get("/nothing/here")
        assert response.status == 404
        assert response.text == "Not Found: /nothing/here"
        assert response.content_type.startswith("text/plain")
        assert response.header_map["x-cascade"] == "pass"

    async def test_prefix_is_not_a_match(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.get("/articlesx")
        assert response.status == 404


class TestBaseUrl:
    async def test_served_under_base_url(self) -> None:
        app = App(AppConfig(base_url="/site")).mount(Articles)
        async with TestClient(app) as client:
            inside = await client.post("/site/articles/edit")
            outside = await client.post("/articles/edit")
        assert inside.text == "edited"
        assert outside.status == 404


class TestErrors:
    async def test_action_exception_is_500(self) -> None:
        class Broken(Controller):
            def index(self):
                raise ValueError("boom")

        async with TestClient(App().mount(Broken)) as client:
            response = await client.get("/broken")
        assert response.status == 500
        assert response.text == "Internal Server Error"

    async def test_debug_shows_traceback(self) -> None:
        class Broken(Controller):
            def index(self):
                raise ValueError("boom")

        async with TestClient(App(AppConfig(debug=True)).mount(Broken)) as client:
            response = await client.get("/broken")
        assert response.status == 500
        assert "ValueError: boom" in response.text

    async def test_action_raising_http_error(self) -> None:
        class Guarded(Controller):
            def index(self):
                raise NotFound("Not Found: hidden")

        async with TestClient(App().mount(Guarded)) as client:
            response = await client.get("/guarded")
        assert response.status == 404
        assert response.text == "Not Found: hidden"
