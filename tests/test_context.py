"""Tests for crema.context — the current-request context variable."""

import pytest

from crema.app import App
from crema.context import get_request
from crema.controller import Controller
from crema.testing import TestClient


class Whoami(Controller):
    def index(self, *path):
        request = get_request()
        return f"{request.script_name}|{request.path}|{request is self.request}"


class TestGetRequest:
    def test_outside_request(self) -> None:
        with pytest.raises(LookupError):
            get_request()

    async def test_inside_action_is_adjusted_request(self) -> None:
        async with TestClient(App().mount(Whoami)) as client:
            response = await client.get("/whoami/a/b")
        assert response.text == "/whoami|/a/b|True"

    async def test_reset_after_request(self) -> None:
        async with TestClient(App().mount(Whoami)) as client:
            await client.get("/whoami")
        with pytest.raises(LookupError):
            get_request()
