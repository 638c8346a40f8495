"""HTTP endpoint tests against a stub backend."""

import pytest
from fastapi.testclient import TestClient

from mathsvg.constants import APPLICATION_ERROR, PARSE_ERROR
from server.dependencies import get_dispatcher
from server.main import create_app

from conftest import SAMPLE_SVG, StubBackend


@pytest.fixture
def client(backend):
    with TestClient(create_app(backend=backend), raise_server_exceptions=False) as client:
        yield client


class TestLifecycle:

    def test_backend_started_once_and_closed(self, backend):
        with TestClient(create_app(backend=backend)) as client:
            assert client.get("/health").json()["status"] == "ok"
            assert backend.started == 1
        assert backend.closed == 1


class TestConvertEndpoint:

    def test_defaults_to_tex(self, client, backend):
        response = client.post("/convert", json={"equation": "a+b"})
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/svg+xml"
        assert response.text == SAMPLE_SVG
        assert backend.calls == [("a+b", "TeX", True)]

    def test_explicit_format(self, client, backend):
        response = client.post("/convert", json={"equation": "<math/>", "format": "MathML"})
        assert response.status_code == 200
        assert backend.calls[0][1] == "MathML"

    def test_missing_equation(self, client, backend):
        response = client.post("/convert", json={"format": "TeX"})
        assert response.status_code == 400
        assert response.json() == {"error": "invalid_request", "message": "Equation is required"}
        assert backend.calls == []

    def test_invalid_format(self, client, backend):
        response = client.post("/convert", json={"equation": "x", "format": "LaTeX"})
        assert response.status_code == 400
        assert "TeX, MathML, AsciiMath" in response.json()["message"]
        assert backend.calls == []

    def test_body_not_json(self, client, backend):
        response = client.post("/convert", content=b"x^2", headers={"content-type": "application/json"})
        assert response.status_code == 400
        assert backend.calls == []

    def test_backend_failure(self, failing_backend):
        with TestClient(create_app(backend=failing_backend)) as client:
            response = client.post("/convert", json={"equation": "\\frac{"})
        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "convert_failed"
        assert "Missing close brace" in body["message"]

    def test_uncaught_exception_is_500_and_listener_survives(self):
        backend = StubBackend(exc=RuntimeError("boom"))
        with TestClient(create_app(backend=backend), raise_server_exceptions=False) as client:
            response = client.post("/convert", json={"equation": "x"})
            assert response.status_code == 500
            assert response.json()["error"] == "internal_error"
            backend.exc = None
            assert client.post("/convert", json={"equation": "x"}).status_code == 200


class TestRpcEndpoint:

    def test_convert(self, client):
        response = client.post(
            "/rpc", json={"jsonrpc": "2.0", "id": "r1", "method": "convert", "params": {"equation": "x"}}
        )
        assert response.status_code == 200
        assert response.json() == {"jsonrpc": "2.0", "id": "r1", "result": SAMPLE_SVG, "error": None}

    def test_paint(self, client):
        response = client.post("/rpc", json={"id": 5, "method": "paint", "params": {"content": "x"}})
        assert response.json()["result"] == {"svg": SAMPLE_SVG}

    def test_unknown_method(self, client):
        body = client.post("/rpc", json={"id": None, "method": "nope"}).json()
        assert body["id"] is None
        assert body["result"] is None
        assert body["error"]["code"] == APPLICATION_ERROR

    def test_invalid_format(self, client, backend):
        body = client.post(
            "/rpc", json={"id": 9, "method": "convert", "params": {"equation": "x", "format": "svg"}}
        ).json()
        assert body["id"] == 9
        assert "TeX, MathML, AsciiMath" in body["error"]["message"]
        assert backend.calls == []

    def test_parse_error(self, client):
        response = client.post("/rpc", content=b"{broken", headers={"content-type": "application/json"})
        assert response.status_code == 400
        body = response.json()
        assert body["id"] is None
        assert body["error"]["code"] == PARSE_ERROR

    def test_fault_is_500_envelope_with_request_id(self, backend):
        class ExplodingDispatcher:
            async def handle(self, payload):
                raise RuntimeError("dispatcher down")

        app = create_app(backend=backend)
        app.dependency_overrides[get_dispatcher] = lambda: ExplodingDispatcher()
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.post("/rpc", json={"id": "f1", "method": "convert", "params": {"equation": "x"}})
        assert response.status_code == 500
        body = response.json()
        assert body["id"] == "f1"
        assert body["result"] is None
        assert "dispatcher down" in body["error"]["message"]
