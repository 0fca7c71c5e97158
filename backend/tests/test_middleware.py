from fastapi import FastAPI
from fastapi.testclient import TestClient

from classgrid.core.middleware import RequestSizeLimitMiddleware


def _app(max_bytes: int) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=max_bytes)

    @app.post("/echo")
    def echo(payload: dict) -> dict:
        return payload

    return app


def test_small_request_passes():
    with TestClient(_app(1024)) as client:
        response = client.post("/echo", json={"scope": "all"})
    assert response.status_code == 200
    assert response.json() == {"scope": "all"}


def test_oversized_request_is_rejected():
    with TestClient(_app(16)) as client:
        response = client.post("/echo", json={"scope": "term", "term_id": "x" * 64})
    assert response.status_code == 413
    assert "Request body too large" in response.json()["detail"]
