"""Startup and shutdown of the application."""

import json
from unittest.mock import AsyncMock, Mock

import httpx
import pytest
from fastapi.testclient import TestClient

import lumi.main as main_module
from lumi.services.memory_store import MemoryStore


@pytest.fixture
def lifecycle(monkeypatch):
    """Patch out the database, scheduler and LLM so only the lifespan wiring runs"""
    llm = AsyncMock()
    monkeypatch.setattr(main_module, "create_tables", AsyncMock())
    monkeypatch.setattr(main_module, "llm_client", llm)
    monkeypatch.setattr(main_module.scheduler_service, "start", Mock())
    monkeypatch.setattr(main_module.scheduler_service, "shutdown", Mock())

    def use_store(handler):
        store = MemoryStore(
            base_url="http://weaviate.test/v1",
            class_name="Memory",
            transport=httpx.MockTransport(handler),
        )
        monkeypatch.setattr(main_module, "memory_store", store)
        return store

    return llm, use_store


class TestLifespan:

    def test_startup_creates_memory_schema(self, lifecycle):
        _, use_store = lifecycle
        requests = []

        def handler(request):
            requests.append(request)
            if request.method == "GET":
                return httpx.Response(200, json={"classes": []})
            return httpx.Response(200, json={})

        use_store(handler)

        with TestClient(main_module.app) as client:
            assert client.get("/health").status_code == 200

        assert [(r.method, r.url.path) for r in requests] == [("GET", "/v1/schema"), ("POST", "/v1/schema")]
        assert json.loads(requests[1].content)["vectorizer"] == "text2vec-openai"
        main_module.scheduler_service.start.assert_called_once()

    def test_startup_continues_when_weaviate_is_down(self, lifecycle):
        _, use_store = lifecycle

        def handler(request):
            raise httpx.ConnectError("connection refused")

        use_store(handler)

        with TestClient(main_module.app) as client:
            assert client.get("/health").status_code == 200

        main_module.scheduler_service.start.assert_called_once()

    def test_shutdown_closes_http_clients(self, lifecycle):
        llm, use_store = lifecycle
        store = use_store(lambda request: httpx.Response(200, json={"classes": [{"class": "Memory"}]}))

        with TestClient(main_module.app):
            pass

        llm.close.assert_awaited_once()
        assert store.client.is_closed
        main_module.scheduler_service.shutdown.assert_called_once()
