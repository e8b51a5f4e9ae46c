"""Tests for the Weaviate memory client against a mocked transport."""

import json

import httpx
import pytest

from lumi.services.memory_store import MemoryStore, MemoryStoreError


def make_store(handler):
    return MemoryStore(
        base_url="http://weaviate.test/v1",
        api_key="wv-key",
        openai_api_key="oa-key",
        class_name="Memory",
        transport=httpx.MockTransport(handler),
    )


def graphql_response(items):
    return httpx.Response(200, json={"data": {"Get": {"Memory": items}}})


class TestMemoryStore:

    @pytest.mark.asyncio
    async def test_initialize_schema_creates_missing_class(self):
        requests = []

        def handler(request):
            requests.append(request)
            if request.method == "GET":
                return httpx.Response(200, json={"classes": []})
            return httpx.Response(200, json={})

        store = make_store(handler)
        assert await store.initialize_schema() is True

        created = json.loads(requests[1].content)
        assert created["class"] == "Memory"
        assert created["vectorizer"] == "text2vec-openai"
        assert {p["name"] for p in created["properties"]} == {"title", "text", "date", "tags"}
        await store.close()

    @pytest.mark.asyncio
    async def test_initialize_schema_skips_existing_class(self):
        def handler(request):
            assert request.method == "GET"
            return httpx.Response(200, json={"classes": [{"class": "Memory"}]})

        store = make_store(handler)
        assert await store.initialize_schema() is False
        await store.close()

    @pytest.mark.asyncio
    async def test_create_memory_sends_headers_and_date(self):
        seen = {}

        def handler(request):
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"id": "mem-1"})

        store = make_store(handler)
        memory_id = await store.create_memory("Wifi", "password is hunter2", ["home"])

        assert memory_id == "mem-1"
        assert seen["headers"]["authorization"] == "Bearer wv-key"
        assert seen["headers"]["x-openai-api-key"] == "oa-key"
        assert seen["body"]["class"] == "Memory"
        assert seen["body"]["properties"]["tags"] == ["home"]
        assert seen["body"]["properties"]["date"].endswith("Z")
        await store.close()

    @pytest.mark.asyncio
    async def test_create_memory_without_id_fails(self):
        store = make_store(lambda request: httpx.Response(200, json={}))

        with pytest.raises(MemoryStoreError):
            await store.create_memory("t", "x")
        await store.close()

    @pytest.mark.asyncio
    async def test_get_memory_not_found(self):
        store = make_store(lambda request: httpx.Response(404))

        assert await store.get_memory("missing") is None
        await store.close()

    @pytest.mark.asyncio
    async def test_update_memory_merges_given_fields(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(204)

        store = make_store(handler)
        await store.update_memory("mem-1", text="new text")

        assert seen["method"] == "PATCH"
        assert seen["path"] == "/v1/objects/Memory/mem-1"
        assert set(seen["body"]["properties"]) == {"text", "date"}
        await store.close()

    @pytest.mark.asyncio
    async def test_search_uses_near_text_and_caps_limit(self):
        seen = {}

        def handler(request):
            seen["query"] = json.loads(request.content)["query"]
            return graphql_response([
                {"title": "Wifi", "text": "hunter2", "date": "2025-10-20T10:00:00Z", "tags": [],
                 "_additional": {"id": "mem-1"}},
            ])

        store = make_store(handler)
        memories = await store.search_memories('wifi "password"', limit=500)

        assert 'nearText: {concepts: ["wifi \\"password\\""]}' in seen["query"]
        assert "limit: 10" in seen["query"]
        assert memories[0].id == "mem-1"
        assert memories[0].to_dict()["type"] == "memory"
        await store.close()

    @pytest.mark.asyncio
    async def test_graphql_errors_raise(self):
        store = make_store(lambda request: httpx.Response(200, json={"errors": [{"message": "boom"}]}))

        with pytest.raises(MemoryStoreError, match="boom"):
            await store.get_all_memories()
        await store.close()

    @pytest.mark.asyncio
    async def test_delete_propagates_http_errors(self):
        store = make_store(lambda request: httpx.Response(500))

        with pytest.raises(httpx.HTTPStatusError):
            await store.delete_memory("mem-1")
        await store.close()
