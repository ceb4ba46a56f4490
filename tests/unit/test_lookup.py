"""Tests for tools/lookup.py and tools/invocation.py."""

from __future__ import annotations

import httpx
import pytest

from colloquy.core.errors import ToolLookupError, UpstreamError
from colloquy.models.tool import ToolCommand, ToolKind
from colloquy.tools.invocation import invoke_tools
from colloquy.tools.lookup import NO_RESULTS_CONTENT, LookupClient

RESULTS = [
    {"title": f"Result {i}", "url": f"https://site{i}.test", "snippet": f"snippet {i}"}
    for i in range(1, 13)
]


def _lookup(handler) -> LookupClient:
    return LookupClient(base_url="https://lookup.test/", transport=httpx.MockTransport(handler))


def _backend(pages: dict[str, httpx.Response], results=RESULTS):
    """Serve /search from ``results`` and /read from ``pages`` keyed by URL."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/search":
            return httpx.Response(200, json={"results": results})
        url = request.url.params["url"]
        return pages.get(url, httpx.Response(200, json={"content": f"body of {url}"}))

    return handler, seen


class TestSearch:
    @pytest.mark.asyncio
    async def test_caps_at_ten_results(self):
        handler, seen = _backend({})
        results = await _lookup(handler).search("python")
        assert len(results) == 10
        assert results[0].title == "Result 1"
        assert seen[0].url.params["q"] == "python"

    @pytest.mark.asyncio
    async def test_missing_results_is_empty(self):
        results = await _lookup(lambda r: httpx.Response(200, json={})).search("x")
        assert results == []

    @pytest.mark.asyncio
    async def test_null_fields_become_empty(self):
        payload = {"results": [{"title": "T", "url": None, "snippet": None}]}
        results = await _lookup(lambda r: httpx.Response(200, json=payload)).search("x")
        assert [(r.title, r.url, r.snippet) for r in results] == [("T", "", "")]

    @pytest.mark.asyncio
    async def test_malformed_results(self):
        with pytest.raises(ToolLookupError, match="malformed results"):
            await _lookup(lambda r: httpx.Response(200, json={"results": 5})).search("x")

    @pytest.mark.asyncio
    async def test_error_status(self):
        with pytest.raises(ToolLookupError, match="Search API error: 502") as exc:
            await _lookup(lambda r: httpx.Response(502)).search("x")
        assert isinstance(exc.value, UpstreamError)


class TestRead:
    @pytest.mark.asyncio
    async def test_content_then_text(self):
        assert await _lookup(lambda r: httpx.Response(200, json={"content": "A"})).read("u") == "A"
        assert await _lookup(lambda r: httpx.Response(200, json={"text": "B"})).read("u") == "B"
        assert await _lookup(lambda r: httpx.Response(200, json={})).read("u") == ""

    @pytest.mark.asyncio
    async def test_error_status(self):
        with pytest.raises(ToolLookupError, match="Read API error: 404"):
            await _lookup(lambda r: httpx.Response(404)).read("u")


class TestSearchAndRead:
    @pytest.mark.asyncio
    async def test_reads_top_three(self):
        handler, seen = _backend({}, results=RESULTS[:5])
        result = await _lookup(handler).search_and_read("python")

        read_urls = [r.url.params["url"] for r in seen if r.url.path == "/read"]
        assert sorted(read_urls) == ["https://site1.test", "https://site2.test", "https://site3.test"]
        assert len(result.search_results) == 5
        assert result.content.startswith('Search Results for "python":')
        assert "Content: body of https://site3.test" in result.content
        assert "Content: body of https://site4.test" not in result.content
        assert "Source 5: Result 5" in result.content

    @pytest.mark.asyncio
    async def test_failed_read_degrades(self):
        handler, _ = _backend({"https://site2.test": httpx.Response(500)}, results=RESULTS[:3])
        result = await _lookup(handler).search_and_read("python")
        assert "[Failed to read https://site2.test]" in result.content
        assert "body of https://site1.test" in result.content

    @pytest.mark.asyncio
    async def test_no_results(self):
        handler, seen = _backend({}, results=[])
        result = await _lookup(handler).search_and_read("nothing")
        assert result.content == NO_RESULTS_CONTENT
        assert len(seen) == 1


class TestInvokeTools:
    @pytest.mark.asyncio
    async def test_sections_in_order(self):
        handler, _ = _backend({}, results=RESULTS[:2])
        block = await invoke_tools(
            [
                ToolCommand(kind=ToolKind.READ, query="https://page.test"),
                ToolCommand(kind=ToolKind.SEARCH, query="rust vs go"),
            ],
            _lookup(handler),
        )
        assert block.index("Content of https://page.test") < block.index('Search results for "rust vs go"')

    @pytest.mark.asyncio
    async def test_failure_does_not_abort(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/search":
                return httpx.Response(503)
            return httpx.Response(200, json={"content": "fine"})

        block = await invoke_tools(
            [
                ToolCommand(kind=ToolKind.SEARCH_AND_READ, query="q"),
                ToolCommand(kind=ToolKind.READ, query="https://ok.test"),
            ],
            _lookup(handler),
        )
        assert '[SEARCH_AND_READ failed for "q"' in block
        assert "fine" in block

    @pytest.mark.asyncio
    async def test_null_snippet_in_search_and_read(self):
        handler, _ = _backend({}, results=[{"title": "T", "url": "https://t.test", "snippet": None}])
        block = await invoke_tools(
            [ToolCommand(kind=ToolKind.SEARCH_AND_READ, query="q")],
            _lookup(handler),
        )
        assert "Snippet: \n" in block
        assert "body of https://t.test" in block

    @pytest.mark.asyncio
    async def test_malformed_search_noted_inline(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/search":
                return httpx.Response(200, json={"results": 5})
            return httpx.Response(200, json={"content": "still read"})

        block = await invoke_tools(
            [
                ToolCommand(kind=ToolKind.SEARCH, query="q"),
                ToolCommand(kind=ToolKind.READ, query="https://ok.test"),
            ],
            _lookup(handler),
        )
        assert '[SEARCH failed for "q"' in block
        assert "still read" in block
