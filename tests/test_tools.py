"""Tests for the individual capabilities."""

import json

import pytest

from agent.tools.base import ToolResult
from agent.tools.file_search import FileSearchTool
from domain.exceptions import UpstreamServiceError

from conftest import FakeHosted


class TestToolResult:

    def test_success_payload_is_flattened(self):
        assert ToolResult.ok({"a": 1}).to_dict() == {"success": True, "a": 1}

    def test_non_dict_payload(self):
        assert ToolResult.ok(3).to_dict() == {"success": True, "result": 3}

    def test_failure(self):
        result = ToolResult.fail("nope")
        assert result.to_dict() == {"success": False, "error": "nope"}
        assert json.loads(result.output) == {"success": False, "error": "nope"}


class TestCalculate:

    @pytest.mark.asyncio
    async def test_result_is_rounded(self, registry, ctx):
        result = await registry.invoke("calculate", ctx, {"expression": "10 / 3"})
        assert result.data == {"expression": "10 / 3", "result": 3.33}

    @pytest.mark.asyncio
    async def test_whole_number(self, registry, ctx):
        result = await registry.invoke("calculate", ctx, {"expression": "15 * 23"})
        assert result.data["result"] == 345

    @pytest.mark.asyncio
    async def test_overflow_fails_cleanly(self, registry, ctx):
        expression = "9" * 200 + " * " + "9" * 200
        result = await registry.invoke("calculate", ctx, {"expression": expression})
        assert result.success is False
        assert result.error == "Invalid mathematical expression: result is too large"


class TestWeather:

    @pytest.mark.asyncio
    async def test_default_unit_is_fahrenheit(self, registry, ctx):
        result = await registry.invoke("get_weather", ctx, {"location": "Tokyo"})
        assert result.success
        assert result.data["location"] == "Tokyo"
        assert result.data["unit"] == "fahrenheit"
        assert result.data["temperature"] == 72
        assert result.data["condition"] == "Sunny"

    @pytest.mark.asyncio
    async def test_celsius(self, registry, ctx):
        result = await registry.invoke("get_weather", ctx, {"location": "Oslo", "unit": "celsius"})
        assert result.data["temperature"] == 22

    @pytest.mark.asyncio
    async def test_rejects_unknown_unit(self, registry, ctx):
        result = await registry.invoke("get_weather", ctx, {"location": "Oslo", "unit": "kelvin"})
        assert not result.success


class TestSearchWeb:

    @pytest.mark.asyncio
    async def test_returns_requested_number_of_results(self, registry, ctx):
        result = await registry.invoke("search_web", ctx, {"query": "python", "max_results": 3})
        assert result.data["total_results"] == 3
        assert len(result.data["results"]) == 3
        assert {"title", "url", "snippet"} <= set(result.data["results"][0])


class TestHostedWrappers:

    @pytest.mark.asyncio
    async def test_web_search_calls_hosted_tool(self, registry, hosted, ctx):
        result = await registry.invoke("web_search", ctx, {"query": "news"})
        assert result.data == {"query": "news", "results": "hosted answer"}
        assert hosted.calls == [("web_search", "Search the web for: news")]

    @pytest.mark.asyncio
    async def test_web_search_disabled_by_flag(self, registry, hosted, no_hosted_ctx):
        result = await registry.invoke("web_search", no_hosted_ctx, {"query": "news"})
        assert not result.success
        assert hosted.calls == []

    @pytest.mark.asyncio
    async def test_code_interpreter(self, registry, hosted, ctx):
        result = await registry.invoke("code_interpreter", ctx, {"code": "print(1)"})
        assert result.data == {"code": "print(1)", "results": "hosted answer"}
        assert hosted.calls == [("code_interpreter", "Execute this code: print(1)")]

    @pytest.mark.asyncio
    async def test_upstream_failure_is_a_failed_result(self, ctx):
        from agent.tools.web_search import WebSearchTool

        tool = WebSearchTool(FakeHosted(error=UpstreamServiceError("down")))
        result = await tool.execute(ctx, query="news")
        assert not result.success
        assert "down" in result.error


class TestFileSearch:

    @pytest.mark.asyncio
    async def test_finds_matching_lines(self, tmp_path, ctx):
        (tmp_path / "notes.md").write_text("alpha\nThe Needle is here\nomega\n", encoding="utf-8")
        (tmp_path / "image.png").write_bytes(b"needle")
        tool = FileSearchTool(tmp_path)

        result = await tool.execute(ctx, query="needle")

        assert result.data["files_found"] == 1
        detail = result.data["detailed_results"][0]
        assert detail["file"] == "notes.md"
        assert detail["matches"] == ["Line 2: The Needle is here"]
        assert detail["preview"].endswith("...")

    @pytest.mark.asyncio
    async def test_skips_ignored_directories_and_depth(self, tmp_path, ctx):
        (tmp_path / "node_modules").mkdir()
        (tmp_path / "node_modules" / "lib.js").write_text("needle", encoding="utf-8")
        deep = tmp_path / "a" / "b" / "c"
        deep.mkdir(parents=True)
        (deep / "deep.txt").write_text("needle", encoding="utf-8")
        (tmp_path / "a" / "shallow.txt").write_text("needle", encoding="utf-8")

        result = await FileSearchTool(tmp_path, max_depth=3).execute(ctx, query="needle")

        files = [d["file"] for d in result.data["detailed_results"]]
        assert files == [str((tmp_path / "a" / "shallow.txt").relative_to(tmp_path))]

    @pytest.mark.asyncio
    async def test_caps_matches_per_file(self, tmp_path, ctx):
        (tmp_path / "many.txt").write_text("\n".join(["needle"] * 9), encoding="utf-8")
        result = await FileSearchTool(tmp_path).execute(ctx, query="needle")
        assert len(result.data["detailed_results"][0]["matches"]) == 5

    @pytest.mark.asyncio
    async def test_no_match_message(self, tmp_path, ctx):
        result = await FileSearchTool(tmp_path).execute(ctx, query="absent")
        assert result.data["files_found"] == 0
        assert result.data["results"] == 'No files found containing "absent" in the project directory.'
