"""Tests for the Orchestrator: deterministic dispatch and model-driven tool use."""

import json

import pytest

from application.dto import AgentOptions, StructuredOutputSpec
from application.feature_flags import FeatureFlags, FeatureFlagSnapshot
from agent.executor import MODE_MODEL, Orchestrator
from agent.workflows.runner import WorkflowRunner
from agent.workflows.search import SearchWorkflow
from agent.workflows.weather import WeatherWorkflow
from domain.exceptions import UpstreamServiceError
from domain.models import NO_CONTENT, ToolCall, ToolCallKind
from infrastructure.llm.remote_resources import LazyResource
from infrastructure.llm.responses_client import ResponsesClient

from conftest import FakeGenerator, function_call_output, make_openai_client, message_output

NO_HOSTED = FeatureFlagSnapshot(hosted_search=False, sandboxed_execution=False)


def _orchestrator(registry, *, generator=None, flags=None, openai_client=None, mode="deterministic"):
    responses = None
    if openai_client is not None:
        async def _handle():
            return "cntr_1"
        responses = ResponsesClient(
            openai_client,
            registry,
            model="test-model",
            container=LazyResource("container", _handle),
            vector_store=LazyResource("vector_store", _handle),
        )
    workflows = WorkflowRunner([
        WeatherWorkflow(registry, generator),
        SearchWorkflow(registry, generator),
    ])
    return Orchestrator(
        registry,
        workflows,
        FeatureFlags(flags),
        generator=generator,
        responses=responses,
        mode=mode,
    )


def test_model_mode_requires_responses_client(registry):
    with pytest.raises(ValueError):
        _orchestrator(registry, mode=MODE_MODEL)


def test_unknown_mode(registry):
    with pytest.raises(ValueError):
        _orchestrator(registry, mode="psychic")


class TestDeterministic:

    @pytest.mark.asyncio
    async def test_calculation(self, registry):
        response = await _orchestrator(registry).run_agent("Calculate 15 * 23")

        assert response.content == "The result of 15 * 23 is 345"
        assert response.tool_calls == [ToolCall("calculate", {"expression": "15 * 23"})]
        assert response.tool_results == [{
            "name": "calculate",
            "result": {"success": True, "expression": "15 * 23", "result": 345},
        }]

    @pytest.mark.asyncio
    async def test_weather_with_hosted_tools_off(self, registry):
        response = await _orchestrator(registry, flags=NO_HOSTED).run_agent("Weather in Tokyo")

        assert response.tool_calls[0].name == "get_weather"
        assert response.tool_calls[0].arguments == {"location": "Tokyo"}
        result = response.tool_results[0]["result"]
        assert result["temperature"] == 72
        assert result["condition"] == "Sunny"
        assert response.content.startswith("The weather in Tokyo is 72°F, Sunny.")

    @pytest.mark.asyncio
    async def test_web_search_uses_hosted_tool_when_enabled(self, registry, hosted):
        response = await _orchestrator(registry).run_agent("search for AI news")
        assert response.tool_calls[0].name == "web_search"
        assert response.content == 'Web search results for "AI news": hosted answer'
        assert hosted.calls == [("web_search", "Search the web for: AI news")]

    @pytest.mark.asyncio
    async def test_web_search_falls_back_to_local_search(self, registry, hosted):
        response = await _orchestrator(registry, flags=NO_HOSTED).run_agent("search for AI news")
        assert response.tool_calls[0].name == "search_web"
        assert response.content.startswith('Web search results for "AI news": ')
        assert hosted.calls == []

    @pytest.mark.asyncio
    async def test_code_disabled_reports_failure(self, registry):
        response = await _orchestrator(registry, flags=NO_HOSTED).run_agent("```\nprint(1)\n```")
        assert response.content.startswith("Code execution failed: ")
        assert response.tool_results[0]["result"]["success"] is False

    @pytest.mark.asyncio
    async def test_extraction_error_is_the_answer(self, registry):
        response = await _orchestrator(registry).run_agent("do some math please")
        assert response.content == "I couldn't find a valid calculation expression in your message."
        assert response.tool_calls == []

    @pytest.mark.asyncio
    async def test_fallback_chat(self, registry):
        generator = FakeGenerator(text="Why did the chicken...")
        response = await _orchestrator(registry, generator=generator).run_agent(
            "Tell me a joke", AgentOptions(temperature=0.9, max_output_tokens=50),
        )
        assert response.content == "Why did the chicken..."
        assert generator.calls[0]["temperature"] == 0.9
        assert generator.calls[0]["max_tokens"] == 50
        assert generator.calls[0]["top_p"] is None

    @pytest.mark.asyncio
    async def test_fallback_without_model(self, registry):
        response = await _orchestrator(registry).run_agent("Tell me a joke")
        assert response.content == NO_CONTENT

    @pytest.mark.asyncio
    async def test_structured_fallback(self, registry):
        generator = FakeGenerator(structured={"joke": "pun"})
        options = AgentOptions(structured_output=StructuredOutputSpec("joke", {"type": "object"}))
        orchestrator = _orchestrator(
            registry, generator=generator, flags=FeatureFlagSnapshot(structured_output=True),
        )

        response = await orchestrator.run_agent("Tell me a joke", options)

        assert response.structured_output == {"joke": "pun"}
        assert json.loads(response.content) == {"joke": "pun"}

    @pytest.mark.asyncio
    async def test_structured_request_ignored_when_flag_off(self, registry):
        generator = FakeGenerator(text="plain")
        options = AgentOptions(structured_output=StructuredOutputSpec("joke", {"type": "object"}))
        response = await _orchestrator(registry, generator=generator).run_agent("Tell me a joke", options)
        assert response.content == "plain"
        assert response.structured_output is None

    @pytest.mark.asyncio
    async def test_upstream_error_propagates(self, registry):
        generator = FakeGenerator(error=UpstreamServiceError("down"))
        with pytest.raises(UpstreamServiceError):
            await _orchestrator(registry, generator=generator).run_agent("Tell me a joke")


class TestModelDriven:

    @pytest.mark.asyncio
    async def test_direct_message(self, registry):
        client = make_openai_client(message_output("Hello there"))
        orchestrator = _orchestrator(registry, openai_client=client, mode=MODE_MODEL)

        response = await orchestrator.run_agent("hi")

        assert response.content == "Hello there"
        assert response.tool_calls == []
        tools = client.responses.create.await_args.kwargs["tools"]
        assert "weather_workflow" in [t.get("name") for t in tools]

    @pytest.mark.asyncio
    async def test_every_call_gets_a_result(self, registry):
        seen = {}

        async def create(**request):
            if "tools" in request:
                return function_call_output(
                    ("c1", "calculate", '{"expression": "2+2"}'),
                    ("c2", "teleport", "{}"),
                )
            seen["input"] = request["input"]
            outputs = [i["output"] for i in request["input"] if i.get("type") == "function_call_output"]
            return message_output(" | ".join(outputs))

        client = make_openai_client()
        client.responses.create.side_effect = create
        orchestrator = _orchestrator(registry, openai_client=client, mode=MODE_MODEL)

        response = await orchestrator.run_agent("what is 2+2, then teleport me")

        assert [r["name"] for r in response.tool_results] == ["calculate", "teleport"]
        assert response.tool_results[0]["result"]["result"] == 4
        assert response.tool_results[1]["result"] == {"success": False, "error": "Unknown tool: teleport"}
        assert '"result": 4' in response.content
        assert "Unknown tool: teleport" in response.content
        assert [c.call_id for c in response.tool_calls] == ["c1", "c2"]

    @pytest.mark.asyncio
    async def test_workflow_call(self, registry):
        client = make_openai_client(
            function_call_output(("c1", "weather_workflow", '{"location": "Lima", "unit": "celsius"}')),
            message_output("Warm in Lima"),
        )
        orchestrator = _orchestrator(registry, openai_client=client, mode=MODE_MODEL)

        response = await orchestrator.run_agent("plan my day in Lima")

        result = response.tool_results[0]["result"]
        assert result["success"] is True
        assert result["weather_data"]["temperature"] == 22
        assert response.content == "Warm in Lima"

    @pytest.mark.asyncio
    async def test_hosted_only_response_is_not_resent(self, registry):
        client = make_openai_client({"output": [
            {"type": "web_search_call", "id": "ws_1", "action": {"query": "ai news"}},
            {"type": "message", "content": [{"type": "output_text", "text": "Here is the news"}]},
        ]})
        orchestrator = _orchestrator(registry, openai_client=client, mode=MODE_MODEL)

        response = await orchestrator.run_agent("latest ai news")

        assert response.content == "Here is the news"
        assert response.tool_calls[0].kind is ToolCallKind.WEB_SEARCH
        assert response.tool_results == [{
            "name": "web_search",
            "result": {"success": True, "hosted": True, "type": "web_search_call", "query": "ai news"},
        }]
        assert client.responses.create.await_count == 1

    @pytest.mark.asyncio
    async def test_upstream_failure_propagates(self, registry):
        client = make_openai_client()
        client.responses.create.side_effect = TimeoutError("slow")
        orchestrator = _orchestrator(registry, openai_client=client, mode=MODE_MODEL)
        with pytest.raises(UpstreamServiceError):
            await orchestrator.run_agent("hi")


class TestListings:

    def test_available_tools(self, registry):
        tools = _orchestrator(registry).get_available_tools()
        assert tools.custom_tools == ["calculate", "get_weather", "search_web", "file_search"]
        assert tools.built_in_tools == ["web_search", "code_interpreter"]
        assert tools.workflows == ["weather_workflow", "search_workflow"]
        assert tools.feature_flags["hosted_search"] is True

    def test_built_in_tools_follow_flags(self, registry):
        orchestrator = _orchestrator(registry)
        orchestrator.disable_flag("hosted_search")
        orchestrator.enable_flag("document_retrieval")
        tools = orchestrator.get_available_tools()
        assert tools.built_in_tools == ["code_interpreter", "file_search"]
        # the local project search stays listed whichever way the flag is set
        assert "file_search" in tools.custom_tools
        assert "web_search" not in tools.custom_tools

    def test_toggle_returns_all_flags(self, registry):
        flags = _orchestrator(registry).toggle_flag("structured-output")
        assert flags["structured_output"] is True
        assert len(flags) == 5

    def test_describe_tools_includes_workflows(self, registry):
        names = [d["name"] for d in _orchestrator(registry).describe_tools()]
        assert names[-2:] == ["weather_workflow", "search_workflow"]

    @pytest.mark.asyncio
    async def test_direct_workflow_entry_point(self, registry):
        result = await _orchestrator(registry).run_weather_workflow("Rome")
        assert result.success
        assert result.data["location"] == "Rome"
