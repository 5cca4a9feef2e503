"""Shared fixtures: a populated registry, fake upstream collaborators, contexts."""

import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from application.context import RequestContext
from application.feature_flags import FeatureFlagSnapshot
from agent.tools.calculator import CalculateTool
from agent.tools.code_interpreter import CodeInterpreterTool
from agent.tools.file_search import FileSearchTool
from agent.tools.registry import ToolRegistry
from agent.tools.search_web import SearchWebTool
from agent.tools.weather import GetWeatherTool
from agent.tools.web_search import WebSearchTool


class FakeHosted:
    """Stands in for ResponsesClient.run_hosted_tool."""

    def __init__(self, text="hosted answer", error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def run_hosted_tool(self, kind, prompt):
        self.calls.append((kind, prompt))
        if self.error is not None:
            raise self.error
        return self.text


class FakeGenerator:
    """Stands in for ChatModelGenerator."""

    def __init__(self, text="generated", structured=None, error=None):
        self.text = text
        self.structured = structured
        self.error = error
        self.calls = []

    async def generate(self, prompt, *, system=None, temperature=None, max_tokens=None, top_p=None):
        self.calls.append({
            "prompt": prompt,
            "system": system,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "top_p": top_p,
        })
        if self.error is not None:
            raise self.error
        return self.text

    async def generate_structured(self, prompt, schema, *, name="response"):
        self.calls.append({"prompt": prompt, "schema": schema, "name": name})
        if self.error is not None:
            raise self.error
        return self.structured


def make_openai_client(*responses):
    """Fake AsyncOpenAI exposing only what the adapter uses."""
    return SimpleNamespace(
        responses=SimpleNamespace(create=AsyncMock(side_effect=list(responses))),
        containers=SimpleNamespace(create=AsyncMock(return_value=SimpleNamespace(id="cntr_1"))),
        vector_stores=SimpleNamespace(
            create=AsyncMock(return_value=SimpleNamespace(id="vs_1")),
            file_batches=SimpleNamespace(upload_and_poll=AsyncMock()),
        ),
    )


def message_output(text):
    return {
        "output": [{
            "type": "message",
            "role": "assistant",
            "content": [{"type": "output_text", "text": text}],
        }]
    }


def function_call_output(*calls):
    """calls: (call_id, name, arguments_json) tuples."""
    return {
        "output": [
            {"type": "function_call", "call_id": cid, "name": name, "arguments": args}
            for cid, name, args in calls
        ]
    }


@pytest.fixture
def hosted():
    return FakeHosted()


@pytest.fixture
def registry(hosted, tmp_path):
    reg = ToolRegistry()
    reg.register(CalculateTool())
    reg.register(GetWeatherTool())
    reg.register(SearchWebTool())
    reg.register(WebSearchTool(hosted))
    reg.register(CodeInterpreterTool(hosted))
    reg.register(FileSearchTool(tmp_path))
    return reg


@pytest.fixture
def ctx():
    return RequestContext(message="test")


@pytest.fixture
def no_hosted_ctx():
    flags = FeatureFlagSnapshot(hosted_search=False, sandboxed_execution=False)
    return RequestContext(message="test", flags=flags)
