"""Tests for ChatModelGenerator over LangChain's fake chat models."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from domain.exceptions import UpstreamServiceError
from infrastructure.llm.chat_model import ChatModelGenerator


@pytest.mark.asyncio
async def test_generate_returns_model_text():
    generator = ChatModelGenerator(FakeListChatModel(responses=["first", "second"]))
    assert await generator.generate("hi") == "first"
    assert await generator.generate("again", system="be brief", temperature=0.1) == "second"


@pytest.mark.asyncio
async def test_generate_sends_system_prompt():
    llm = SimpleNamespace(ainvoke=AsyncMock(return_value=SimpleNamespace(content="ok")))
    generator = ChatModelGenerator(llm, system_prompt="default system")

    await generator.generate("question")

    messages = llm.ainvoke.await_args.args[0]
    assert [m.type for m in messages] == ["system", "human"]
    assert messages[0].content == "default system"


@pytest.mark.asyncio
async def test_content_blocks_are_joined():
    blocks = [{"type": "text", "text": "Hello "}, {"type": "text", "text": "world"}]
    llm = SimpleNamespace(ainvoke=AsyncMock(return_value=SimpleNamespace(content=blocks)))
    assert await ChatModelGenerator(llm).generate("q") == "Hello world"


@pytest.mark.asyncio
async def test_provider_failure_is_wrapped():
    llm = SimpleNamespace(ainvoke=AsyncMock(side_effect=RuntimeError("rate limit")))
    with pytest.raises(UpstreamServiceError, match="rate limit"):
        await ChatModelGenerator(llm).generate("q")


@pytest.mark.asyncio
async def test_structured_falls_back_to_json_parsing():
    llm = FakeListChatModel(responses=['{"city": "Tokyo", "temp": 22}'])
    schema = {"type": "object", "properties": {"city": {"type": "string"}}}

    result = await ChatModelGenerator(llm).generate_structured("weather?", schema, name="weather")

    assert result == {"city": "Tokyo", "temp": 22}


@pytest.mark.asyncio
async def test_structured_with_unparseable_output():
    llm = FakeListChatModel(responses=["not json at all"])
    with pytest.raises(UpstreamServiceError):
        await ChatModelGenerator(llm).generate_structured("q", {"type": "object"})
