"""
infrastructure.llm.chat_model - Free-form generation over a LangChain chat model.

Implements TextGeneratorPort. Used by the dispatcher's fallback branch and
by workflows that elaborate on raw tool output. Provider failures are
wrapped in UpstreamServiceError so callers see one typed error.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from langchain_core.output_parsers import JsonOutputParser
from langchain_core.prompts import ChatPromptTemplate

from domain.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)

_JSON_INSTRUCTIONS = (
    "Answer the user's request. Respond with a single JSON object that "
    "conforms to this JSON schema named '{name}' and nothing else:\n{schema}"
)


class ChatModelGenerator:
    """Text generation backed by any LangChain chat model."""

    def __init__(self, llm: BaseChatModel, system_prompt: str | None = None):
        self._llm = llm
        self._system_prompt = system_prompt

    async def generate(
        self,
        prompt: str,
        *,
        system: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        top_p: float | None = None,
    ) -> str:
        """Generate a plain-text answer. Unset sampling parameters are not sent."""
        params = {
            "temperature": temperature,
            "max_tokens": max_tokens,
            "top_p": top_p,
        }
        params = {k: v for k, v in params.items() if v is not None}
        model = self._llm.bind(**params) if params else self._llm

        messages: list[BaseMessage] = []
        system = system or self._system_prompt
        if system:
            messages.append(SystemMessage(content=system))
        messages.append(HumanMessage(content=prompt))

        try:
            result = await model.ainvoke(messages)
        except Exception as e:
            logger.error("Chat model generation failed: %s", e)
            raise UpstreamServiceError(f"Chat model request failed: {e}") from e
        return _message_text(result)

    async def generate_structured(
        self,
        prompt: str,
        schema: dict[str, Any],
        *,
        name: str = "response",
    ) -> Any:
        """Generate an object conforming to `schema`.

        Uses the provider's native structured-output support when available,
        otherwise falls back to JSON-instructed generation + JsonOutputParser.
        """
        named_schema = {"title": name, **schema}
        try:
            chain = self._llm.with_structured_output(named_schema)
        except NotImplementedError:
            chain = self._json_chain(name, schema)
            inputs: Any = {"query": prompt}
        else:
            inputs = prompt

        try:
            return await chain.ainvoke(inputs)
        except Exception as e:
            logger.error("Structured generation '%s' failed: %s", name, e)
            raise UpstreamServiceError(f"Structured output request failed: {e}") from e

    def _json_chain(self, name: str, schema: dict[str, Any]):
        instructions = _JSON_INSTRUCTIONS.format(name=name, schema=json.dumps(schema))
        # ChatPromptTemplate treats braces as variables
        instructions = instructions.replace("{", "{{").replace("}", "}}")
        prompt = ChatPromptTemplate.from_messages([
            ("system", instructions),
            ("user", "{query}"),
        ])
        return prompt | self._llm | JsonOutputParser()


def _message_text(message: Any) -> str:
    content = getattr(message, "content", message)
    if isinstance(content, list):
        # Some providers return content blocks
        return "".join(
            block.get("text", "") if isinstance(block, dict) else str(block)
            for block in content
        )
    return str(content)
