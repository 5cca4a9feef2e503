"""
infrastructure.llm.llm_builder - Centralized chat-model construction.

Single source of truth for the LangChain chat model used for free-form
generation (dispatcher fallback, workflow synthesis). The provider is
controlled by the LLM_PROVIDER environment variable; tool selection in
model-driven mode goes through the Responses client instead.

Supported providers:
    - "openai"  → langchain_openai.ChatOpenAI
    - "groq"    → langchain_groq.ChatGroq
    - "ollama"  → langchain_ollama.ChatOllama
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from langchain_core.language_models import BaseChatModel

logger = logging.getLogger(__name__)


def build_llm(
    *,
    provider: str,
    model: str,
    temperature: Optional[float] = None,
    ollama_base_url: str = "http://localhost:11434/",
    openai_api_key: str = "",
    openai_base_url: Optional[str] = None,
    groq_api_key: str = "",
    max_tokens: Optional[int] = None,
) -> BaseChatModel:
    """Build a chat model for the given provider.

    Args:
        provider: One of "openai", "groq", "ollama".
        model: Model name for the selected provider.
        temperature: Sampling temperature; left to the provider default when None
            (some models only accept their default).
        ollama_base_url: Ollama server URL (only used when provider="ollama").
        openai_api_key: API key for OpenAI.
        openai_base_url: Alternative OpenAI-compatible endpoint, if any.
        groq_api_key: API key for Groq.
        max_tokens: Maximum tokens. Defaults to 512 for Groq if not set.

    Returns:
        A configured LangChain chat model.

    Raises:
        ValueError: If the provider is unknown or required credentials are missing.
    """
    provider = provider.lower().strip()

    kwargs: Dict[str, Any] = {"model": model}
    if temperature is not None:
        kwargs["temperature"] = temperature

    if provider == "openai":
        from langchain_openai import ChatOpenAI

        if not openai_api_key:
            raise ValueError("OPENAI_API_KEY is required when LLM_PROVIDER='openai'")

        kwargs["api_key"] = openai_api_key
        if openai_base_url:
            kwargs["base_url"] = openai_base_url
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens

        logger.info("Building OpenAI chat model (model=%s)", model)
        return ChatOpenAI(**kwargs)

    elif provider == "groq":
        from langchain_groq import ChatGroq

        if not groq_api_key:
            raise ValueError("GROQ_API_KEY is required when LLM_PROVIDER='groq'")

        kwargs["api_key"] = groq_api_key
        kwargs["max_tokens"] = max_tokens if max_tokens is not None else 512

        logger.info("Building Groq chat model (model=%s)", model)
        return ChatGroq(**kwargs)

    elif provider == "ollama":
        from langchain_ollama import ChatOllama

        kwargs["base_url"] = ollama_base_url
        if max_tokens is not None:
            kwargs["num_predict"] = max_tokens

        logger.info("Building ChatOllama (model=%s)", model)
        return ChatOllama(**kwargs)

    else:
        raise ValueError(
            f"Unsupported LLM_PROVIDER: '{provider}'. "
            "Must be 'openai', 'groq', or 'ollama'."
        )
