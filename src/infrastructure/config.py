"""
infrastructure.config - Typed, injectable configuration.

A frozen dataclass that can be constructed from the environment (.env is
honoured via python-dotenv) or passed explicitly in tests.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from application.feature_flags import FeatureFlagSnapshot

AGENT_MODES = ("deterministic", "model")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Centralized configuration for the tool-routing agent.

    No module-level globals: construct via from_env() or pass explicitly.
    """
    project_root: Path

    # ── Orchestration ───────────────────────────────────────────
    # "deterministic": keyword dispatcher + templated answers.
    # "model": upstream model picks tools, then synthesizes the answer.
    agent_mode: str = "deterministic"

    # ── Chat model (fallback generation, workflow synthesis) ────
    # Allowed: "openai", "groq", "ollama"
    llm_provider: str = "openai"
    llm_model_ollama: str = "llama3.2"
    llm_model_openai: str = "gpt-4.1-mini"
    llm_model_groq: str = "llama-3.3-70b-versatile"
    ollama_base_url: str = "http://localhost:11434/"
    groq_api_key: str = ""
    openai_api_key: str = ""

    # ── Upstream Responses API ──────────────────────────────────
    responses_model: str = "gpt-4o-mini"
    openai_base_url: Optional[str] = None
    container_name: str = "toolroute-agent-container"
    vector_store_name: str = "toolroute-agent-documents"
    document_paths: tuple[Path, ...] = ()

    # ── Local file search ───────────────────────────────────────
    file_search_root: Optional[Path] = None
    file_search_max_depth: int = 3

    # ── Feature flag defaults ───────────────────────────────────
    default_flags: FeatureFlagSnapshot = field(default_factory=FeatureFlagSnapshot)

    log_level: str = "INFO"

    @property
    def active_llm_model(self) -> str:
        """Return the model name for the currently active LLM provider."""
        if self.llm_provider == "groq":
            return self.llm_model_groq
        elif self.llm_provider == "ollama":
            return self.llm_model_ollama
        return self.llm_model_openai

    @property
    def search_root(self) -> Path:
        return self.file_search_root or self.project_root

    @classmethod
    def from_env(cls, project_root: Optional[Path] = None) -> Settings:
        """Build Settings from environment variables (and .env if present)."""
        from dotenv import load_dotenv
        load_dotenv()

        root = project_root or Path(__file__).resolve().parent.parent.parent

        agent_mode = os.getenv("AGENT_MODE", "deterministic").strip().lower()
        if agent_mode not in AGENT_MODES:
            raise ValueError(
                f"Unsupported AGENT_MODE: '{agent_mode}'. Must be one of {AGENT_MODES}."
            )

        documents = tuple(
            Path(p.strip()) for p in os.getenv("DOCUMENT_PATHS", "").split(",") if p.strip()
        )
        search_root = os.getenv("FILE_SEARCH_ROOT", "")

        defaults = FeatureFlagSnapshot()
        flags = FeatureFlagSnapshot(
            hosted_search=_env_bool("FLAG_HOSTED_SEARCH", defaults.hosted_search),
            sandboxed_execution=_env_bool("FLAG_SANDBOXED_EXECUTION", defaults.sandboxed_execution),
            document_retrieval=_env_bool("FLAG_DOCUMENT_RETRIEVAL", defaults.document_retrieval),
            structured_output=_env_bool("FLAG_STRUCTURED_OUTPUT", defaults.structured_output),
            remote_device_control=_env_bool(
                "FLAG_REMOTE_DEVICE_CONTROL", defaults.remote_device_control,
            ),
        )

        return cls(
            project_root=root,
            agent_mode=agent_mode,
            llm_provider=os.getenv("LLM_PROVIDER", "openai"),
            llm_model_ollama=os.getenv("LLM_MODEL_OLLAMA", "llama3.2"),
            llm_model_openai=os.getenv("LLM_MODEL_OPENAI", "gpt-4.1-mini"),
            llm_model_groq=os.getenv("LLM_MODEL_GROQ", "llama-3.3-70b-versatile"),
            ollama_base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434/"),
            groq_api_key=os.getenv("GROQ_API_KEY", ""),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            responses_model=os.getenv("RESPONSES_MODEL", "gpt-4o-mini"),
            openai_base_url=os.getenv("OPENAI_BASE_URL") or None,
            container_name=os.getenv("CONTAINER_NAME", "toolroute-agent-container"),
            vector_store_name=os.getenv("VECTOR_STORE_NAME", "toolroute-agent-documents"),
            document_paths=documents,
            file_search_root=Path(search_root) if search_root else None,
            file_search_max_depth=int(os.getenv("FILE_SEARCH_MAX_DEPTH", "3")),
            default_flags=flags,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
