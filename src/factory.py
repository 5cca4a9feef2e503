"""
factory - Composition root for the tool-routing agent.

ALL dependency wiring happens here. No other module constructs its own
dependencies. Adapters (CLI, REST) call this factory to get a fully
configured Orchestrator.

Usage:
    from factory import ServiceFactory
    from infrastructure.config import Settings

    config = Settings.from_env()
    factory = ServiceFactory(config)
    orchestrator = factory.create_orchestrator()
    response = await orchestrator.run_agent("Calculate 15 * 23")

The registry, workflow runner, feature flags and Responses client are
process-wide: they are built once and every create_* call after the
first returns the same instance.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from langchain_core.language_models import BaseChatModel
from openai import AsyncOpenAI, OpenAIError

from application.feature_flags import FeatureFlags
from agent.dispatcher import IntentDispatcher
from agent.executor import Orchestrator
from agent.prompt import GENERAL_CHAT_PROMPT, RESPONSE_PROMPT, build_system_prompt
from agent.tools.calculator import CalculateTool
from agent.tools.code_interpreter import CodeInterpreterTool
from agent.tools.file_search import FileSearchTool
from agent.tools.registry import ToolRegistry
from agent.tools.search_web import SearchWebTool
from agent.tools.weather import GetWeatherTool
from agent.tools.web_search import WebSearchTool
from agent.workflows.runner import WorkflowRunner
from agent.workflows.search import SearchWorkflow
from agent.workflows.weather import WeatherWorkflow
from infrastructure.config import Settings
from infrastructure.llm.chat_model import ChatModelGenerator
from infrastructure.llm.llm_builder import build_llm
from infrastructure.llm.remote_resources import (
    LazyResource,
    container_provisioner,
    vector_store_provisioner,
)
from infrastructure.llm.responses_client import ResponsesClient

logger = logging.getLogger(__name__)


class ServiceFactory:
    """Composition root: wires all dependencies together.

    `openai_client` and `llm` may be injected (tests, alternative
    providers); otherwise they are built from the settings.
    """

    def __init__(
        self,
        config: Settings,
        *,
        openai_client: Any = None,
        llm: Optional[BaseChatModel] = None,
    ):
        self._config = config
        self._openai_client = openai_client
        self._openai_client_built = openai_client is not None
        self._llm = llm

        self._flags: Optional[FeatureFlags] = None
        self._registry: Optional[ToolRegistry] = None
        self._responses: Optional[ResponsesClient] = None
        self._generator: Optional[ChatModelGenerator] = None
        self._generator_built = False
        self._workflows: Optional[WorkflowRunner] = None
        self._orchestrator: Optional[Orchestrator] = None

    @property
    def config(self) -> Settings:
        return self._config

    # ------------------------------------------------------------------
    # Shared components
    # ------------------------------------------------------------------

    def create_feature_flags(self) -> FeatureFlags:
        if self._flags is None:
            self._flags = FeatureFlags(self._config.default_flags)
        return self._flags

    def create_openai_client(self) -> Any:
        """AsyncOpenAI client, or None when no API key is available."""
        if not self._openai_client_built:
            self._openai_client_built = True
            try:
                self._openai_client = AsyncOpenAI(
                    api_key=self._config.openai_api_key or None,
                    base_url=self._config.openai_base_url,
                )
            except OpenAIError as e:
                logger.warning("OpenAI client unavailable, hosted tools disabled: %s", e)
        return self._openai_client

    def create_responses_client(self) -> Optional[ResponsesClient]:
        """Responses client with memoized container and vector store handles."""
        if self._responses is None:
            client = self.create_openai_client()
            if client is None:
                return None
            self._responses = ResponsesClient(
                client,
                self._registry_instance(),
                model=self._config.responses_model,
                container=LazyResource(
                    "container",
                    container_provisioner(client, self._config.container_name),
                ),
                vector_store=LazyResource(
                    "vector_store",
                    vector_store_provisioner(
                        client,
                        self._config.vector_store_name,
                        self._config.document_paths,
                    ),
                ),
                synthesis_instructions=RESPONSE_PROMPT,
            )
        return self._responses

    def create_registry(self) -> ToolRegistry:
        """Registry with every local and hosted-wrapper capability registered."""
        registry = self._registry_instance()
        if len(registry) == 0:
            responses = self.create_responses_client()
            registry.register(CalculateTool())
            registry.register(GetWeatherTool())
            registry.register(SearchWebTool())
            if responses is not None:
                registry.register(WebSearchTool(responses))
                registry.register(CodeInterpreterTool(responses))
            registry.register(FileSearchTool(
                self._config.search_root,
                max_depth=self._config.file_search_max_depth,
            ))
            logger.info("Registered %d tool(s): %s", len(registry), ", ".join(registry.names()))
        return registry

    def create_generator(self) -> Optional[ChatModelGenerator]:
        """Chat-model generator, or None when no chat model can be built."""
        if not self._generator_built:
            self._generator_built = True
            llm = self._llm
            if llm is None:
                try:
                    llm = build_llm(
                        provider=self._config.llm_provider,
                        model=self._config.active_llm_model,
                        ollama_base_url=self._config.ollama_base_url,
                        openai_api_key=self._config.openai_api_key,
                        openai_base_url=self._config.openai_base_url,
                        groq_api_key=self._config.groq_api_key,
                    )
                except ValueError as e:
                    logger.warning("Chat model unavailable, free-form answers disabled: %s", e)
                    return None
            self._generator = ChatModelGenerator(llm, GENERAL_CHAT_PROMPT)
        return self._generator

    def create_workflow_runner(self) -> WorkflowRunner:
        if self._workflows is None:
            registry = self.create_registry()
            generator = self.create_generator()
            self._workflows = WorkflowRunner([
                WeatherWorkflow(registry, generator),
                SearchWorkflow(registry, generator),
            ])
        return self._workflows

    # ------------------------------------------------------------------
    # Orchestrator
    # ------------------------------------------------------------------

    def create_orchestrator(self) -> Orchestrator:
        """Create (once) the fully configured Orchestrator."""
        if self._orchestrator is None:
            registry = self.create_registry()
            workflows = self.create_workflow_runner()
            responses = self.create_responses_client()
            if responses is not None:
                responses.instructions = build_system_prompt(registry, workflows.names())

            self._orchestrator = Orchestrator(
                registry=registry,
                workflows=workflows,
                flags=self.create_feature_flags(),
                dispatcher=IntentDispatcher(),
                generator=self.create_generator(),
                responses=responses,
                mode=self._config.agent_mode,
            )
            logger.info("Orchestrator ready (mode=%s)", self._config.agent_mode)
        return self._orchestrator

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _registry_instance(self) -> ToolRegistry:
        if self._registry is None:
            self._registry = ToolRegistry()
        return self._registry
