"""Pydantic models for REST API request/response validation."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from application.dto import AgentOptions, StructuredOutputSpec


# --- Agent ---

class StructuredOutputBody(BaseModel):
    name: str = Field(..., min_length=1, max_length=64)
    json_schema: dict[str, Any] = Field(..., alias="schema")

    model_config = ConfigDict(populate_by_name=True)


class AgentBody(BaseModel):
    """POST /agent. Accepts camelCase or snake_case keys."""
    message: str = Field(..., min_length=1)
    temperature: Optional[float] = Field(None, ge=0, le=2)
    max_output_tokens: Optional[int] = Field(None, gt=0, alias="maxOutputTokens")
    top_p: Optional[float] = Field(None, ge=0, le=1, alias="topP")
    top_logprobs: Optional[int] = Field(None, ge=0, le=20, alias="topLogprobs")
    parallel_tool_calls: Optional[bool] = Field(None, alias="parallelToolCalls")
    structured_output: Optional[StructuredOutputBody] = Field(None, alias="structuredOutput")

    model_config = ConfigDict(populate_by_name=True)

    def to_options(self) -> AgentOptions:
        spec = None
        if self.structured_output is not None:
            spec = StructuredOutputSpec(
                name=self.structured_output.name,
                schema=self.structured_output.json_schema,
            )
        return AgentOptions(
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
            top_p=self.top_p,
            top_logprobs=self.top_logprobs,
            parallel_tool_calls=self.parallel_tool_calls,
            structured_output=spec,
        )


class AgentOut(BaseModel):
    response: str
    tool_calls: list[dict[str, Any]] = []
    tool_results: list[dict[str, Any]] = []
    structured_output: Optional[Any] = None


# --- Tools ---

class ToolsOut(BaseModel):
    custom_tools: list[str]
    built_in_tools: list[str]
    workflows: list[str]
    feature_flags: dict[str, bool]
    declarations: list[dict[str, Any]]


# --- Feature flags ---

class FlagsOut(BaseModel):
    flags: dict[str, bool]


class FlagChangeOut(BaseModel):
    success: bool = True
    message: str
    flags: dict[str, bool]


# --- Workflows ---

class WeatherWorkflowBody(BaseModel):
    location: str = Field(..., min_length=1)
    unit: Literal["celsius", "fahrenheit"] = "fahrenheit"


class SearchWorkflowBody(BaseModel):
    query: str = Field(..., min_length=1)


class WorkflowOut(BaseModel):
    result: dict[str, Any]
