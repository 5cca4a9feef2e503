"""
agent.workflows.weather - Weather lookup followed by recommendations.

Steps:
    1. get_weather for the location
    2. One chat-model call turning the reading into recommendations;
       when no model is configured or the call fails, condition-based
       defaults are used so the workflow still answers.
"""

from __future__ import annotations

import logging
import re
from typing import Literal, Optional

from pydantic import BaseModel, Field

from application.context import RequestContext
from agent.prompt import WEATHER_SYSTEM_PROMPT, weather_recommendation_prompt
from agent.tools.base import ToolResult
from agent.tools.registry import ToolRegistry
from agent.workflows.base import BaseWorkflow
from domain.exceptions import UpstreamServiceError
from domain.ports import TextGeneratorPort

logger = logging.getLogger(__name__)

_DEFAULT_RECOMMENDATIONS = {
    "sunny": [
        "It's a great day for outdoor activities!",
        "Consider bringing sunglasses and sunscreen.",
        "Light clothing recommended.",
    ],
    "rain": [
        "Take an umbrella or a waterproof jacket.",
        "Allow extra time when travelling.",
        "A good day for indoor activities.",
    ],
    "snow": [
        "Dress in warm layers.",
        "Watch out for icy roads and pavements.",
        "Check transport schedules before leaving.",
    ],
}
_GENERIC_RECOMMENDATIONS = [
    "Check the forecast again before heading out.",
    "Dress in layers you can adjust.",
    "Stay hydrated.",
]

_LIST_PREFIX_RE = re.compile(r"^\s*(?:\d+[.)]|[-*•])\s*")


class WeatherWorkflowInput(BaseModel):
    """Input schema for weather_workflow."""
    location: str = Field(min_length=1, description="The location to get weather for")
    unit: Literal["celsius", "fahrenheit"] = Field(
        default="fahrenheit", description="Temperature unit",
    )


class WeatherWorkflow(BaseWorkflow):
    """Get weather information and personalized recommendations."""

    name = "weather_workflow"
    description = "Get weather information and personalized recommendations for a location"

    def __init__(self, registry: ToolRegistry, generator: Optional[TextGeneratorPort] = None):
        self._registry = registry
        self._generator = generator

    def get_schema(self) -> type[BaseModel]:
        return WeatherWorkflowInput

    async def run(
        self,
        ctx: RequestContext,
        location: str = "",
        unit: str = "fahrenheit",
        **kwargs,
    ) -> ToolResult:
        logger.info("weather_workflow_started: location=%s unit=%s", location, unit)

        weather = await self._registry.invoke(
            "get_weather", ctx, {"location": location, "unit": unit},
        )
        if not weather.success:
            return ToolResult.fail(f"Weather lookup failed: {weather.error}")

        recommendations = await self._recommend(location, weather.data)
        result = {
            "location": location,
            "unit": unit,
            "weather_data": weather.data,
            "recommendations": recommendations,
        }
        logger.info("weather_workflow_completed: location=%s", location)
        return ToolResult.ok(result)

    async def _recommend(self, location: str, weather: dict) -> list[str]:
        if self._generator is not None:
            try:
                text = await self._generator.generate(
                    weather_recommendation_prompt(location, weather),
                    system=WEATHER_SYSTEM_PROMPT,
                )
            except UpstreamServiceError as e:
                logger.warning("Weather recommendations fell back to defaults: %s", e)
            else:
                lines = [_LIST_PREFIX_RE.sub("", line).strip() for line in text.splitlines()]
                lines = [line for line in lines if line]
                if lines:
                    return lines
        return default_recommendations(weather.get("condition", ""))


def default_recommendations(condition: str) -> list[str]:
    """Static recommendations keyed on the weather condition."""
    condition = condition.lower()
    for key, recs in _DEFAULT_RECOMMENDATIONS.items():
        if key in condition:
            return list(recs)
    return list(_GENERIC_RECOMMENDATIONS)
