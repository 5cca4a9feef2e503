"""
agent.tools.weather - Current-weather lookup.

Backed by a mock data source; the shape of the payload is what the
dispatcher templates and the weather workflow rely on.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from application.context import RequestContext
from agent.tools.base import BaseTool, ToolResult


class GetWeatherInput(BaseModel):
    """Input schema for the get_weather tool."""
    location: str = Field(
        min_length=1,
        description="The city and state, e.g. San Francisco, CA",
    )
    unit: Literal["celsius", "fahrenheit"] = Field(
        default="fahrenheit",
        description="Temperature unit",
    )


class GetWeatherTool(BaseTool):
    """Get the current weather for a location."""

    name = "get_weather"
    description = "Get the current weather information for a specific location"

    def get_schema(self) -> type[BaseModel]:
        return GetWeatherInput

    async def execute(
        self,
        ctx: RequestContext,
        location: str = "",
        unit: str = "fahrenheit",
        **kwargs,
    ) -> ToolResult:
        return ToolResult.ok({
            "location": location,
            "temperature": 22 if unit == "celsius" else 72,
            "unit": unit,
            "condition": "Sunny",
            "humidity": "65%",
            "wind_speed": "5 mph",
        })
