"""
agent.prompt - Prompt templates for the agent and its workflows.

The system prompt is built from the registry so the listed tools always
match what is actually registered.
"""

from __future__ import annotations

from typing import Any, Iterable

from agent.tools.registry import ToolRegistry


def build_system_prompt(registry: ToolRegistry, workflow_names: Iterable[str] = ()) -> str:
    """Build the system prompt with dynamically listed tools.

    Args:
        registry:       The tool registry with all registered tools.
        workflow_names: Names of the workflow pseudo-tools.

    Returns:
        The system prompt string.
    """
    tool_lines = "\n".join(f"- {t.name}: {t.description}" for t in registry)
    workflows = ", ".join(workflow_names) or "none"

    return f"""You are a helpful AI assistant with access to various tools and workflows.

**Guidelines:**
- Always use the most appropriate tool for the user's request
- Provide clear, helpful responses
- When using workflows, explain what you're doing
- If a request is unclear, ask for clarification

**Available Tools:**
{tool_lines}

**Workflow tools:** {workflows}

Choose the right tool based on the user's needs."""


RESPONSE_PROMPT = """You are a helpful assistant with access to various tools and workflows.

Based on the tool results provided, give the user a clear, helpful response that:
- Summarizes the key information
- Provides actionable insights when relevant
- Maintains a conversational tone
- Addresses the user's original question directly
- Mentions every tool result; if a tool failed, say so briefly"""


GENERAL_CHAT_PROMPT = (
    "You are a helpful, concise assistant. Answer the user's message directly."
)


WEATHER_SYSTEM_PROMPT = """You are a weather assistant. Your job is to analyze weather data and provide personalized recommendations.
- Suggest appropriate clothing based on temperature
- Recommend activities based on weather conditions
- Provide safety tips for extreme weather"""


SEARCH_SYSTEM_PROMPT = """You are a search assistant. Your job is to analyze search results and provide a comprehensive summary.
- Identify the most relevant results
- Extract key information and insights
- Highlight any conflicting information
- Suggest follow-up questions if relevant"""


def weather_recommendation_prompt(location: str, weather: dict[str, Any]) -> str:
    return f"""Based on the weather data for {location}:
- Temperature: {weather.get("temperature")}°{_unit_letter(weather.get("unit", ""))}
- Conditions: {weather.get("condition")}
- Humidity: {weather.get("humidity")}

Generate 3-5 personalized recommendations that are:
1. Practical and actionable
2. Specific to the weather conditions
3. Considerate of different activities (outdoor, indoor, travel)
4. Include any safety considerations

Format as a numbered list, one recommendation per line."""


def search_summary_prompt(query: str, search_results: dict[str, Any]) -> str:
    results = search_results.get("results") or []
    listing = "\n".join(
        f"- {r.get('title')}: {r.get('snippet')} ({r.get('url')})" for r in results
    )
    return f"""Based on the search results for "{query}":
- Total results found: {search_results.get("total_results", len(results))}
- Top results analyzed: {len(results)}

{listing}

Create a comprehensive summary that:
1. Provides an overview of what was found
2. Highlights the most important information
3. Identifies patterns or trends in the results
4. Suggests any follow-up questions or areas for deeper research

Keep the summary informative but concise."""


def _unit_letter(unit: str) -> str:
    return unit[:1].upper() if unit else ""


# ---------------------------------------------------------------------------
# Deterministic answer templates (no model involved)
# ---------------------------------------------------------------------------

def format_calculation(data: dict[str, Any]) -> str:
    return f"The result of {data['expression']} is {data['result']}"


def format_weather(data: dict[str, Any]) -> str:
    return (
        f"The weather in {data['location']} is {data['temperature']}°"
        f"{_unit_letter(data['unit'])}, {data['condition']}. "
        f"Humidity: {data['humidity']}, Wind: {data['wind_speed']}"
    )


def format_web_search(data: dict[str, Any]) -> str:
    results = data["results"]
    if isinstance(results, list):
        # search_web returns records instead of hosted-search text
        results = "; ".join(f"{r.get('title')} ({r.get('url')})" for r in results)
    return f'Web search results for "{data["query"]}": {results}'


def format_file_search(data: dict[str, Any]) -> str:
    return f'File search results for "{data["query"]}": {data["results"]}'


def format_code_execution(data: dict[str, Any]) -> str:
    return f"Code execution results: {data['results']}"
