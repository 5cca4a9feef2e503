"""
Run the Tool-Routing Agent CLI.

Usage:
    python run_cli.py [COMMAND] [OPTIONS]

Commands:
    ask        One-shot request
    chat       Interactive session
    tools      List tools, hosted tools and workflows
    flags      Show feature flags
    workflow   Run the weather or search workflow directly

Examples:
    python run_cli.py ask "Calculate 15 * 23"
    python run_cli.py workflow weather Tokyo --unit celsius
    python run_cli.py chat

Environment variables (all optional):
    AGENT_MODE          "deterministic" (default) or "model"
    LLM_PROVIDER        "openai", "groq", or "ollama" (chat model for free-form answers)
    LLM_MODEL_OPENAI    Model name when LLM_PROVIDER=openai (default: gpt-4.1-mini)
    LLM_MODEL_GROQ      Model name when LLM_PROVIDER=groq (default: llama-3.3-70b-versatile)
    LLM_MODEL_OLLAMA    Model name when LLM_PROVIDER=ollama (default: llama3.2)
    OPENAI_API_KEY      Required for the Responses API and LLM_PROVIDER=openai
    GROQ_API_KEY        Required when LLM_PROVIDER=groq
    RESPONSES_MODEL     Model used through the Responses API (default: gpt-4o-mini)
    FLAG_<NAME>         Default for a feature flag, e.g. FLAG_HOSTED_SEARCH=false
"""

import sys
from pathlib import Path

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent / "src"))

from adapters.cli.main import app

if __name__ == "__main__":
    app()
