"""
Run the Tool-Routing Agent REST API.

Usage:
    python run_api.py

Environment variables (all optional):
    AGENT_MODE          "deterministic" (default) or "model"
    OPENAI_API_KEY      Required for the Responses API and hosted tools
    RESPONSES_MODEL     Model used through the Responses API (default: gpt-4o-mini)
    LLM_PROVIDER        "openai", "groq", or "ollama" (chat model for free-form answers)
    DOCUMENT_PATHS      Comma-separated files uploaded to the document index
    FILE_SEARCH_ROOT    Directory searched by the local file_search tool
    FLAG_<NAME>         Default for a feature flag, e.g. FLAG_STRUCTURED_OUTPUT=true
    LOG_LEVEL           Logging level (default: INFO)
"""

import sys
from pathlib import Path

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent / "src"))

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "adapters.rest.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
