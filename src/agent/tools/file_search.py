"""
agent.tools.file_search - Search project files for a text fragment.

Walks the configured root (bounded depth), scans text files line by line
and reports the first few matching lines per file. The walk is blocking
I/O, so it runs in the default thread pool.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field

from application.context import RequestContext
from agent.tools.base import BaseTool, ToolResult

logger = logging.getLogger(__name__)

_SKIP_DIRS = {"node_modules", ".git", "dist", "build", "__pycache__", ".venv", "venv"}
_SEARCHABLE_EXTENSIONS = {
    ".py", ".ts", ".js", ".json", ".md", ".txt", ".yml", ".yaml",
    ".toml", ".cfg", ".ini", ".xml", ".html", ".css", ".scss",
}
_MAX_MATCHES_PER_FILE = 5
_PREVIEW_CHARS = 200


@dataclass(frozen=True)
class FileMatch:
    file: str
    matches: list[str]
    preview: str


class FileSearchInput(BaseModel):
    """Input schema for the file_search tool."""
    query: str = Field(min_length=1, description="Search query for files")


class FileSearchTool(BaseTool):
    """Search through project files for specific content."""

    name = "file_search"
    description = "Search through project files for specific content"

    def __init__(self, root: Path, max_depth: int = 3):
        self._root = Path(root)
        self._max_depth = max_depth

    def get_schema(self) -> type[BaseModel]:
        return FileSearchInput

    async def execute(self, ctx: RequestContext, query: str = "", **kwargs) -> ToolResult:
        loop = asyncio.get_event_loop()
        try:
            found = await loop.run_in_executor(None, self._search, query)
        except OSError as e:
            logger.warning("File search under %s failed: %s", self._root, e)
            return ToolResult.fail(f"Failed to search files: {e}")

        if not found:
            return ToolResult.ok({
                "query": query,
                "results": f'No files found containing "{query}" in the project directory.',
                "files_found": 0,
                "detailed_results": [],
            })

        summary = f'Found {len(found)} file(s) containing "{query}":\n\n' + "\n".join(
            f"{m.file}\n" + "\n".join(m.matches) + "\n" for m in found
        )
        return ToolResult.ok({
            "query": query,
            "results": summary,
            "files_found": len(found),
            "detailed_results": [
                {"file": m.file, "matches": m.matches, "preview": m.preview}
                for m in found
            ],
        })

    def _search(self, query: str) -> list[FileMatch]:
        needle = query.lower()
        results: list[FileMatch] = []
        self._walk(self._root, needle, 0, results)
        return results

    def _walk(self, directory: Path, needle: str, depth: int, out: list[FileMatch]) -> None:
        if depth >= self._max_depth:
            return
        try:
            entries = sorted(directory.iterdir())
        except OSError:
            return
        for entry in entries:
            if entry.is_dir():
                if entry.name not in _SKIP_DIRS:
                    self._walk(entry, needle, depth + 1, out)
            elif entry.is_file() and entry.suffix.lower() in _SEARCHABLE_EXTENSIONS:
                match = self._scan_file(entry, needle)
                if match is not None:
                    out.append(match)

    def _scan_file(self, path: Path, needle: str) -> FileMatch | None:
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return None
        matches = [
            f"Line {number}: {line.strip()}"
            for number, line in enumerate(content.splitlines(), start=1)
            if needle in line.lower()
        ]
        if not matches:
            return None
        return FileMatch(
            file=str(path.relative_to(self._root)),
            matches=matches[:_MAX_MATCHES_PER_FILE],
            preview=content[:_PREVIEW_CHARS] + "...",
        )
