"""Prompt assembly from a session snapshot."""

import json
from typing import Any, Iterable

from atlas.constants import STRUCTURE_QUERY_PATTERN
from atlas.models import FileNode
from atlas.state import SessionState


def strip_content(forest: Iterable[FileNode]) -> list[dict[str, Any]]:
    """Project the forest to plain dicts without file contents."""
    stripped = []
    for node in forest:
        entry: dict[str, Any] = {"name": node.name, "path": node.path, "type": node.kind}
        if node.children is not None:
            entry["children"] = strip_content(node.children)
        stripped.append(entry)
    return stripped


def wants_structure(query: str) -> bool:
    return STRUCTURE_QUERY_PATTERN.search(query.lower()) is not None


def assemble(query: str, state: SessionState) -> str:
    """Build the prompt sent as the final user turn.

    Args:
        query: Raw user request
        state: Session snapshot to read context from

    Returns:
        Structure block (structural queries only), then the active file block
        (when a file is open), then the query
    """
    parts = []

    if wants_structure(query):
        structure = json.dumps(strip_content(state.repo_forest), indent=2)
        parts.append(f"[PROJECT STRUCTURE]\n{structure}\n\n")

    if state.current_file is not None:
        current = state.current_file
        parts.append(f"[CONTEXT] Active File: {current.path}\n[CONTENT]\n{current.content or ''}\n\n")

    parts.append(f"Query: {query}")
    return "".join(parts)


def history_for_gateway(state: SessionState) -> list[dict[str, str]]:
    """Prior turns with content, oldest first. Empty placeholders are skipped."""
    return [
        {"role": message.role, "content": message.content}
        for message in state.messages
        if message.content
    ]
