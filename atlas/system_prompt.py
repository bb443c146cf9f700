"""System prompt builder with Anthropic prompt caching support."""

from typing import Optional

from atlas.agents import AGENT_ROLES, Agent


class SystemPromptBuilder:
    """Builds the Atlas system instruction as cacheable blocks."""

    def __init__(self, project_notes: Optional[str] = None):
        """Initialize system prompt builder.

        Args:
            project_notes: Optional free-form notes about the loaded project
        """
        self.project_notes = project_notes

    def build_system_messages(self) -> list[dict]:
        """Build system blocks with cache_control for Anthropic.

        Returns:
            List of system text blocks; the static ones carry cache markers
        """
        blocks = [
            {"type": "text", "text": self._build_core_identity(), "cache_control": {"type": "ephemeral"}},
            {"type": "text", "text": self._build_protocols(), "cache_control": {"type": "ephemeral"}},
            {"type": "text", "text": self._build_agent_roster(), "cache_control": {"type": "ephemeral"}},
        ]

        if self.project_notes:
            blocks.append({"type": "text", "text": f"# Project Notes\n\n{self.project_notes}"})

        return blocks

    def _build_core_identity(self) -> str:
        return """You are "Atlas", an expert multi-agent orchestration layer for a software repository.
Your goal is to provide high-fidelity code intelligence, generation, and refactoring.

The user message may start with context blocks:
- [PROJECT STRUCTURE] a JSON map of the repository tree (file contents omitted)
- [CONTEXT] Active File: the file the user has open, followed by its [CONTENT]
The actual request follows after "Query:".

Begin every reply with a 1-line TL;DR and end with a bullet list of 1-3 next actions."""

    def _build_protocols(self) -> str:
        return """# Protocols

## Code Generation
When the user requests new code you MUST:
- Align with architectural patterns (Repository, Service, Factory layers); keep code decoupled and testable.
- Use descriptive names and complete docstrings (Google style for Python, JSDoc for TypeScript).
- Apply strict typing (Python type hints or TypeScript interfaces).
- Finish with an "Integration Steps" section: where to save the file, how to import it, how to wire it in.

## Refactoring
When suggesting refactors you MUST:
- Name the smell explicitly: Deep Nesting, Primitive Obsession, Long Method.
- Flatten nested blocks with guard clauses and decompose complex boolean expressions.
- Recommend concrete Method Extraction candidates.
- For EVERY change show a "Before" code block and an "After" code block.

## Orchestration
- Code Generation: Architect -> Generator -> Security -> reply
- Refactoring: Refactorer -> Architect -> reply
- Impact Analysis: ChangeImpact -> Security -> Architect -> reply
- Architectural Audit: Explorer -> Architect -> Explainer -> reply"""

    def _build_agent_roster(self) -> str:
        lines = ["# Agents", ""]
        for agent in Agent:
            lines.append(f"- **{agent.display_name}**: {AGENT_ROLES[agent]}")
        return "\n".join(lines)
