"""Completion gateway: the boundary between the session and the hosted model."""

from typing import Callable

from pydantic import ValidationError

from atlas.constants import AGENT_ERROR_MARKER
from atlas.llm import LLM
from atlas.models import RepoAnalysis
from atlas.system_prompt import SystemPromptBuilder
from atlas.utils.logging import get_logger

logger = get_logger()

ChunkCallback = Callable[[str], None]

ANALYSIS_TOOL = {
    "name": "report_repository",
    "description": "Report the analysis of a public source repository",
    "input_schema": {
        "type": "object",
        "properties": {
            "name": {"type": "string", "description": "Repository name"},
            "summary": {
                "type": "string",
                "description": "A few sentences on what the repository does and how it is organized",
            },
            "stack": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Languages, frameworks and notable libraries",
            },
            "structure": {
                "type": "array",
                "description": "The first two levels of the repository tree",
                "items": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "path": {"type": "string"},
                        "type": {"type": "string", "enum": ["file", "directory"]},
                        "children": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "name": {"type": "string"},
                                    "path": {"type": "string"},
                                    "type": {"type": "string", "enum": ["file", "directory"]},
                                },
                                "required": ["name", "path", "type"],
                            },
                        },
                    },
                    "required": ["name", "path", "type"],
                },
            },
        },
        "required": ["name", "summary", "stack", "structure"],
    },
}


class GatewayError(Exception):
    """Raised when repository analysis fails or returns an unusable payload."""


class CompletionGateway:
    """Streams Atlas replies and runs schema-constrained repository analysis."""

    def __init__(self, llm: LLM, prompt_builder: SystemPromptBuilder):
        """Initialize gateway.

        Args:
            llm: LLM instance to call
            prompt_builder: Builds the fixed system instruction
        """
        self.llm = llm
        self.system = prompt_builder.build_system_messages()

    async def stream_completion(
        self,
        prompt: str,
        history: list[dict[str, str]],
        on_chunk: ChunkCallback,
    ) -> str:
        """Stream a reply, delivering each fragment to ``on_chunk``.

        Never raises on API failure: the error is reported in-band as a final
        fragment and returned as the result.

        Args:
            prompt: Assembled prompt for the final user turn
            history: Prior turns as role/content dicts
            on_chunk: Called with each text fragment in arrival order

        Returns:
            Full concatenated reply (or the error fragment)
        """
        messages = [*history, {"role": "user", "content": prompt}]
        accumulator = ""

        try:
            async for text in self.llm.stream(messages, system=self.system):
                if text:
                    accumulator += text
                    on_chunk(text)
            return accumulator
        except Exception as e:
            logger.error("stream_failed", error=str(e), received_chars=len(accumulator))
            fragment = (
                f"\n\n{AGENT_ERROR_MARKER} {str(e) or type(e).__name__}. "
                "Check your API quota or key validity."
            )
            on_chunk(fragment)
            return fragment

    async def analyze_remote_repository(self, url: str) -> RepoAnalysis:
        """Analyze a public repository in a single schema-constrained call.

        Raises:
            GatewayError: On API failure or a payload that does not fit RepoAnalysis
        """
        messages = [
            {
                "role": "user",
                "content": (
                    f"Analyze the public repository at {url}. Identify its name, "
                    "summarize its purpose and architecture, list its technology stack "
                    "and map the first two levels of its file tree. "
                    "Use the report_repository tool to respond."
                ),
            }
        ]

        try:
            response = await self.llm.complete(
                messages,
                tools=[ANALYSIS_TOOL],
                tool_choice={"type": "tool", "name": ANALYSIS_TOOL["name"]},
                temperature=0.2,
            )
        except Exception as e:
            raise GatewayError(f"Repository analysis failed: {e}") from e

        tool_calls = response.get("tool_calls") or []
        if not tool_calls:
            raise GatewayError("Repository analysis returned no structured result")

        arguments = tool_calls[0]["arguments"]
        if not isinstance(arguments, dict):
            raise GatewayError("Repository analysis returned a non-object payload")

        try:
            return RepoAnalysis.model_validate(arguments)
        except ValidationError as e:
            raise GatewayError(f"Repository analysis payload is malformed: {e}") from e
