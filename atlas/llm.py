"""LLM abstraction layer for Anthropic Claude models."""

import copy
from dataclasses import dataclass
from typing import Any, AsyncIterator, Literal, Optional, Union

from anthropic import AsyncAnthropic

from atlas.constants import SUPPORTED_MODELS

SystemPrompt = Union[str, list[dict[str, Any]]]


@dataclass
class ModelDescriptor:
    """Descriptor for an LLM model."""

    provider: Literal["anthropic"]
    name: str
    max_output_tokens: int
    temperature: float = 0.7


class LLM:
    """Async Anthropic Claude interface."""

    def __init__(self, descriptor: ModelDescriptor, api_key: str):
        """Initialize LLM client.

        Args:
            descriptor: Model descriptor
            api_key: Anthropic API key
        """
        self.descriptor = descriptor

        if descriptor.provider != "anthropic":
            raise ValueError(f"Only Anthropic models are supported. Got: {descriptor.provider}")

        self.client = AsyncAnthropic(api_key=api_key)

    async def complete(
        self,
        messages: list[dict[str, Any]],
        system: Optional[SystemPrompt] = None,
        tools: Optional[list[dict]] = None,
        tool_choice: Optional[dict] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> dict[str, Any]:
        """Generate a completion.

        Args:
            messages: List of message dicts with 'role' and 'content'
            system: System prompt (string or cached blocks)
            tools: Optional tool definitions in Anthropic format
            tool_choice: Optional tool choice, e.g. {"type": "tool", "name": ...}
            temperature: Optional temperature override
            max_tokens: Optional max tokens override

        Returns:
            Response dict with 'content' and, when tools were used, 'tool_calls'
        """
        kwargs = self._request_kwargs(messages, system, temperature, max_tokens)
        if tools:
            kwargs["tools"] = tools
        if tool_choice:
            kwargs["tool_choice"] = tool_choice

        response = await self.client.messages.create(**kwargs)

        result: dict[str, Any] = {"role": "assistant", "content": ""}
        tool_calls = []
        for block in response.content:
            if block.type == "text":
                result["content"] += block.text
            elif block.type == "tool_use":
                tool_calls.append({"id": block.id, "name": block.name, "arguments": block.input})

        if tool_calls:
            result["tool_calls"] = tool_calls

        return result

    async def stream(
        self,
        messages: list[dict[str, Any]],
        system: Optional[SystemPrompt] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> AsyncIterator[str]:
        """Generate a streaming completion.

        Yields:
            Text chunks as they arrive
        """
        kwargs = self._request_kwargs(messages, system, temperature, max_tokens)

        async with self.client.messages.stream(**kwargs) as stream:
            async for text in stream.text_stream:
                yield text

    def _request_kwargs(
        self,
        messages: list[dict[str, Any]],
        system: Optional[SystemPrompt],
        temperature: Optional[float],
        max_tokens: Optional[int],
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": self.descriptor.name,
            "messages": merge_turns(messages),
            "temperature": temperature if temperature is not None else self.descriptor.temperature,
            "max_tokens": max_tokens if max_tokens is not None else self.descriptor.max_output_tokens,
        }
        if system:
            kwargs["system"] = system
        return kwargs

    @classmethod
    def parse_model_string(cls, model_str: str, temperature: float = 0.7) -> ModelDescriptor:
        """Parse model string into ModelDescriptor.

        Args:
            model_str: Model string (e.g., "anthropic:claude-sonnet-4-5")
            temperature: Sampling temperature for this model

        Returns:
            ModelDescriptor

        Raises:
            ValueError: If model string is invalid
        """
        if model_str not in SUPPORTED_MODELS:
            raise ValueError(
                f"Unsupported model: {model_str}. "
                f"Supported: {', '.join(SUPPORTED_MODELS.keys())}"
            )

        model_config = SUPPORTED_MODELS[model_str]
        return ModelDescriptor(
            provider=model_config["provider"],
            name=model_config["name"],
            max_output_tokens=model_config["max_output_tokens"],
            temperature=temperature,
        )

    @classmethod
    def list_models(cls) -> list[str]:
        """List all supported model strings."""
        return list(SUPPORTED_MODELS.keys())


def merge_turns(messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Merge consecutive same-role text turns; the API expects alternating roles.

    The API also expects the first turn to come from the user. Leading
    assistant text (an import summary, say) is folded into the first user
    turn as quoted context, or dropped when it cannot be.

    Returns a new list; the input messages are not modified.
    """
    merged: list[dict[str, Any]] = []
    for message in messages:
        if (
            merged
            and merged[-1]["role"] == message["role"]
            and isinstance(merged[-1]["content"], str)
            and isinstance(message["content"], str)
        ):
            merged[-1]["content"] += "\n\n" + message["content"]
        else:
            merged.append(copy.deepcopy(message))

    if merged and merged[0]["role"] == "assistant":
        leading = merged.pop(0)
        if (
            merged
            and isinstance(leading["content"], str)
            and isinstance(merged[0]["content"], str)
        ):
            merged[0]["content"] = (
                "[EARLIER ATLAS MESSAGE]\n" + leading["content"] + "\n\n" + merged[0]["content"]
            )
    return merged
