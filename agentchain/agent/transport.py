"""
Model Transport
===============

The boundary between the reasoning loop and the remote model.

The agent depends only on the ModelTransport protocol: send the whole
transcript plus sampling parameters and tool definitions, get back free
text and zero or more tool-call requests. Any failure must surface as a
TransportError.

OpenAITransport implements the protocol on top of the OpenAI chat
completions API. It receives an explicit OpenAIConfig at construction
time and never reads the environment itself.

Example:
    transport = OpenAITransport(get_config().openai)

    response = await transport.send(
        transcript.messages,
        SamplingParams(temperature=0.1, max_tokens=4096),
        registry.definitions(),
    )
    print(response.text, response.tool_calls)
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

import openai
from openai import AsyncOpenAI

from agentchain.agent.transcript import ASSISTANT, TOOL, USER, Message, ToolCallRequest
from agentchain.errors import TransportError
from agentchain.tools import ToolDefinition
from agentchain.utils.config import OpenAIConfig
from agentchain.utils.logger import Logger

logger = Logger("Transport")

# OpenAI restricts message "name" fields to this alphabet
_NAME_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")


@dataclass(frozen=True)
class SamplingParams:
    """Generation parameters sent with every turn."""
    temperature: float
    max_tokens: int


@dataclass(frozen=True)
class ModelResponse:
    """
    One model turn.

    Attributes:
        text: Free text of the reply (may be empty)
        tool_calls: Tool calls requested in this turn, in model order
        completion_tokens: Tokens generated, when the provider reports it
    """
    text: str = ""
    tool_calls: tuple[ToolCallRequest, ...] = field(default_factory=tuple)
    completion_tokens: int | None = None


class ModelTransport(Protocol):
    """Anything that can run one model turn."""

    async def send(
        self,
        transcript: Sequence[Message],
        params: SamplingParams,
        tools: Sequence[ToolDefinition] = ()
    ) -> ModelResponse:
        """
        Send the transcript and return the model's reply.

        Raises:
            TransportError: On network, authentication, quota or
                protocol failures
        """
        ...


def _raw_arguments(arguments: Any) -> str:
    if isinstance(arguments, str):
        return arguments
    return json.dumps(arguments if arguments is not None else {}, default=str)


def to_openai_message(message: Message) -> dict:
    """Render a transcript message in chat-completions format."""
    if message.role == TOOL:
        return {
            "role": TOOL,
            "tool_call_id": message.tool_call_id,
            "content": message.content,
        }

    payload: dict[str, Any] = {"role": message.role, "content": message.content}

    if message.role == USER and message.name:
        safe_name = _NAME_UNSAFE.sub("_", message.name)[:64]
        if safe_name:
            payload["name"] = safe_name

    if message.role == ASSISTANT and message.tool_calls:
        payload["content"] = message.content or None
        payload["tool_calls"] = [
            {
                "id": call.id,
                "type": "function",
                "function": {
                    "name": call.name,
                    "arguments": _raw_arguments(call.arguments),
                },
            }
            for call in message.tool_calls
        ]

    return payload


class OpenAITransport:
    """
    ModelTransport backed by the OpenAI chat completions API.

    Stop words are not passed to the API. The agent looks for them in
    the returned text.
    """

    def __init__(self, config: OpenAIConfig, client: AsyncOpenAI | None = None):
        """
        Initialize the transport.

        Args:
            config: API key, model, base URL and timeout
            client: Optional pre-built client (used in tests)
        """
        self.config = config
        self.model = config.model
        self.client = client or AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            max_retries=0,
        )
        logger.info(f"OpenAI transport ready with model: {self.model}")

    async def send(
        self,
        transcript: Sequence[Message],
        params: SamplingParams,
        tools: Sequence[ToolDefinition] = ()
    ) -> ModelResponse:
        request: dict[str, Any] = {
            "model": self.model,
            "messages": [to_openai_message(m) for m in transcript],
            "temperature": params.temperature,
            "max_tokens": params.max_tokens,
        }
        if tools:
            request["tools"] = [t.to_openai_function() for t in tools]
            request["tool_choice"] = "auto"

        try:
            response = await self.client.chat.completions.create(**request)
        except openai.APIStatusError as e:
            raise TransportError(
                f"OpenAI returned HTTP {e.status_code}: {e.message}",
                cause=e,
                status_code=e.status_code,
            ) from e
        except openai.APIError as e:
            raise TransportError(f"OpenAI request failed: {e.message}", cause=e) from e

        return self._parse(response)

    def _parse(self, response: Any) -> ModelResponse:
        if not response.choices:
            raise TransportError("OpenAI returned a response without choices")

        message = response.choices[0].message
        tool_calls = tuple(
            ToolCallRequest(
                id=tc.id,
                name=tc.function.name,
                arguments=tc.function.arguments,
            )
            for tc in (message.tool_calls or [])
        )

        usage = getattr(response, "usage", None)
        completion_tokens = getattr(usage, "completion_tokens", None) if usage else None

        return ModelResponse(
            text=message.content or "",
            tool_calls=tool_calls,
            completion_tokens=completion_tokens,
        )
