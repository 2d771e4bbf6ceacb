"""Shared fixtures: fake model transports and a clean logging setup."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Sequence

import pytest

from agentchain.agent.transcript import USER, Message
from agentchain.agent.transport import ModelResponse, SamplingParams
from agentchain.tools import ToolDefinition
from agentchain.utils import config as config_module
from agentchain.utils.logger import LogLevel, get_log_level, set_log_level


@dataclass
class SentRequest:
    """What an agent handed to the transport on one turn."""
    transcript: tuple[Message, ...]
    params: SamplingParams
    tools: tuple[ToolDefinition, ...]

    @property
    def tool_names(self) -> list[str]:
        return [t.name for t in self.tools]


class ScriptedTransport:
    """
    Replays a fixed list of replies.

    Items may be ModelResponse objects, exceptions (raised) or callables
    taking the transcript and returning a ModelResponse. With
    ``repeat_last`` the final item is replayed forever.
    """

    def __init__(self, responses: Sequence[Any], *, repeat_last: bool = False):
        self.responses = list(responses)
        self.repeat_last = repeat_last
        self.calls: list[SentRequest] = []

    async def send(self, transcript, params, tools=()):
        self.calls.append(SentRequest(tuple(transcript), params, tuple(tools)))
        if not self.responses:
            raise AssertionError("ScriptedTransport ran out of responses")

        if self.repeat_last and len(self.responses) == 1:
            item = self.responses[0]
        else:
            item = self.responses.pop(0)

        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return item(transcript)
        return item


class EchoTransport:
    """Answers every task with ``tag(<task>)`` followed by the stop marker."""

    def __init__(self, tag: str, stop_word: str = "<DONE>"):
        self.tag = tag
        self.stop_word = stop_word
        self.inputs: list[str] = []

    async def send(self, transcript, params, tools=()):
        task = next(m.content for m in transcript if m.role == USER)
        self.inputs.append(task)
        return ModelResponse(text=f"{self.tag}({task}){self.stop_word} ignored tail")


class HangingTransport:
    """Never answers; records whether it was cancelled."""

    def __init__(self):
        self.started = False
        self.cancelled = False

    async def send(self, transcript, params, tools=()):
        self.started = True
        try:
            await asyncio.sleep(3600)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return ModelResponse(text="unreachable")


@pytest.fixture
def scripted() -> Callable[..., ScriptedTransport]:
    return ScriptedTransport


@pytest.fixture
def echo() -> Callable[..., EchoTransport]:
    return EchoTransport


@pytest.fixture
def hanging() -> Callable[[], HangingTransport]:
    return HangingTransport


@pytest.fixture(autouse=True)
def _quiet_logs():
    """Keep test output readable and restore the level afterwards."""
    previous = get_log_level()
    set_log_level(LogLevel.ERROR)
    yield
    set_log_level(previous)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove agentchain variables and stop .env files leaking into tests."""
    for name in (
        "OPENAI_API_KEY",
        "OPENAI_MODEL",
        "OPENAI_BASE_URL",
        "OPENAI_TIMEOUT_SECONDS",
        "AGENT_TEMPERATURE",
        "AGENT_MAX_TOKENS",
        "AGENT_MAX_LOOPS",
        "WORKFLOW_TIMEOUT_SECONDS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "load_dotenv", lambda *args, **kwargs: False)
    config_module.reset_config()
    yield monkeypatch
    config_module.reset_config()
