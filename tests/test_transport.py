"""Tests for the OpenAI transport adapter."""

from types import SimpleNamespace

import httpx
import openai
import pytest

from agentchain.agent.transcript import Message, ToolCallRequest, Transcript
from agentchain.agent.transport import OpenAITransport, SamplingParams, to_openai_message
from agentchain.errors import TransportError
from agentchain.tools.calculator import CalculateTool
from agentchain.utils.config import OpenAIConfig

CHAT_URL = "https://api.openai.com/v1/chat/completions"


class FakeCompletions:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests: list[dict] = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


def fake_client(completions: FakeCompletions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def completion(content=None, tool_calls=None, completion_tokens=12):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(
        choices=[SimpleNamespace(message=message)],
        usage=SimpleNamespace(completion_tokens=completion_tokens),
    )


def openai_tool_call(call_id, name, arguments):
    return SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=arguments))


@pytest.fixture
def config():
    return OpenAIConfig(api_key="sk-test", model="gpt-4-turbo")


@pytest.mark.asyncio
async def test_request_carries_transcript_params_and_tools(config):
    completions = FakeCompletions(response=completion(content="hi"))
    transport = OpenAITransport(config, client=fake_client(completions))
    transcript = Transcript.seed("system prompt", "2 + 2", user_name="Worker")

    await transport.send(
        transcript.messages,
        SamplingParams(temperature=0.1, max_tokens=4096),
        [CalculateTool().definition()],
    )

    request = completions.requests[0]
    assert request["model"] == "gpt-4-turbo"
    assert request["temperature"] == 0.1
    assert request["max_tokens"] == 4096
    assert request["messages"] == [
        {"role": "system", "content": "system prompt"},
        {"role": "user", "content": "2 + 2", "name": "Worker"},
    ]
    assert request["tools"][0]["function"]["name"] == "calculate_tool"
    assert request["tool_choice"] == "auto"
    assert "stop" not in request


@pytest.mark.asyncio
async def test_tools_are_omitted_when_agent_has_none(config):
    completions = FakeCompletions(response=completion(content="hi"))
    transport = OpenAITransport(config, client=fake_client(completions))

    await transport.send((Message(role="user", content="x"),), SamplingParams(0.5, 10))

    assert "tools" not in completions.requests[0]
    assert "tool_choice" not in completions.requests[0]


@pytest.mark.asyncio
async def test_response_is_parsed_into_text_and_tool_calls(config):
    response = completion(
        content=None,
        tool_calls=[openai_tool_call("call_1", "calculate_tool", '{"expression": "2 + 2"}')],
        completion_tokens=30,
    )
    transport = OpenAITransport(config, client=fake_client(FakeCompletions(response=response)))

    result = await transport.send((Message(role="user", content="x"),), SamplingParams(0.1, 10))

    assert result.text == ""
    assert result.tool_calls == (
        ToolCallRequest(id="call_1", name="calculate_tool", arguments='{"expression": "2 + 2"}'),
    )
    assert result.completion_tokens == 30


@pytest.mark.asyncio
async def test_connection_error_becomes_transport_error(config):
    error = openai.APIConnectionError(request=httpx.Request("POST", CHAT_URL))
    transport = OpenAITransport(config, client=fake_client(FakeCompletions(error=error)))

    with pytest.raises(TransportError) as excinfo:
        await transport.send((Message(role="user", content="x"),), SamplingParams(0.1, 10))

    assert excinfo.value.cause is error
    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_rate_limit_keeps_status_code(config):
    request = httpx.Request("POST", CHAT_URL)
    error = openai.RateLimitError(
        "Rate limit reached",
        response=httpx.Response(429, request=request),
        body=None,
    )
    transport = OpenAITransport(config, client=fake_client(FakeCompletions(error=error)))

    with pytest.raises(TransportError) as excinfo:
        await transport.send((Message(role="user", content="x"),), SamplingParams(0.1, 10))

    assert excinfo.value.status_code == 429
    assert "429" in str(excinfo.value)


@pytest.mark.asyncio
async def test_empty_choices_is_a_transport_error(config):
    response = SimpleNamespace(choices=[], usage=None)
    transport = OpenAITransport(config, client=fake_client(FakeCompletions(response=response)))

    with pytest.raises(TransportError, match="without choices"):
        await transport.send((Message(role="user", content="x"),), SamplingParams(0.1, 10))


def test_assistant_tool_call_message_rendering():
    message = Message(
        role="assistant",
        content="",
        tool_calls=(ToolCallRequest(id="c1", name="calculate_tool", arguments={"expression": "1"}),),
    )

    rendered = to_openai_message(message)

    assert rendered["content"] is None
    assert rendered["tool_calls"] == [
        {
            "id": "c1",
            "type": "function",
            "function": {"name": "calculate_tool", "arguments": '{"expression": "1"}'},
        }
    ]


def test_tool_message_rendering():
    rendered = to_openai_message(Message(role="tool", content="4", tool_call_id="c1"))

    assert rendered == {"role": "tool", "tool_call_id": "c1", "content": "4"}


def test_user_name_is_sanitized():
    rendered = to_openai_message(Message(role="user", content="x", name="The Verifier!"))

    assert rendered["name"] == "The_Verifier_"


def test_client_is_built_from_config():
    config = OpenAIConfig(api_key="sk-test", model="gpt-4o", base_url="http://localhost:8080/v1")

    transport = OpenAITransport(config)

    assert transport.model == "gpt-4o"
    assert str(transport.client.base_url).startswith("http://localhost:8080/v1")
