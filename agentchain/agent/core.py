"""
Agent Core
==========

An agent is a configured reasoning loop: a persona, sampling parameters,
stop markers, a set of tools and a transcript per run.

Agent Loop:
    Task
     │
     ▼
    Seed transcript (system prompt + task)
     │
     ▼
    ┌──▶ Budget left? ── No ──▶ Complete with last text (budget_exhausted)
    │    │
    │    Yes
    │    ▼
    │   Ask the model (transcript + temperature + max_tokens + tools)
    │    │
    │    ▼
    │   Tool calls? ── Yes ──▶ Run them concurrently, append results ──┐
    │    │                                                             │
    │    No                                                            │
    │    ▼                                                             │
    │   Stop marker? ── Yes ──▶ Complete with text before the marker   │
    │    │                                                             │
    │    No                                                            │
    │    ▼                                                             │
    └── Append text as an assistant message ◀──────────────────────────┘

The loop always ends: every model round trip counts against max_loops.

Transport failures end the run with TransportError. A timeout ends it
with Cancelled. In both cases the partial transcript is dropped; only a
completed run is kept on ``last_run``.
"""

import asyncio
import time
from dataclasses import dataclass, field, replace
from enum import Enum

from agentchain.agent.tools_executor import ToolExecutor
from agentchain.agent.transcript import ASSISTANT, Message, ToolCallRequest, Transcript
from agentchain.agent.transport import ModelResponse, ModelTransport, SamplingParams
from agentchain.errors import Cancelled, TransportError
from agentchain.tools import Tool, ToolDefinition, ToolRegistry
from agentchain.utils.logger import Logger

logger = Logger("Agent")


class AgentState(str, Enum):
    START = "START"
    AWAITING_MODEL = "AWAITING_MODEL"
    TOOL_DISPATCH = "TOOL_DISPATCH"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class AgentConfig:
    """
    Immutable agent configuration.

    Attributes:
        agent_name: Display name, used in logs and workflow traces
        system_prompt: Persona and instructions sent as the system message
        user_name: Persona label attached to the task message
        temperature: Sampling temperature (0.0 to 2.0)
        max_tokens: Generation cap for each model turn
        stop_words: Markers that end the loop when they appear in model text
        tools: Tools the model may call; names must be unique
        max_loops: Maximum number of model turns per run
        token_budget: Optional cap on completion tokens summed over a run
        description: Free-form description of the agent's role
    """
    agent_name: str
    system_prompt: str
    user_name: str = "User"
    temperature: float = 0.7
    max_tokens: int = 4096
    stop_words: tuple[str, ...] = ()
    tools: tuple[Tool, ...] = ()
    max_loops: int = 10
    token_budget: int | None = None
    description: str = ""

    def __post_init__(self) -> None:
        # Accept lists from callers but store tuples
        object.__setattr__(self, "stop_words", tuple(self.stop_words))
        object.__setattr__(self, "tools", tuple(self.tools))

        if not self.agent_name.strip():
            raise ValueError("agent_name must not be empty")
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError(f"temperature must be between 0 and 2, got {self.temperature}")
        if self.max_tokens < 1:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")
        if self.max_loops < 1:
            raise ValueError(f"max_loops must be at least 1, got {self.max_loops}")
        if self.token_budget is not None and self.token_budget < 1:
            raise ValueError(f"token_budget must be positive, got {self.token_budget}")
        if any(not word for word in self.stop_words):
            raise ValueError("stop_words must not contain empty strings")


@dataclass
class AgentRun:
    """
    Record of one completed agent run.

    Attributes:
        agent_name: The agent that ran
        task: The input the run started from
        output: The final output
        transcript: Every message of the run, in order
        turns: Model round trips made
        completion_tokens: Completion tokens reported by the transport
        budget_exhausted: True when the run ended on its turn or token
            budget instead of a stop marker
        stop_word: The marker that ended the run, if any
        duration_seconds: Wall-clock time of the run
    """
    agent_name: str
    task: str
    output: str
    transcript: tuple[Message, ...] = field(default_factory=tuple)
    turns: int = 0
    completion_tokens: int = 0
    budget_exhausted: bool = False
    stop_word: str | None = None
    duration_seconds: float = 0.0


def find_stop_word(text: str, stop_words: tuple[str, ...]) -> tuple[int, str] | None:
    """
    Find the earliest stop marker in a text.

    When two markers start at the same index the longer one wins, so
    "<DONE>" beats "<D".

    Returns:
        (index, marker) of the earliest match, or None
    """
    best: tuple[int, str] | None = None
    for word in stop_words:
        index = text.find(word)
        if index < 0:
            continue
        if best is None or index < best[0] or (index == best[0] and len(word) > len(best[1])):
            best = (index, word)
    return best


def with_call_ids(tool_calls: tuple[ToolCallRequest, ...], turn: int) -> tuple[ToolCallRequest, ...]:
    """
    Give every tool call an ID.

    Transports that do not assign IDs get ``call_<turn>_<index>``, so each
    tool message can still point at its request.
    """
    return tuple(
        call if call.id else replace(call, id=f"call_{turn}_{index}")
        for index, call in enumerate(tool_calls)
    )


class Agent:
    """
    A reasoning loop bound to one model transport.

    Example:
        config = AgentConfig(
            agent_name="The Working Agent",
            system_prompt="You solve math problems. Use the calculator. <DONE>",
            temperature=0.1,
            stop_words=("<DONE>",),
            tools=(CalculateTool(),),
        )
        agent = Agent(config, OpenAITransport(get_config().openai))

        answer = await agent.run("What is 2 + 2?")
    """

    def __init__(self, config: AgentConfig, transport: ModelTransport):
        """
        Initialize the agent.

        Raises:
            ValueError: If two tools share a name
        """
        self.config = config
        self.transport = transport
        self.registry = ToolRegistry(config.tools)
        self.tool_executor = ToolExecutor(self.registry)
        self.state = AgentState.START
        self.last_run: AgentRun | None = None
        self._logger = logger.child(config.agent_name)

    @property
    def name(self) -> str:
        return self.config.agent_name

    def definitions(self) -> list[ToolDefinition]:
        """Tool definitions published to the model on every turn."""
        return self.registry.definitions()

    async def run(self, task: str, *, timeout: float | None = None) -> str:
        """
        Run the reasoning loop and return the final output.

        Raises:
            TransportError: If the model transport fails
            Cancelled: If the timeout expires first
        """
        run = await self.run_detailed(task, timeout=timeout)
        return run.output

    async def run_detailed(self, task: str, *, timeout: float | None = None) -> AgentRun:
        """
        Run the reasoning loop and return the full run record.

        Args:
            task: The incoming task (or the previous agent's output)
            timeout: Seconds before the run is aborted, None for no limit

        Raises:
            TransportError: If the model transport fails
            Cancelled: If the timeout expires first
        """
        self.state = AgentState.START
        try:
            if timeout is None:
                run = await self._loop(task)
            else:
                run = await asyncio.wait_for(self._loop(task), timeout)
        except asyncio.TimeoutError:
            self.state = AgentState.CANCELLED
            self._logger.warning(f"Run cancelled after {timeout}s timeout")
            raise Cancelled(
                f"Agent '{self.name}' timed out after {timeout}s",
                agent_name=self.name,
            ) from None
        except asyncio.CancelledError:
            self.state = AgentState.CANCELLED
            self._logger.warning("Run cancelled")
            raise
        except TransportError as e:
            self.state = AgentState.FAILED
            self._logger.error("Model transport failed", e)
            raise
        except Exception as e:
            self.state = AgentState.FAILED
            self._logger.error("Run failed", e)
            raise

        self.state = AgentState.COMPLETED
        self.last_run = run
        return run

    async def _loop(self, task: str) -> AgentRun:
        config = self.config
        started = time.monotonic()
        transcript = Transcript.seed(config.system_prompt, task, config.user_name)
        params = SamplingParams(temperature=config.temperature, max_tokens=config.max_tokens)
        definitions = self.definitions()

        turns = 0
        completion_tokens = 0
        last_text = ""

        self._logger.info(f"Starting run: {task[:50]}...")

        while True:
            if turns >= config.max_loops or self._tokens_spent(completion_tokens):
                self._logger.warning(
                    f"Budget exhausted after {turns} turns without a stop marker; "
                    "completing with the last response"
                )
                return self._finish(
                    task, last_text, transcript, turns, completion_tokens,
                    started, budget_exhausted=True,
                )

            self.state = AgentState.AWAITING_MODEL
            self._logger.debug(f"Turn {turns + 1} of {config.max_loops}")
            response = await self._ask_model(transcript, params, definitions)
            turns += 1
            completion_tokens += response.completion_tokens or 0

            # A matched marker never reaches the output, even via last_text
            match = find_stop_word(response.text, config.stop_words)
            last_text = response.text if match is None else response.text[:match[0]]

            if response.tool_calls:
                self.state = AgentState.TOOL_DISPATCH
                tool_calls = with_call_ids(response.tool_calls, turns)
                transcript.append(Message(
                    role=ASSISTANT,
                    content=response.text,
                    tool_calls=tool_calls,
                ))
                results = await self.tool_executor.execute_all(tool_calls)
                transcript.extend(self.tool_executor.format_results_for_messages(results))
                continue

            if match is not None:
                index, word = match
                output = last_text
                transcript.append(Message(role=ASSISTANT, content=output))
                self._logger.debug(f"Stop marker {word!r} found at index {index}")
                return self._finish(
                    task, output, transcript, turns, completion_tokens,
                    started, stop_word=word,
                )

            transcript.append(Message(role=ASSISTANT, content=response.text))

    async def _ask_model(
        self,
        transcript: Transcript,
        params: SamplingParams,
        definitions: list[ToolDefinition]
    ) -> ModelResponse:
        try:
            return await self.transport.send(transcript.messages, params, definitions)
        except TransportError:
            raise
        except Exception as e:
            raise TransportError(f"Model transport failed: {e}", cause=e) from e

    def _tokens_spent(self, completion_tokens: int) -> bool:
        budget = self.config.token_budget
        return budget is not None and completion_tokens >= budget

    def _finish(
        self,
        task: str,
        output: str,
        transcript: Transcript,
        turns: int,
        completion_tokens: int,
        started: float,
        *,
        budget_exhausted: bool = False,
        stop_word: str | None = None
    ) -> AgentRun:
        run = AgentRun(
            agent_name=self.name,
            task=task,
            output=output,
            transcript=transcript.messages,
            turns=turns,
            completion_tokens=completion_tokens,
            budget_exhausted=budget_exhausted,
            stop_word=stop_word,
            duration_seconds=time.monotonic() - started,
        )
        self._logger.info(f"Completed in {turns} turns ({len(output)} chars)")
        return run

    def __repr__(self) -> str:
        return f"Agent(name={self.name!r}, tools={self.registry.list_names()!r})"
