"""
Sequential Workflow
===================

A fixed, ordered chain of agents.

    task ──▶ Agent 1 ──▶ output 1 ──▶ Agent 2 ──▶ ... ──▶ Agent n ──▶ result

Each agent receives the previous agent's output unchanged, so agent i+1
never starts before agent i has completed. If an agent fails, the chain
stops there and WorkflowError reports which agent failed, where it sits
in the chain, and what the earlier agents produced.

A workflow with no agents returns the task as its result.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Sequence

from agentchain.agent.core import Agent
from agentchain.errors import Cancelled, WorkflowError
from agentchain.utils.logger import Logger

logger = Logger("Workflow")


@dataclass
class RunResult:
    """
    Outcome of a workflow run.

    Attributes:
        output: The last agent's output (the task itself for an empty workflow)
        trace: (agent name, output) pairs in execution order
    """
    output: str
    trace: list[tuple[str, str]] = field(default_factory=list)


@dataclass
class _Progress:
    """Which agent is in flight, for reporting timeouts."""
    position: int | None = None
    agent_name: str | None = None


class SequentialWorkflow:
    """
    Runs agents one after another, piping outputs to inputs.

    Example:
        workflow = SequentialWorkflow(
            "Calculation Workflow",
            [worker_agent, verifier_agent],
        )

        answer = await workflow.run("What is 40% of 210?")

        result = await workflow.run_with_trace("What is 40% of 210?")
        for agent_name, output in result.trace:
            print(agent_name, output)
    """

    def __init__(
        self,
        name: str,
        agents: Sequence[Agent] = (),
        description: str = "",
        agent_timeout: float | None = None
    ):
        """
        Initialize the workflow.

        Args:
            name: Workflow name, used in logs and errors
            agents: Agents in execution order
            description: Free-form description
            agent_timeout: Seconds each agent may run, None for no limit
        """
        self.name = name
        self.description = description
        self.agent_timeout = agent_timeout
        self.agents: tuple[Agent, ...] = tuple(agents)
        self._logger = logger.child(name)

    @property
    def agent_names(self) -> list[str]:
        return [agent.name for agent in self.agents]

    async def run(self, task: str, *, timeout: float | None = None) -> str:
        """
        Run the chain and return the last agent's output.

        Raises:
            WorkflowError: If an agent fails
            Cancelled: If the timeout expires first
        """
        result = await self.run_with_trace(task, timeout=timeout)
        return result.output

    async def run_with_trace(self, task: str, *, timeout: float | None = None) -> RunResult:
        """
        Run the chain and return the output with the per-agent trace.

        Args:
            task: Input for the first agent
            timeout: Seconds for the whole chain, None for no limit

        Raises:
            WorkflowError: If an agent fails
            Cancelled: If the timeout expires first
        """
        progress = _Progress()
        try:
            if timeout is None:
                return await self._run_chain(task, progress)
            return await asyncio.wait_for(self._run_chain(task, progress), timeout)
        except asyncio.TimeoutError:
            self._logger.warning(
                f"Timed out after {timeout}s while running agent "
                f"'{progress.agent_name}' (position {progress.position})"
            )
            raise Cancelled(
                f"Workflow '{self.name}' timed out after {timeout}s",
                agent_name=progress.agent_name,
                position=progress.position,
            ) from None

    async def _run_chain(self, task: str, progress: _Progress) -> RunResult:
        trace: list[tuple[str, str]] = []
        current = task

        if not self.agents:
            self._logger.info("No agents registered; returning the task unchanged")
            return RunResult(output=task, trace=trace)

        self._logger.info(f"Starting with {len(self.agents)} agents: {', '.join(self.agent_names)}")

        for position, agent in enumerate(self.agents):
            progress.position = position
            progress.agent_name = agent.name
            self._logger.info(f"Running agent {position + 1}/{len(self.agents)}: {agent.name}")

            try:
                current = await agent.run(current, timeout=self.agent_timeout)
            except Cancelled as e:
                if e.position is None:
                    e.position = position
                raise
            except Exception as e:
                error = WorkflowError(self.name, agent.name, position, list(trace), e)
                self._logger.error("Workflow aborted", error)
                raise error from e

            trace.append((agent.name, current))

        self._logger.info("Workflow completed")
        return RunResult(output=current, trace=trace)

    def __len__(self) -> int:
        return len(self.agents)

    def __repr__(self) -> str:
        return f"SequentialWorkflow(name={self.name!r}, agents={self.agent_names!r})"
