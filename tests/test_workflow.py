"""Tests for sequential workflow orchestration."""

import pytest

from agentchain.agent import Agent, AgentConfig, ModelResponse
from agentchain.errors import Cancelled, TransportError, WorkflowError
from agentchain.workflow import RunResult, SequentialWorkflow


def make_agent(name: str, transport) -> Agent:
    config = AgentConfig(
        agent_name=name,
        system_prompt=f"You are {name}.",
        stop_words=("<DONE>",),
    )
    return Agent(config, transport)


@pytest.mark.asyncio
async def test_empty_workflow_returns_task_unchanged():
    workflow = SequentialWorkflow("Empty")

    assert await workflow.run("  the task\n") == "  the task\n"

    result = await workflow.run_with_trace("the task")
    assert result == RunResult(output="the task", trace=[])


@pytest.mark.asyncio
async def test_output_is_piped_into_next_agent(echo):
    first, second = echo("A"), echo("B")
    workflow = SequentialWorkflow("Pipe", [make_agent("A", first), make_agent("B", second)])

    result = await workflow.run_with_trace("task")

    a_output, b_output = result.trace[0][1], result.trace[1][1]
    assert a_output == "A(task)"
    assert second.inputs == [a_output]
    assert b_output == "B(A(task))"
    assert result.output == b_output


@pytest.mark.asyncio
async def test_trace_lists_agents_in_execution_order(echo):
    agents = [make_agent(name, echo(name)) for name in ("Planner", "Builder", "Auditor")]
    workflow = SequentialWorkflow("Three", agents)

    result = await workflow.run_with_trace("x")

    assert [name for name, _ in result.trace] == ["Planner", "Builder", "Auditor"]
    assert result.output == "Auditor(Builder(Planner(x)))"


@pytest.mark.asyncio
async def test_run_returns_last_output(echo):
    workflow = SequentialWorkflow("Single", [make_agent("Only", echo("O"))])

    assert await workflow.run("hi") == "O(hi)"


@pytest.mark.asyncio
async def test_failure_aborts_remaining_agents(echo, scripted):
    last = echo("C")
    cause = TransportError("invalid api key", status_code=401)
    workflow = SequentialWorkflow(
        "Failing",
        [
            make_agent("A", echo("A")),
            make_agent("B", scripted([cause])),
            make_agent("C", last),
        ],
    )

    with pytest.raises(WorkflowError) as excinfo:
        await workflow.run_with_trace("task")

    error = excinfo.value
    assert error.position == 1
    assert error.agent_name == "B"
    assert error.workflow_name == "Failing"
    assert error.trace == [("A", "A(task)")]
    assert error.cause is cause
    assert "agent 'B' at position 1" in str(error)
    assert last.inputs == []


@pytest.mark.asyncio
async def test_failure_of_first_agent_has_empty_trace(scripted):
    workflow = SequentialWorkflow("Failing", [make_agent("A", scripted([TransportError("down")]))])

    with pytest.raises(WorkflowError) as excinfo:
        await workflow.run("task")

    assert excinfo.value.position == 0
    assert excinfo.value.trace == []


class BrokenAgent(Agent):
    async def run(self, task, *, timeout=None):
        raise ValueError("bad internal state")


@pytest.mark.asyncio
async def test_unexpected_agent_exception_becomes_workflow_error(echo):
    first = make_agent("A", echo("A"))
    broken = BrokenAgent(AgentConfig(agent_name="B", system_prompt="You are B."), echo("B"))
    workflow = SequentialWorkflow("Fragile", [first, broken])

    with pytest.raises(WorkflowError) as excinfo:
        await workflow.run("task")

    assert excinfo.value.agent_name == "B"
    assert excinfo.value.position == 1
    assert excinfo.value.trace == [("A", "A(task)")]
    assert isinstance(excinfo.value.__cause__, ValueError)


@pytest.mark.asyncio
async def test_agents_run_one_at_a_time(scripted):
    events: list[str] = []

    def reply(name):
        def respond(transcript):
            events.append(name)
            return ModelResponse(text=f"{name} done<DONE>")
        return respond

    workflow = SequentialWorkflow(
        "Ordered",
        [
            make_agent("A", scripted([reply("A-1")])),
            make_agent("B", scripted([reply("B-1")])),
        ],
    )

    await workflow.run("task")

    assert events == ["A-1", "B-1"]


@pytest.mark.asyncio
async def test_workflow_timeout_reports_in_flight_agent(echo, hanging):
    stuck = hanging()
    workflow = SequentialWorkflow("Slow", [make_agent("A", echo("A")), make_agent("B", stuck)])

    with pytest.raises(Cancelled) as excinfo:
        await workflow.run("task", timeout=0.05)

    assert excinfo.value.agent_name == "B"
    assert excinfo.value.position == 1
    assert stuck.cancelled is True


@pytest.mark.asyncio
async def test_agent_timeout_is_not_a_workflow_error(echo, hanging):
    workflow = SequentialWorkflow(
        "Per agent",
        [make_agent("A", hanging()), make_agent("B", echo("B"))],
        agent_timeout=0.05,
    )

    with pytest.raises(Cancelled) as excinfo:
        await workflow.run("task")

    assert not isinstance(excinfo.value, WorkflowError)
    assert excinfo.value.agent_name == "A"
    assert excinfo.value.position == 0


def test_workflow_owns_an_immutable_agent_sequence(echo):
    agents = [make_agent("A", echo("A"))]
    workflow = SequentialWorkflow("Owned", agents)
    agents.append(make_agent("B", echo("B")))

    assert len(workflow) == 1
    assert workflow.agent_names == ["A"]
