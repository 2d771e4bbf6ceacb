"""
agentchain - Main Entry Point
=============================

Runs the two-agent calculation workflow:

1. The Working Agent solves the task using the calculator tool
2. The Verifier Agent solves it independently and reports AGREE or DISAGREE

Both agents end their answer with the <DONE> marker.

Run with:
    python -m agentchain.main "What is 15% of 80?"

Or after installing:
    agentchain "What is 15% of 80?"

Without a task argument the stock price example is used.
"""

import asyncio
import sys

from agentchain.agent import Agent, AgentConfig, ModelTransport, OpenAITransport
from agentchain.errors import Cancelled, WorkflowError
from agentchain.tools.calculator import CalculateTool
from agentchain.utils.config import AgentDefaults, get_config
from agentchain.utils.logger import Logger, set_log_level
from agentchain.workflow import SequentialWorkflow

main_logger = Logger("Main")

STOP_WORD = "<DONE>"

DEFAULT_TASK = (
    "A stock price increases by 40% on Monday, then decreases by 40% on Tuesday. "
    "If it started at $100, what is the final price?"
)


def build_worker_agent(transport: ModelTransport, defaults: AgentDefaults) -> Agent:
    """The agent that solves the problem with the calculator."""
    config = AgentConfig(
        agent_name="The Working Agent",
        user_name="Worker",
        system_prompt=(
            "You solve math problems. "
            f"Show your reasoning and use the Calculate Tool {STOP_WORD}."
        ),
        temperature=defaults.temperature,
        max_tokens=defaults.max_tokens,
        max_loops=defaults.max_loops,
        stop_words=(STOP_WORD,),
        tools=(CalculateTool(),),
    )
    return Agent(config, transport)


def build_verifier_agent(transport: ModelTransport, defaults: AgentDefaults) -> Agent:
    """The agent that checks the worker's answer."""
    config = AgentConfig(
        agent_name="The Verifier Agent",
        user_name="Verifier",
        system_prompt=(
            "You solve math problems. "
            "Solve independently, compare to provided answer. "
            f"Report AGREE or DISAGREE with explanation {STOP_WORD}."
        ),
        temperature=defaults.temperature,
        max_tokens=defaults.max_tokens,
        max_loops=defaults.max_loops,
        stop_words=(STOP_WORD,),
    )
    return Agent(config, transport)


def build_calculation_workflow(
    transport: ModelTransport,
    defaults: AgentDefaults | None = None
) -> SequentialWorkflow:
    """Worker followed by verifier, sharing one transport."""
    defaults = defaults or AgentDefaults()
    return SequentialWorkflow(
        "Calculation Workflow",
        [
            build_worker_agent(transport, defaults),
            build_verifier_agent(transport, defaults),
        ],
        description="Solve a math problem, then verify the answer independently",
    )


async def main(task: str = DEFAULT_TASK) -> int:
    """
    Main async entry point.

    Returns:
        Process exit code
    """
    try:
        config = get_config()
    except ValueError as e:
        main_logger.error("Invalid configuration", e)
        return 1

    set_log_level(config.log_level)
    main_logger.info("Starting agentchain...")

    transport = OpenAITransport(config.openai)
    workflow = build_calculation_workflow(transport, config.agent)

    try:
        result = await workflow.run(task, timeout=config.workflow.timeout_seconds)
    except WorkflowError as e:
        main_logger.error(f"Agent '{e.agent_name}' (position {e.position}) failed", e)
        return 1
    except Cancelled as e:
        main_logger.error("Workflow cancelled", e)
        return 1

    print(result)
    return 0


def run() -> None:
    """
    Synchronous entry point.

    This is called when running with the `agentchain` command.
    """
    task = " ".join(sys.argv[1:]).strip() or DEFAULT_TASK
    try:
        code = asyncio.run(main(task))
    except KeyboardInterrupt:
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    run()
