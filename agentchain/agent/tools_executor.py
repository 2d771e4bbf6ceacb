"""
Tool Executor
=============

Runs the tool calls the model requested in one turn.

The executor:
1. Dispatches every requested call through the agent's ToolRegistry
2. Runs the calls of a turn concurrently
3. Waits for all of them before returning
4. Returns results in the order the model requested them
5. Renders each result as a tool message for the transcript

Tool failures never escape: the registry reports them on the ToolResult
and they reach the model as "Error: ..." tool messages. Cancellation does
escape, and cancels the calls still in flight.
"""

import asyncio
from dataclasses import dataclass

from agentchain.agent.transcript import TOOL, Message, ToolCallRequest
from agentchain.tools import ToolRegistry, ToolResult
from agentchain.utils.logger import Logger

logger = Logger("ToolExecutor")


@dataclass
class ToolCallResult:
    """
    Result of executing one tool call.

    Attributes:
        tool_call_id: The original tool call ID
        name: The tool name
        result: The dispatch result
    """
    tool_call_id: str
    name: str
    result: ToolResult

    def to_message(self) -> Message:
        """Format as a tool message for the transcript."""
        return Message(
            role=TOOL,
            tool_call_id=self.tool_call_id,
            content=self.result.to_message()
        )


class ToolExecutor:
    """
    Executes the tool calls of a model turn.

    Example:
        executor = ToolExecutor(registry)

        results = await executor.execute_all(response.tool_calls)
        transcript.extend(executor.format_results_for_messages(results))
    """

    def __init__(self, registry: ToolRegistry):
        self.registry = registry

    async def execute_one(self, tool_call: ToolCallRequest) -> ToolCallResult:
        """Execute a single tool call."""
        logger.debug(f"Executing tool: {tool_call.name}")

        result = await self.registry.dispatch(tool_call.name, tool_call.arguments)

        if result.success:
            logger.debug(f"Tool {tool_call.name} succeeded")
        else:
            logger.warning(f"Tool {tool_call.name} failed: {result.error}")

        return ToolCallResult(
            tool_call_id=tool_call.id,
            name=tool_call.name,
            result=result
        )

    async def execute_all(self, tool_calls: list[ToolCallRequest] | tuple[ToolCallRequest, ...]) -> list[ToolCallResult]:
        """
        Execute all tool calls of a turn concurrently.

        Returns once every call has finished. Results are in request order,
        whatever order the calls complete in.
        """
        if not tool_calls:
            return []

        results = await asyncio.gather(*(self.execute_one(tc) for tc in tool_calls))
        return list(results)

    def format_results_for_messages(self, results: list[ToolCallResult]) -> list[Message]:
        """Render results as tool messages, keeping their order."""
        return [result.to_message() for result in results]
