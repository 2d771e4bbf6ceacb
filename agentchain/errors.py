"""
Error Taxonomy
==============

All errors raised or reported by agentchain derive from AgentChainError.

Tool-level errors (ToolError and subclasses) are never raised out of an
agent run. The dispatcher stores them on a ToolResult and the reasoning
loop turns them into tool messages so the model can react on its next
turn.

TransportError ends an agent run. Inside a workflow it is wrapped in a
WorkflowError that names the failing agent and carries the partial trace.

Cancelled is raised when a timeout aborts a run. It is not a failure and
is never wrapped in WorkflowError.
"""

from typing import Any


class AgentChainError(Exception):
    """Base class for all agentchain errors."""


# ==============================================================================
# Tool errors
# ==============================================================================

class ToolError(AgentChainError):
    """
    A tool call could not produce a result.

    Attributes:
        tool_name: The tool name the model requested
    """

    def __init__(self, tool_name: str, message: str):
        super().__init__(message)
        self.tool_name = tool_name


class ToolNotFound(ToolError):
    """The model requested a tool that is not registered."""

    def __init__(self, tool_name: str, available: list[str] | None = None):
        available = available or []
        listing = ", ".join(available) if available else "none"
        super().__init__(
            tool_name,
            f"Tool '{tool_name}' not found. Available tools: {listing}"
        )
        self.available = available


class ArgumentDecodeError(ToolError):
    """The raw arguments do not match the tool's declared schema."""

    def __init__(self, tool_name: str, detail: str, raw_args: Any = None):
        super().__init__(
            tool_name,
            f"Invalid arguments for tool '{tool_name}': {detail}"
        )
        self.detail = detail
        self.raw_args = raw_args


class ToolCallError(ToolError):
    """
    The tool's own computation failed.

    The underlying exception is kept on ``cause`` and chained as
    ``__cause__`` when raised.
    """

    def __init__(self, tool_name: str, cause: BaseException):
        super().__init__(tool_name, f"Tool '{tool_name}' failed: {cause}")
        self.cause = cause
        self.__cause__ = cause


# ==============================================================================
# Run errors
# ==============================================================================

class TransportError(AgentChainError):
    """
    The model transport failed (network, authentication, quota, ...).

    Attributes:
        cause: The underlying exception, if any
        status_code: HTTP status reported by the provider, if any
    """

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        status_code: int | None = None
    ):
        super().__init__(message)
        self.cause = cause
        self.status_code = status_code
        if cause is not None:
            self.__cause__ = cause


class Cancelled(AgentChainError):
    """
    A run was aborted by a timeout before it completed.

    Attributes:
        agent_name: The agent that was in flight, when known
        position: 0-based position of that agent in its workflow, when known
    """

    def __init__(
        self,
        message: str,
        agent_name: str | None = None,
        position: int | None = None
    ):
        super().__init__(message)
        self.agent_name = agent_name
        self.position = position


class WorkflowError(AgentChainError):
    """
    An agent in a workflow failed and the remaining agents were skipped.

    Attributes:
        workflow_name: The workflow that aborted
        agent_name: The failing agent
        position: 0-based index of the failing agent
        trace: (agent name, output) pairs of the agents that completed
        cause: The agent's terminal error
    """

    def __init__(
        self,
        workflow_name: str,
        agent_name: str,
        position: int,
        trace: list[tuple[str, str]],
        cause: BaseException
    ):
        super().__init__(
            f"Workflow '{workflow_name}' aborted: agent '{agent_name}' "
            f"at position {position} failed: {cause}"
        )
        self.workflow_name = workflow_name
        self.agent_name = agent_name
        self.position = position
        self.trace = trace
        self.cause = cause
        self.__cause__ = cause


__all__ = [
    "AgentChainError",
    "ToolError",
    "ToolNotFound",
    "ArgumentDecodeError",
    "ToolCallError",
    "TransportError",
    "Cancelled",
    "WorkflowError",
]
