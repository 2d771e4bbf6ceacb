"""
agentchain - Sequential LLM Agent Workflows
===========================================

Chains language-model agents that reason in turns, call tools and hand
their output to the next agent in a fixed order.

This package provides:
- Agent: a reasoning loop with tools, stop markers and budgets
- SequentialWorkflow: runs agents in order, piping outputs to inputs
- Tool / ToolRegistry: named, schema-described capabilities for agents
- OpenAITransport: the OpenAI chat completions model transport
"""

from agentchain.agent import Agent, AgentConfig, AgentRun, OpenAITransport
from agentchain.errors import (
    AgentChainError,
    ArgumentDecodeError,
    Cancelled,
    ToolCallError,
    ToolError,
    ToolNotFound,
    TransportError,
    WorkflowError,
)
from agentchain.tools import FunctionTool, Tool, ToolDefinition, ToolRegistry, ToolResult
from agentchain.workflow import RunResult, SequentialWorkflow

__version__ = "1.0.0"

__all__ = [
    "Agent",
    "AgentConfig",
    "AgentRun",
    "OpenAITransport",
    "SequentialWorkflow",
    "RunResult",
    "Tool",
    "FunctionTool",
    "ToolDefinition",
    "ToolRegistry",
    "ToolResult",
    "AgentChainError",
    "ToolError",
    "ToolNotFound",
    "ArgumentDecodeError",
    "ToolCallError",
    "TransportError",
    "Cancelled",
    "WorkflowError",
]
