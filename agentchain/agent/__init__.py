"""
Agent System
============

An agent:
1. Receives a task
2. Seeds a fresh transcript with its system prompt and the task
3. Asks the model for the next turn
4. Runs the tools the model requests
5. Stops on a stop marker or when its budget runs out

This module provides:
- Agent / AgentConfig / AgentRun: the reasoning loop and its configuration
- Transcript / Message: the per-run message history
- ModelTransport / OpenAITransport: the model boundary
- ToolExecutor: concurrent dispatch of one turn's tool calls
"""

from agentchain.agent.core import Agent, AgentConfig, AgentRun, AgentState
from agentchain.agent.tools_executor import ToolExecutor, ToolCallResult
from agentchain.agent.transcript import Message, ToolCallRequest, Transcript
from agentchain.agent.transport import (
    ModelResponse,
    ModelTransport,
    OpenAITransport,
    SamplingParams,
)

__all__ = [
    "Agent",
    "AgentConfig",
    "AgentRun",
    "AgentState",
    "ToolExecutor",
    "ToolCallResult",
    "Message",
    "ToolCallRequest",
    "Transcript",
    "ModelResponse",
    "ModelTransport",
    "OpenAITransport",
    "SamplingParams",
]
