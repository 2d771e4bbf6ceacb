"""
Tools System
============

Tools are named capabilities an agent's model can ask to run mid-reasoning.

- Each tool has a name, a description and a JSON-Schema parameter object
- The model decides which tools to call based on those definitions
- The registry decodes the raw arguments, runs the tool and returns a
  ToolResult that is fed back to the model as a tool message

How a call flows:
1. The model answers with one or more tool-call requests (name + raw JSON)
2. ToolRegistry.dispatch() looks the tool up by name
3. The raw JSON is decoded into the tool's pydantic args model
4. Tool.call() runs with the decoded args
5. Success or failure is wrapped in a ToolResult, never raised

This module provides:
- ToolDefinition: the schema published to the model
- Tool: abstract base class for tools
- FunctionTool: adapter for plain functions
- ToolResult: standardized result of a dispatch
- ToolRegistry: per-agent name → tool mapping and dispatcher
"""

import asyncio
import copy
import inspect
import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, ClassVar

from pydantic import BaseModel, ValidationError

from agentchain.errors import (
    ArgumentDecodeError,
    ToolCallError,
    ToolError,
    ToolNotFound,
)
from agentchain.utils.logger import Logger

logger = Logger("Tools")


@dataclass(frozen=True)
class ToolDefinition:
    """
    The schema a model sees for one tool.

    Attributes:
        name: Unique name within an agent's registry
        description: What the tool does (shown to the model)
        parameters: JSON Schema object with properties and a required list
    """
    name: str
    description: str
    parameters: dict = field(default_factory=dict)

    def to_openai_function(self) -> dict:
        """
        Convert to OpenAI function calling format.

        The parameters are copied so callers cannot mutate the published schema.
        """
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": copy.deepcopy(self.parameters)
            }
        }


def schema_from_model(model: type[BaseModel]) -> dict:
    """
    Build a tool parameter schema from a pydantic model.

    Pydantic adds "title" keys everywhere; they are noise for the model,
    so they are dropped from the object and its properties.
    """
    schema = model.model_json_schema()
    schema.pop("title", None)
    for prop in schema.get("properties", {}).values():
        if isinstance(prop, dict):
            prop.pop("title", None)
    schema.setdefault("type", "object")
    schema.setdefault("properties", {})
    schema.setdefault("required", [])
    return schema


@dataclass
class ToolResult:
    """
    Result of dispatching one tool call.

    Attributes:
        tool_name: The tool the model asked for
        success: Whether the tool produced an output
        output: The tool's output, unchanged
        error: The ToolError when success is False
    """
    tool_name: str
    success: bool
    output: Any = None
    error: ToolError | None = None

    def to_message(self) -> str:
        """Format the result as tool message content for the model."""
        if not self.success:
            return f"Error: {self.error}"
        if isinstance(self.output, str):
            return self.output
        return json.dumps(self.output, default=str)


class Tool(ABC):
    """
    Base class for tools.

    Subclasses set ``name``, ``description`` and ``args_model`` and
    implement ``call``. ``parameters`` may be given explicitly; otherwise
    it is derived from ``args_model``.

    A tool instance may be called concurrently when the model requests
    several calls in one turn, so ``call`` must not mutate shared state
    without its own locking.

    Example:
        class EchoArgs(BaseModel):
            text: str

        class EchoTool(Tool):
            name = "echo"
            description = "Repeat the given text"
            args_model = EchoArgs

            async def call(self, args: EchoArgs) -> str:
                return args.text
    """

    name: ClassVar[str]
    description: ClassVar[str]
    args_model: ClassVar[type[BaseModel]]
    parameters: ClassVar[dict | None] = None

    def definition(self) -> ToolDefinition:
        """Return the schema published to the model. Pure."""
        parameters = self.parameters
        if parameters is None:
            parameters = schema_from_model(self.args_model)
        return ToolDefinition(
            name=self.name,
            description=self.description,
            parameters=copy.deepcopy(parameters)
        )

    @abstractmethod
    async def call(self, args: BaseModel) -> Any:
        """
        Run the tool with decoded arguments.

        Raise any exception to signal failure; the dispatcher reports it
        to the model as a ToolCallError.
        """


class FunctionTool(Tool):
    """
    A tool backed by a plain function.

    The function receives the decoded args model. Async functions are
    awaited; sync functions run in a worker thread so they do not block
    other tool calls of the same turn.

    Example:
        def add(args: AddArgs) -> int:
            return args.a + args.b

        tool = FunctionTool("add", "Add two integers", AddArgs, add)
    """

    def __init__(
        self,
        name: str,
        description: str,
        args_model: type[BaseModel],
        func: Callable[[Any], Any | Awaitable[Any]],
        parameters: dict | None = None
    ):
        # Instance attributes shadow the class-level declarations
        self.name = name
        self.description = description
        self.args_model = args_model
        self.parameters = parameters
        self._func = func

    async def call(self, args: BaseModel) -> Any:
        if inspect.iscoroutinefunction(self._func):
            return await self._func(args)
        return await asyncio.to_thread(self._func, args)

    def __repr__(self) -> str:
        return f"FunctionTool(name={self.name!r})"


class ToolRegistry:
    """
    Name → tool mapping owned by a single agent.

    Registering a second tool with an existing name raises ValueError.

    Example:
        registry = ToolRegistry([CalculateTool()])

        definitions = registry.definitions()
        result = await registry.dispatch("calculate_tool", '{"expression": "2 + 2"}')
        print(result.to_message())  # "4"
    """

    def __init__(self, tools: list[Tool] | tuple[Tool, ...] = ()):
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        """
        Register a tool.

        Raises:
            ValueError: If a tool with this name already exists
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")

        self._tools[tool.name] = tool
        logger.debug(f"Registered tool: {tool.name}")

    def get(self, name: str) -> Tool | None:
        """Get a tool by name, or None if not found."""
        return self._tools.get(name)

    def list_names(self) -> list[str]:
        """Get the registered tool names in registration order."""
        return list(self._tools.keys())

    def definitions(self) -> list[ToolDefinition]:
        """Get the definitions of all registered tools."""
        return [tool.definition() for tool in self._tools.values()]

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def decode(self, tool: Tool, raw_args: Any) -> BaseModel:
        """
        Decode a raw argument payload into the tool's args model.

        Args:
            tool: The resolved tool
            raw_args: JSON text, a mapping, or None

        Raises:
            ArgumentDecodeError: If the payload is not valid JSON or does
                not match the tool's schema
        """
        payload = raw_args
        if payload is None:
            payload = {}
        elif isinstance(payload, (str, bytes)):
            try:
                text = payload.decode() if isinstance(payload, bytes) else payload
            except UnicodeDecodeError as e:
                raise ArgumentDecodeError(
                    tool.name, f"arguments are not valid UTF-8 ({e.reason})", raw_args
                ) from e
            if not text.strip():
                payload = {}
            else:
                try:
                    payload = json.loads(text)
                except json.JSONDecodeError as e:
                    raise ArgumentDecodeError(
                        tool.name, f"arguments are not valid JSON ({e.msg})", raw_args
                    ) from e

        if not isinstance(payload, Mapping):
            raise ArgumentDecodeError(
                tool.name,
                f"arguments must be a JSON object, got {type(payload).__name__}",
                raw_args
            )

        try:
            return tool.args_model.model_validate(dict(payload))
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
                for err in e.errors()
            )
            raise ArgumentDecodeError(tool.name, problems, raw_args) from e

    async def dispatch(self, name: str, raw_args: Any) -> ToolResult:
        """
        Resolve, decode and run one tool call.

        Never raises for tool-level problems; they are reported on the
        returned ToolResult as ToolNotFound, ArgumentDecodeError or
        ToolCallError.
        """
        tool = self.get(name)
        if tool is None:
            logger.warning(f"Model requested unknown tool: {name}")
            return ToolResult(
                tool_name=name,
                success=False,
                error=ToolNotFound(name, self.list_names())
            )

        try:
            args = self.decode(tool, raw_args)
        except ArgumentDecodeError as e:
            logger.warning(f"Rejected arguments for {name}: {e.detail}")
            return ToolResult(tool_name=name, success=False, error=e)

        try:
            output = await tool.call(args)
        except Exception as e:
            logger.error(f"Tool execution failed: {name}", e)
            return ToolResult(
                tool_name=name,
                success=False,
                error=ToolCallError(name, e)
            )

        return ToolResult(tool_name=name, success=True, output=output)


__all__ = [
    "ToolDefinition",
    "Tool",
    "FunctionTool",
    "ToolResult",
    "ToolRegistry",
    "schema_from_model",
]
