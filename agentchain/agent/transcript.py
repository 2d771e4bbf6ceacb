"""
Transcript
==========

The ordered message history an agent accumulates during one run.

A transcript starts with the system prompt and the task, then grows by
one assistant message per model turn and one tool message per tool call.
It is append-only: messages are never edited or removed, and readers get
an immutable tuple snapshot.

Each agent run owns a fresh Transcript; transcripts are never shared
between agents.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterator

SYSTEM = "system"
USER = "user"
ASSISTANT = "assistant"
TOOL = "tool"

ROLES = (SYSTEM, USER, ASSISTANT, TOOL)


@dataclass(frozen=True)
class ToolCallRequest:
    """
    A tool call the model asked for.

    Attributes:
        id: Provider-assigned call ID, echoed back on the tool message
        name: The requested tool name
        arguments: The raw argument payload (usually JSON text)
    """
    id: str
    name: str
    arguments: Any = ""


@dataclass(frozen=True)
class Message:
    """
    A single message in the transcript.

    Attributes:
        role: "system", "user", "assistant" or "tool"
        content: The message text
        name: Persona label for user messages
        tool_call_id: For tool messages, the call this result answers
        tool_calls: For assistant messages, the calls the model requested
        timestamp: When the message was appended
    """
    role: str
    content: str
    name: str | None = None
    tool_call_id: str | None = None
    tool_calls: tuple[ToolCallRequest, ...] = ()
    timestamp: datetime = field(default_factory=datetime.now, compare=False)

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Unknown message role: {self.role!r}")
        if self.role == TOOL and not self.tool_call_id:
            raise ValueError("Tool messages need a tool_call_id")


class Transcript:
    """
    Append-only message history.

    Example:
        transcript = Transcript.seed("You solve math problems.", "2 + 2")
        transcript.append(Message(role="assistant", content="4"))

        for message in transcript:
            print(message.role, message.content)
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []

    @classmethod
    def seed(cls, system_prompt: str, task: str, user_name: str | None = None) -> "Transcript":
        """Create a transcript holding the system prompt and the task."""
        transcript = cls()
        transcript.append(Message(role=SYSTEM, content=system_prompt))
        transcript.append(Message(role=USER, content=task, name=user_name or None))
        return transcript

    def append(self, message: Message) -> None:
        """Add a message to the end of the transcript."""
        self._messages.append(message)

    def extend(self, messages: list[Message]) -> None:
        """Add several messages, keeping their order."""
        for message in messages:
            self.append(message)

    @property
    def messages(self) -> tuple[Message, ...]:
        """A snapshot of all messages."""
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))
