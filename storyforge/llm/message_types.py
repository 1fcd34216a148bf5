"""Synthesis message type definitions."""

from dataclasses import dataclass
from enum import Enum


class MessageRole(str, Enum):
    """Role of a message in a synthesis request."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """A single prompt message.

    Attributes:
        role: Who sent the message.
        content: Text content.
    """

    role: MessageRole
    content: str = ""

    @classmethod
    def system(cls, content: str) -> "Message":
        """Create a system message."""
        return cls(role=MessageRole.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        """Create a user message."""
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        """Create an assistant message."""
        return cls(role=MessageRole.ASSISTANT, content=content)

    def to_dict(self) -> dict[str, str]:
        """Return the wire format shared by both provider SDKs."""
        return {"role": self.role.value, "content": self.content}
