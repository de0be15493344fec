"""Conversation and message records persisted in a user's chat history."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

DEFAULT_TITLE = "New Conversation"
TITLE_MAX_LENGTH = 50


class MessageSender(str, Enum):
    USER = "user"
    AI = "ai"


class Message(BaseModel):
    model_config = {"frozen": True}

    id: int
    text: str
    sender: MessageSender


class Conversation(BaseModel):
    id: str
    agent_id: str
    messages: list[Message] = Field(default_factory=list)
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    title: str = DEFAULT_TITLE


def derive_title(messages: list[Message]) -> str:
    """First user message cut to 50 characters, or the default title."""
    for message in messages:
        if message.sender == MessageSender.USER and message.text:
            return message.text[:TITLE_MAX_LENGTH]
    return DEFAULT_TITLE
