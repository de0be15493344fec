"""Conversation session controller.

One ConversationSession holds the chat a user is looking at: the active agent, the
message list, and the id of the stored conversation it belongs to. A turn moves the
session IDLE -> SENDING -> IDLE; while SENDING further sends are ignored so at most one
completion call is in flight per session.
"""

import logging
import time
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from legal_assistant.core.errors import CompletionServiceError, CredentialMissingError, PersistenceError
from legal_assistant.models.agent import Agent, get_agent
from legal_assistant.models.conversation import Conversation, Message, MessageSender, derive_title
from legal_assistant.services.credentials import CredentialStore, credential_missing_message
from legal_assistant.services.history import HistoryStore
from legal_assistant.services.knowledge_base import KnowledgeBaseStore
from legal_assistant.services.llm.base import BaseLLMProvider
from legal_assistant.services.prompts import build_chat_request

logger = logging.getLogger(__name__)

GENERIC_ERROR_TEXT = "Sorry, I encountered an error. Please try again."
SETTINGS_UNAVAILABLE_TEXT = "Your settings could not be loaded right now. Please try again shortly."


class SessionState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"


class Panel(str, Enum):
    DASHBOARD = "dashboard"
    EDUCATION = "education"
    CHAT = "chat"


def welcome_text(agent: Agent) -> str:
    return (
        f"Welcome to the {agent.name}. How can I assist you with your "
        f"{agent.short_name.lower()}-related legal questions today?"
    )


def _now_ms() -> int:
    return int(time.time() * 1000)


class ConversationSession:
    def __init__(
        self,
        user_email: str,
        credentials: CredentialStore,
        history: HistoryStore,
        knowledge_base: KnowledgeBaseStore,
        provider_factory: Callable[[str], BaseLLMProvider],
        agent: Agent | None = None,
    ):
        self.user_email = user_email
        self.credentials = credentials
        self.history = history
        self.knowledge_base = knowledge_base
        self.provider_factory = provider_factory

        self.state = SessionState.IDLE
        self.active_panel = Panel.CHAT
        self.agent = agent or get_agent(None)
        self.messages: list[Message] = []
        self.conversation_id: str | None = None
        self._last_message_id = 0
        # Bumped whenever the message list is swapped out; replies for an older chat are dropped
        self._epoch = 0

        self.new_chat(self.agent)

    @property
    def is_busy(self) -> bool:
        return self.state is SessionState.SENDING

    def _next_message_id(self) -> int:
        self._last_message_id = max(_now_ms(), self._last_message_id + 1)
        return self._last_message_id

    def _append(self, text: str, sender: MessageSender) -> Message:
        message = Message(id=self._next_message_id(), text=text, sender=sender)
        self.messages.append(message)
        return message

    def new_chat(self, agent: Agent | None = None) -> None:
        """Start an unsaved chat seeded with the agent's welcome message."""
        if agent is not None:
            self.agent = agent
        self._epoch += 1
        self.conversation_id = None
        self.messages = []
        self._append(welcome_text(self.agent), MessageSender.AI)

    def show_panel(self, panel: Panel) -> None:
        self.active_panel = panel

    def select_agent(self, agent: Agent) -> None:
        self.agent = agent
        self.active_panel = Panel.CHAT
        self.new_chat(agent)

    def select_conversation(self, conversation: Conversation) -> None:
        """Resume a stored conversation verbatim."""
        self._epoch += 1
        self.agent = get_agent(conversation.agent_id)
        self.messages = list(conversation.messages)
        self.conversation_id = conversation.id
        self.active_panel = Panel.CHAT
        self._last_message_id = max((m.id for m in self.messages), default=0)

    async def send_message(self, text: str) -> Message | None:
        """Run one chat turn. Returns the AI message appended, or None if the send was ignored."""
        if not text or not text.strip():
            logger.debug("Ignoring blank message")
            return None
        if self.is_busy:
            logger.info(f"Ignoring send from {self.user_email}: a reply is already pending")
            return None

        self._append(text, MessageSender.USER)
        self.state = SessionState.SENDING
        epoch = self._epoch
        agent = self.agent
        try:
            try:
                api_key = await self.credentials.resolve_api_key(self.user_email, agent.provider)
            except CredentialMissingError as e:
                logger.info(f"No {e.provider} credential for {self.user_email}")
                return self._append(credential_missing_message(e.provider), MessageSender.AI)
            except PersistenceError as e:
                logger.error(f"Could not read credentials for {self.user_email}: {e}")
                return self._append(SETTINGS_UNAVAILABLE_TEXT, MessageSender.AI)

            reply = await self._complete(api_key, text, agent)
            if epoch != self._epoch:
                logger.info(f"Discarding reply for a chat that is no longer active ({agent.id})")
                return None

            ai_message = self._append(reply, MessageSender.AI)
            await self._persist()
            return ai_message
        finally:
            self.state = SessionState.IDLE

    async def _complete(self, api_key: str, text: str, agent: Agent) -> str:
        entries = await self.knowledge_base.get_for_agent(agent.id)
        request = build_chat_request(text, agent.id, entries)
        try:
            response = await self.provider_factory(api_key).run(request)
            return response.text
        except CompletionServiceError as e:
            logger.error(f"Completion failed for agent {agent.id}: {e}")
            return str(e) or GENERIC_ERROR_TEXT
        except Exception:
            logger.exception(f"Unexpected error while completing for agent {agent.id}")
            return GENERIC_ERROR_TEXT

    async def _persist(self) -> None:
        if self.conversation_id is None:
            self.conversation_id = f"conv-{_now_ms()}-{uuid.uuid4().hex[:8]}"
        conversation = Conversation(
            id=self.conversation_id,
            agent_id=self.agent.id,
            messages=list(self.messages),
            timestamp=datetime.now(timezone.utc).isoformat(),
            title=derive_title(self.messages),
        )
        await self.history.save_conversation(self.user_email, conversation)

    def snapshot(self) -> dict:
        return {
            "agent_id": self.agent.id,
            "conversation_id": self.conversation_id,
            "state": self.state.value,
            "active_panel": self.active_panel.value,
            "messages": [m.model_dump(mode="json") for m in self.messages],
        }
