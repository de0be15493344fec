"""Per-user chat history, most recent conversation first."""

import logging
from datetime import datetime

import pydantic

from legal_assistant.core.errors import PersistenceError
from legal_assistant.core.kv import BaseKVStore
from legal_assistant.models.conversation import Conversation

logger = logging.getLogger(__name__)


def _history_key(email: str) -> str:
    return f"chat_history_{email.strip().lower()}"


def _sort_key(conversation: Conversation) -> datetime:
    return datetime.fromisoformat(conversation.timestamp)


class HistoryStore:
    def __init__(self, kv: BaseKVStore):
        self.kv = kv

    async def _load(self, email: str) -> list[Conversation]:
        data = await self.kv.get(_history_key(email)) or []
        try:
            history = [Conversation.model_validate(c) for c in data]
            history.sort(key=_sort_key, reverse=True)
        except (pydantic.ValidationError, ValueError, TypeError) as e:
            raise PersistenceError(f"Stored chat history for {email} is malformed: {e}") from e
        return history

    async def _save(self, email: str, history: list[Conversation]) -> None:
        await self.kv.set(_history_key(email), [c.model_dump(mode="json") for c in history])

    async def get_history(self, email: str) -> list[Conversation]:
        if not email:
            return []
        try:
            return await self._load(email)
        except PersistenceError as e:
            logger.error(f"Failed to get chat history for {email}: {e}")
            return []

    async def get_conversation(self, email: str, conversation_id: str) -> Conversation | None:
        for conversation in await self.get_history(email):
            if conversation.id == conversation_id:
                return conversation
        return None

    async def save_conversation(self, email: str, conversation: Conversation) -> None:
        """Replace the conversation with the same id, else insert it at the head."""
        if not email:
            return
        try:
            history = await self._load(email)
            for index, existing in enumerate(history):
                if existing.id == conversation.id:
                    history[index] = conversation
                    break
            else:
                history.insert(0, conversation)
            await self._save(email, history)
        except PersistenceError as e:
            logger.error(f"Failed to save conversation {conversation.id} for {email}: {e}")

    async def delete_conversation(self, email: str, conversation_id: str) -> None:
        if not email:
            return
        try:
            history = await self._load(email)
            await self._save(email, [c for c in history if c.id != conversation_id])
        except PersistenceError as e:
            logger.error(f"Failed to delete conversation {conversation_id} for {email}: {e}")
