"""Shared knowledge base: agent id -> ordered list of approved entries.

Reads degrade to an empty knowledge base when the backing store fails. Writes are
skipped (and logged) when the current state cannot be read, so a transient read failure
never overwrites entries with an empty mapping.
"""

import logging

import pydantic

from legal_assistant.core.errors import PersistenceError
from legal_assistant.core.kv import BaseKVStore
from legal_assistant.models.knowledge import KnowledgeEntry

logger = logging.getLogger(__name__)

KNOWLEDGE_BASE_KEY = "legal_ai_shared_knowledge_base"

KnowledgeBase = dict[str, list[KnowledgeEntry]]


class KnowledgeBaseStore:
    def __init__(self, kv: BaseKVStore):
        self.kv = kv

    async def _load(self) -> KnowledgeBase:
        data = await self.kv.get(KNOWLEDGE_BASE_KEY) or {}
        try:
            return {
                agent_id: [KnowledgeEntry.model_validate(e) for e in entries]
                for agent_id, entries in data.items()
            }
        except (pydantic.ValidationError, AttributeError, TypeError) as e:
            raise PersistenceError(f"Stored knowledge base is malformed: {e}") from e

    async def _save(self, knowledge_base: KnowledgeBase) -> None:
        await self.kv.set(
            KNOWLEDGE_BASE_KEY,
            {
                agent_id: [e.model_dump(mode="json") for e in entries]
                for agent_id, entries in knowledge_base.items()
            },
        )

    async def get_all(self) -> KnowledgeBase:
        try:
            return await self._load()
        except PersistenceError as e:
            logger.error(f"Failed to read knowledge base: {e}")
            return {}

    async def get_for_agent(self, agent_id: str) -> list[KnowledgeEntry]:
        knowledge_base = await self.get_all()
        return knowledge_base.get(agent_id, [])

    async def upsert(self, entry: KnowledgeEntry) -> None:
        """Insert entry, or replace the one sharing its (agent_id, url) at the same position."""
        try:
            knowledge_base = await self._load()
            entries = knowledge_base.setdefault(entry.agent_id, [])
            for index, existing in enumerate(entries):
                if existing.url == entry.url:
                    entries[index] = entry
                    break
            else:
                entries.append(entry)
            await self._save(knowledge_base)
        except PersistenceError as e:
            logger.error(f"Failed to save knowledge entry for {entry.url}: {e}")

    async def delete(self, agent_id: str, entry_id: str) -> None:
        try:
            knowledge_base = await self._load()
            entries = knowledge_base.get(agent_id)
            if not entries:
                return
            remaining = [e for e in entries if e.id != entry_id]
            if len(remaining) == len(entries):
                return
            knowledge_base[agent_id] = remaining
            await self._save(knowledge_base)
        except PersistenceError as e:
            logger.error(f"Failed to delete knowledge entry {entry_id}: {e}")
