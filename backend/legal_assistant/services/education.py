"""Agent education: turn a URL or uploaded file into an approved knowledge entry.

A workflow tracks one submission at a time. Processing asks the completion service for
a schema-constrained summary which is held as an in-memory preview; only approve()
writes to the shared knowledge base.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Callable

import pydantic

from legal_assistant.core.errors import (
    CompletionServiceError,
    CredentialMissingError,
    PersistenceError,
    ValidationError,
)
from legal_assistant.models.agent import get_agent
from legal_assistant.models.knowledge import KnowledgeEntry, KnowledgeEntryContent
from legal_assistant.services.credentials import CredentialStore, credential_missing_message
from legal_assistant.services.knowledge_base import KnowledgeBaseStore
from legal_assistant.services.llm.base import BaseLLMProvider
from legal_assistant.services.prompts import build_ingestion_request

logger = logging.getLogger(__name__)

NOTICE_TTL_SECONDS = 3.0
PROCESSING_ERROR_TEXT = "Failed to process the document. Please try again."
SETTINGS_UNAVAILABLE_TEXT = "Your settings could not be loaded right now. Please try again shortly."


class IngestionStatus(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class SubmissionItem:
    name: str  # What the user submitted: a URL or a file name
    source: str  # Locator stored on the entry: the URL, or file://<name>
    kind: str  # "url" | "file"


class IngestionWorkflow:
    def __init__(
        self,
        user_email: str,
        credentials: CredentialStore,
        knowledge_base: KnowledgeBaseStore,
        provider_factory: Callable[[str], BaseLLMProvider],
        agent_id: str | None = None,
    ):
        self.user_email = user_email
        self.credentials = credentials
        self.knowledge_base = knowledge_base
        self.provider_factory = provider_factory

        self.agent_id = get_agent(agent_id).id
        self.status = IngestionStatus.IDLE
        self.current: SubmissionItem | None = None
        self.preview: KnowledgeEntryContent | None = None
        self.error: str | None = None
        self.knowledge: list[KnowledgeEntry] = []
        self._notice: str | None = None
        self._notice_expires = 0.0
        self._submission = 0

    @property
    def can_approve(self) -> bool:
        return (
            self.status is IngestionStatus.COMPLETED
            and self.current is not None
            and self.preview is not None
            and self.error is None
        )

    @property
    def notice(self) -> str | None:
        if self._notice and time.monotonic() < self._notice_expires:
            return self._notice
        return None

    def _set_notice(self, text: str) -> None:
        self._notice = text
        self._notice_expires = time.monotonic() + NOTICE_TTL_SECONDS

    async def select_agent(self, agent_id: str) -> list[KnowledgeEntry]:
        self.agent_id = get_agent(agent_id).id
        return await self.load_knowledge()

    async def load_knowledge(self) -> list[KnowledgeEntry]:
        self.knowledge = await self.knowledge_base.get_for_agent(self.agent_id)
        return self.knowledge

    async def process_url(self, url: str) -> IngestionStatus:
        url = (url or "").strip()
        if not url:
            raise ValidationError("Please enter a URL to process.")
        return await self._process(SubmissionItem(name=url, source=url, kind="url"), prompt_source=url)

    async def process_file(self, filename: str) -> IngestionStatus:
        """Process an upload. Only the file name is used; its bytes are never read."""
        filename = (filename or "").strip()
        if not filename:
            raise ValidationError("Please choose a file to upload.")
        item = SubmissionItem(name=filename, source=f"file://{filename}", kind="file")
        return await self._process(item, prompt_source=filename)

    async def _process(self, item: SubmissionItem, prompt_source: str) -> IngestionStatus:
        self._submission += 1
        submission = self._submission
        self.current = item
        self.preview = None
        self.error = None
        self.status = IngestionStatus.PROCESSING
        logger.info(f"Processing {item.kind} '{item.name}' for agent {self.agent_id}")

        preview: KnowledgeEntryContent | None = None
        error: str | None = None
        try:
            preview = await self._analyse(prompt_source)
        except CredentialMissingError as e:
            error = credential_missing_message(e.provider)
        except PersistenceError as e:
            logger.error(f"Could not read credentials for {self.user_email}: {e}")
            error = SETTINGS_UNAVAILABLE_TEXT
        except CompletionServiceError as e:
            logger.error(f"Processing '{item.name}' failed: {e}")
            error = str(e) or PROCESSING_ERROR_TEXT
        except Exception:
            logger.exception(f"Unexpected error while processing '{item.name}'")
            error = PROCESSING_ERROR_TEXT

        if submission != self._submission:
            logger.info(f"Discarding result for superseded submission '{item.name}'")
            return self.status

        if error is not None:
            self.error = error
            self.status = IngestionStatus.FAILED
        else:
            self.preview = preview
            self.status = IngestionStatus.COMPLETED
        return self.status

    async def _analyse(self, source: str) -> KnowledgeEntryContent:
        provider_name = get_agent(self.agent_id).provider
        api_key = await self.credentials.resolve_api_key(self.user_email, provider_name)
        response = await self.provider_factory(api_key).run(build_ingestion_request(source))
        try:
            return KnowledgeEntryContent.model_validate_json(response.text)
        except pydantic.ValidationError as e:
            raise CompletionServiceError(
                "The AI model returned a summary that did not match the expected format."
            ) from e

    async def approve(self, approver_email: str) -> KnowledgeEntry:
        if not self.can_approve:
            raise ValidationError("There is no processed document ready for approval.")

        item = self.current
        entry = KnowledgeEntry(
            id=str(uuid.uuid4()),
            agent_id=self.agent_id,
            url=item.source,
            content=self.preview,
            approved_by=approver_email,
        )
        await self.knowledge_base.upsert(entry)

        for index, existing in enumerate(self.knowledge):
            if existing.url == entry.url:
                self.knowledge[index] = entry
                break
        else:
            self.knowledge.append(entry)

        self._clear()
        agent = get_agent(self.agent_id)
        self._set_notice(f"'{item.name}' was approved and added to the {agent.name} knowledge base.")
        logger.info(f"{approver_email} approved '{entry.url}' for agent {entry.agent_id}")
        return entry

    def reject(self) -> None:
        if self.current is not None:
            logger.info(f"Rejected preview of '{self.current.name}'")
        self._clear()

    def _clear(self) -> None:
        self._submission += 1
        self.current = None
        self.preview = None
        self.error = None
        self.status = IngestionStatus.IDLE

    async def delete_entry(self, entry_id: str) -> None:
        await self.knowledge_base.delete(self.agent_id, entry_id)
        self.knowledge = [e for e in self.knowledge if e.id != entry_id]

    def snapshot(self) -> dict:
        if self.error is not None:
            preview = {"error": self.error}
        elif self.preview is not None:
            preview = self.preview.model_dump(mode="json")
        else:
            preview = None
        return {
            "agent_id": self.agent_id,
            "status": self.status.value,
            "current": (
                {"name": self.current.name, "source": self.current.source, "kind": self.current.kind}
                if self.current
                else None
            ),
            "preview": preview,
            "can_approve": self.can_approve,
            "notice": self.notice,
            "knowledge": [e.model_dump(mode="json") for e in self.knowledge],
        }
