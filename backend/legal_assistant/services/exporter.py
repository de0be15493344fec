"""Conversation export: plain transcript, or a letter/email drafted by the completion service."""

import logging
from dataclasses import dataclass
from typing import Callable

from legal_assistant.core.errors import CompletionServiceError, CredentialMissingError, ValidationError
from legal_assistant.models.agent import Agent
from legal_assistant.models.conversation import Message
from legal_assistant.services.credentials import CredentialStore, credential_missing_message
from legal_assistant.services.llm.base import BaseLLMProvider
from legal_assistant.services.prompts import build_export_request, format_transcript

logger = logging.getLogger(__name__)

EXPORT_ERROR_TEXT = "Sorry, there was an error generating the document. Please try again."

EXPORT_FILE_NAMES = {
    "transcript": "conversation-export.txt",
    "letter": "letter-draft.txt",
    "email": "email-draft.txt",
}


@dataclass
class ExportResult:
    format: str
    content: str
    file_name: str


class ConversationExporter:
    def __init__(self, credentials: CredentialStore, provider_factory: Callable[[str], BaseLLMProvider]):
        self.credentials = credentials
        self.provider_factory = provider_factory

    async def export(
        self, user_email: str, messages: list[Message], agent: Agent, export_format: str
    ) -> ExportResult:
        if export_format not in EXPORT_FILE_NAMES:
            raise ValidationError(f"Unsupported export format: {export_format}")

        transcript = format_transcript(messages, agent.name)
        if export_format == "transcript":
            content = transcript
        else:
            content = await self._draft(user_email, transcript, export_format, agent)
        return ExportResult(format=export_format, content=content, file_name=EXPORT_FILE_NAMES[export_format])

    async def _draft(self, user_email: str, transcript: str, export_format: str, agent: Agent) -> str:
        try:
            api_key = await self.credentials.resolve_api_key(user_email, agent.provider)
            response = await self.provider_factory(api_key).run(
                build_export_request(transcript, export_format, agent.name)
            )
            return response.text
        except CredentialMissingError as e:
            return credential_missing_message(e.provider)
        except CompletionServiceError as e:
            logger.error(f"Export as {export_format} failed: {e}")
            return EXPORT_ERROR_TEXT
        except Exception:
            logger.exception(f"Unexpected error exporting as {export_format}")
            return EXPORT_ERROR_TEXT
