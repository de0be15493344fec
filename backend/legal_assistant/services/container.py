"""Composition root: the stores and services built once at start-up and shared by routers."""

from dataclasses import dataclass, field
from typing import Callable

from legal_assistant.core.config import settings
from legal_assistant.core.kv import BaseKVStore, MemoryKVStore, SQLiteKVStore
from legal_assistant.models.agent import Agent
from legal_assistant.services.credentials import CredentialStore
from legal_assistant.services.education import IngestionWorkflow
from legal_assistant.services.exporter import ConversationExporter
from legal_assistant.services.history import HistoryStore
from legal_assistant.services.knowledge_base import KnowledgeBaseStore
from legal_assistant.services.llm import get_llm_provider
from legal_assistant.services.llm.base import BaseLLMProvider
from legal_assistant.services.session import ConversationSession

ProviderFactory = Callable[[str], BaseLLMProvider]


@dataclass
class Services:
    kv: BaseKVStore
    credentials: CredentialStore
    knowledge_base: KnowledgeBaseStore
    history: HistoryStore
    exporter: ConversationExporter
    provider_factory: ProviderFactory
    workflows: dict[str, IngestionWorkflow] = field(default_factory=dict)

    def workflow_for(self, user_email: str) -> IngestionWorkflow:
        """The user's ingestion workflow, created on first use."""
        workflow = self.workflows.get(user_email)
        if workflow is None:
            workflow = IngestionWorkflow(
                user_email, self.credentials, self.knowledge_base, self.provider_factory
            )
            self.workflows[user_email] = workflow
        return workflow

    def new_session(self, user_email: str, agent: Agent | None = None) -> ConversationSession:
        return ConversationSession(
            user_email,
            self.credentials,
            self.history,
            self.knowledge_base,
            self.provider_factory,
            agent=agent,
        )


def build_services(
    kv: BaseKVStore | None = None, provider_factory: ProviderFactory | None = None
) -> Services:
    if kv is None:
        if settings.kv_backend == "memory":
            kv = MemoryKVStore()
        else:
            from legal_assistant.core.database import engine
            kv = SQLiteKVStore(engine)
    provider_factory = provider_factory or get_llm_provider
    credentials = CredentialStore(kv)
    return Services(
        kv=kv,
        credentials=credentials,
        knowledge_base=KnowledgeBaseStore(kv),
        history=HistoryStore(kv),
        exporter=ConversationExporter(credentials, provider_factory),
        provider_factory=provider_factory,
    )
