"""Knowledge base records: approved, structured summaries of legal sources."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class Clause(BaseModel):
    title: str
    text: str


class KnowledgeEntryContent(BaseModel):
    """Structured output of the ingestion completion call. Also used as its response schema."""

    summary: str
    key_concepts: list[str]
    relevant_clauses: list[Clause]


class KnowledgeEntry(BaseModel):
    id: str
    agent_id: str
    url: str
    content: KnowledgeEntryContent
    approved_by: str
    approved_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
