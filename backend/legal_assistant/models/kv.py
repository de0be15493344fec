"""Key-value record backing every persisted blob (users, knowledge base, chat history)."""

from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


class KVRecord(SQLModel, table=True):
    key: str = Field(primary_key=True)
    value: str  # JSON-encoded blob
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
