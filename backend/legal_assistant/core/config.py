from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "AI Legal Assistant"
    debug: bool = False

    # Persistence
    db_path: Path = Path(__file__).resolve().parent.parent.parent / "legal_assistant.db"
    kv_backend: str = "sqlite"  # sqlite | memory

    # LLM
    llm_provider: str = "gemini"  # gemini
    gemini_model: str = "gemini-2.5-flash"
    completion_timeout: float = 60.0

    # Agents
    default_agent_id: str = "rental"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["*"]

    model_config = {
        "env_file": str(Path(__file__).resolve().parent.parent.parent / ".env"),
        "env_prefix": "LEGAL_ASSISTANT_",
    }


settings = Settings()
