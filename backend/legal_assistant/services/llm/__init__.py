"""Completion provider factory."""

from legal_assistant.core.config import settings
from legal_assistant.services.llm.base import BaseLLMProvider


def get_llm_provider(api_key: str) -> BaseLLMProvider:
    """Factory function that returns the configured provider bound to a user's API key."""
    if settings.llm_provider == "gemini":
        from legal_assistant.services.llm.gemini import GeminiProvider
        return GeminiProvider(api_key=api_key)
    else:
        raise ValueError(f"Unknown LLM provider: {settings.llm_provider}")
