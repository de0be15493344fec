"""Credential store: user identity -> provider API keys and theme preference.

Unlike the knowledge base and history, failures here propagate as PersistenceError so
the caller can tell the user their settings were not saved.
"""

import logging

import pydantic

from legal_assistant.core.errors import CredentialMissingError, PersistenceError, ValidationError
from legal_assistant.core.kv import BaseKVStore
from legal_assistant.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_THEME = "dark"
PROVIDER_LABELS = {
    "gemini": "Gemini",
    "openai": "OpenAI",
    "claude": "Claude",
    "mistral": "Mistral",
}


def _user_key(email: str) -> str:
    return f"legal_ai_user_{email.strip().lower()}"


def credential_missing_message(provider: str) -> str:
    label = PROVIDER_LABELS.get(provider, provider)
    return f"{label} API key not found. Please add your key in Settings to continue."


def mask_key(value: str) -> str:
    if len(value) <= 4:
        return "•" * len(value)
    return "•" * 12 + value[-4:]


class CredentialStore:
    def __init__(self, kv: BaseKVStore):
        self.kv = kv

    async def get(self, email: str) -> User | None:
        data = await self.kv.get(_user_key(email))
        if data is None:
            return None
        try:
            return User.model_validate(data)
        except pydantic.ValidationError as e:
            raise PersistenceError(f"Stored settings for {email} are malformed: {e}") from e

    async def upsert(self, user: User) -> User:
        """Merge user into any stored record. Last writer wins."""
        existing = await self.get(user.email)
        if existing is not None:
            merged = existing.model_copy(
                update={
                    "api_keys": {**existing.api_keys, **user.api_keys},
                    "theme": user.theme or existing.theme,
                }
            )
        else:
            merged = user
        await self.kv.set(_user_key(merged.email), merged.model_dump(mode="json"))
        logger.debug(f"Saved settings for {merged.email}")
        return merged

    async def register(self, email: str) -> User:
        email = email.strip()
        if not email:
            raise ValidationError("Email is required.")
        if await self.get(email) is not None:
            raise ValidationError("User with this email already exists.")
        user = User(email=email, api_keys={}, theme=DEFAULT_THEME)
        await self.kv.set(_user_key(email), user.model_dump(mode="json"))
        logger.info(f"Registered user {email}")
        return user

    async def resolve_api_key(self, email: str, provider: str) -> str:
        """Return the user's credential for provider or raise CredentialMissingError."""
        user = await self.get(email)
        api_key = (user.api_keys.get(provider) or "").strip() if user else ""
        if not api_key:
            raise CredentialMissingError(provider)
        return api_key
