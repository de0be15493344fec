"""REST API for user registration and settings (provider API keys, theme)."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from legal_assistant.api.dependencies import get_services, get_user_email
from legal_assistant.core.errors import PersistenceError, ValidationError
from legal_assistant.models.user import User
from legal_assistant.services.container import Services
from legal_assistant.services.credentials import mask_key

router = APIRouter()
logger = logging.getLogger(__name__)


class RegisterRequest(BaseModel):
    email: str


class SettingsUpdate(BaseModel):
    api_keys: dict[str, str] | None = None
    theme: str | None = None


def _public_user(user: User) -> dict:
    return {
        "email": user.email,
        "api_keys": {provider: mask_key(key) for provider, key in user.api_keys.items() if key},
        "theme": user.theme,
    }


@router.post("/register")
async def register(body: RegisterRequest, services: Services = Depends(get_services)):
    try:
        user = await services.credentials.register(body.email)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        logger.error(f"Registration failed: {e}")
        raise HTTPException(status_code=503, detail="Could not save your account. Please try again.")
    return _public_user(user)


@router.get("/me")
async def get_me(
    user_email: str = Depends(get_user_email), services: Services = Depends(get_services)
):
    try:
        user = await services.credentials.get(user_email)
    except PersistenceError as e:
        logger.error(f"Settings read failed for {user_email}: {e}")
        raise HTTPException(status_code=503, detail="Could not load your settings. Please try again.")
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return _public_user(user)


@router.patch("/me")
async def update_settings(
    body: SettingsUpdate,
    user_email: str = Depends(get_user_email),
    services: Services = Depends(get_services),
):
    if body.theme is not None and body.theme not in ("dark", "light"):
        raise HTTPException(status_code=400, detail="Theme must be 'dark' or 'light'")

    try:
        existing = await services.credentials.get(user_email)
        if not existing:
            raise HTTPException(status_code=404, detail="User not found")
        user = await services.credentials.upsert(
            User(email=user_email, api_keys=body.api_keys or {}, theme=body.theme)
        )
    except PersistenceError as e:
        logger.error(f"Settings update failed for {user_email}: {e}")
        raise HTTPException(status_code=503, detail="Could not save your settings. Please try again.")
    return _public_user(user)
