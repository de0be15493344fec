"""REST API for chat history management."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from legal_assistant.api.dependencies import get_services, get_user_email
from legal_assistant.services.container import Services

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/")
async def list_conversations(
    user_email: str = Depends(get_user_email), services: Services = Depends(get_services)
):
    history = await services.history.get_history(user_email)
    return [
        {
            "id": c.id,
            "agent_id": c.agent_id,
            "title": c.title,
            "timestamp": c.timestamp,
        }
        for c in history
    ]


@router.get("/{conversation_id}")
async def get_conversation(
    conversation_id: str,
    user_email: str = Depends(get_user_email),
    services: Services = Depends(get_services),
):
    conv = await services.history.get_conversation(user_email, conversation_id)
    if not conv:
        logger.debug(f"Conversation {conversation_id} not found")
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conv.model_dump(mode="json")


@router.delete("/{conversation_id}")
async def delete_conversation(
    conversation_id: str,
    user_email: str = Depends(get_user_email),
    services: Services = Depends(get_services),
):
    conv = await services.history.get_conversation(user_email, conversation_id)
    if not conv:
        logger.debug(f"Delete: conversation {conversation_id} not found")
        raise HTTPException(status_code=404, detail="Conversation not found")

    await services.history.delete_conversation(user_email, conversation_id)
    logger.debug(f"Deleted conversation {conversation_id}")
    return {"status": "deleted"}
