from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from legal_assistant.api.dependencies import get_services, get_user_email
from legal_assistant.models.agent import get_agent
from legal_assistant.models.conversation import Message
from legal_assistant.services.container import Services

router = APIRouter()


class ExportRequest(BaseModel):
    format: Literal["transcript", "letter", "email"] = "transcript"
    agent_id: str | None = None
    messages: list[Message] | None = None
    conversation_id: str | None = None  # Export a saved conversation instead of inline messages


@router.post("/")
async def export_conversation(
    body: ExportRequest,
    user_email: str = Depends(get_user_email),
    services: Services = Depends(get_services),
):
    messages = body.messages
    agent_id = body.agent_id
    if body.conversation_id:
        conv = await services.history.get_conversation(user_email, body.conversation_id)
        if not conv:
            raise HTTPException(status_code=404, detail="Conversation not found")
        messages = conv.messages
        agent_id = agent_id or conv.agent_id

    if not messages:
        raise HTTPException(status_code=400, detail="Nothing to export")

    result = await services.exporter.export(user_email, messages, get_agent(agent_id), body.format)
    return {"format": result.format, "content": result.content, "file_name": result.file_name}
