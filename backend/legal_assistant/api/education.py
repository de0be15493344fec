"""Agent education API - submit sources, preview their structured summary, approve or reject.

Flow:
1. Client picks the target agent (POST /agent) and submits a URL or uploads a file
2. The server asks the completion service for a schema-constrained summary (preview)
3. Client approves (entry lands in the shared knowledge base) or rejects the preview
"""

from fastapi import APIRouter, Depends, Form, HTTPException, UploadFile
from pydantic import BaseModel

from legal_assistant.api.dependencies import get_services, get_user_email
from legal_assistant.core.errors import ValidationError
from legal_assistant.models.agent import find_agent
from legal_assistant.services.container import Services

router = APIRouter()


class AgentSelection(BaseModel):
    agent_id: str


class UrlSubmission(BaseModel):
    url: str
    agent_id: str | None = None


async def _target_agent(workflow, agent_id: str | None) -> None:
    if agent_id is None:
        return
    if find_agent(agent_id) is None:
        raise HTTPException(status_code=404, detail="Agent not found")
    if agent_id != workflow.agent_id:
        await workflow.select_agent(agent_id)


@router.get("/state")
async def get_state(
    user_email: str = Depends(get_user_email), services: Services = Depends(get_services)
):
    workflow = services.workflow_for(user_email)
    await workflow.load_knowledge()
    return workflow.snapshot()


@router.post("/agent")
async def select_agent(
    body: AgentSelection,
    user_email: str = Depends(get_user_email),
    services: Services = Depends(get_services),
):
    workflow = services.workflow_for(user_email)
    if find_agent(body.agent_id) is None:
        raise HTTPException(status_code=404, detail="Agent not found")
    await workflow.select_agent(body.agent_id)
    return workflow.snapshot()


@router.post("/url")
async def process_url(
    body: UrlSubmission,
    user_email: str = Depends(get_user_email),
    services: Services = Depends(get_services),
):
    workflow = services.workflow_for(user_email)
    await _target_agent(workflow, body.agent_id)
    try:
        await workflow.process_url(body.url)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return workflow.snapshot()


@router.post("/file")
async def process_file(
    file: UploadFile,
    agent_id: str | None = Form(default=None),
    user_email: str = Depends(get_user_email),
    services: Services = Depends(get_services),
):
    workflow = services.workflow_for(user_email)
    await _target_agent(workflow, agent_id)
    try:
        await workflow.process_file(file.filename or "")
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return workflow.snapshot()


@router.post("/approve")
async def approve(
    user_email: str = Depends(get_user_email), services: Services = Depends(get_services)
):
    workflow = services.workflow_for(user_email)
    try:
        entry = await workflow.approve(user_email)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"entry": entry.model_dump(mode="json"), **workflow.snapshot()}


@router.post("/reject")
async def reject(
    user_email: str = Depends(get_user_email), services: Services = Depends(get_services)
):
    workflow = services.workflow_for(user_email)
    workflow.reject()
    return workflow.snapshot()
