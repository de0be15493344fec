"""REST API for the shared, agent-scoped knowledge base."""

from fastapi import APIRouter, Depends

from legal_assistant.api.dependencies import get_services, get_user_email
from legal_assistant.services.container import Services

router = APIRouter()


@router.get("/")
async def get_knowledge_base(services: Services = Depends(get_services)):
    knowledge_base = await services.knowledge_base.get_all()
    return {
        agent_id: [e.model_dump(mode="json") for e in entries]
        for agent_id, entries in knowledge_base.items()
    }


@router.get("/{agent_id}")
async def get_agent_knowledge(agent_id: str, services: Services = Depends(get_services)):
    entries = await services.knowledge_base.get_for_agent(agent_id)
    return [e.model_dump(mode="json") for e in entries]


@router.delete("/{agent_id}/{entry_id}")
async def delete_entry(
    agent_id: str,
    entry_id: str,
    user_email: str = Depends(get_user_email),
    services: Services = Depends(get_services),
):
    await services.knowledge_base.delete(agent_id, entry_id)
    # Keep the user's education view in step with the store
    workflow = services.workflows.get(user_email)
    if workflow is not None and workflow.agent_id == agent_id:
        workflow.knowledge = [e for e in workflow.knowledge if e.id != entry_id]
    return {"status": "deleted"}
