from fastapi import APIRouter, HTTPException

from legal_assistant.models.agent import AGENTS, find_agent

router = APIRouter()


@router.get("/")
async def list_agents():
    return [agent.to_dict() for agent in AGENTS]


@router.get("/{agent_id}")
async def get_agent_detail(agent_id: str):
    agent = find_agent(agent_id)
    if not agent:
        raise HTTPException(status_code=404, detail="Agent not found")
    return agent.to_dict()
