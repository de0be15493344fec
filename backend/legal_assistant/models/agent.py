"""Fixed catalogue of legal-domain agents."""

from dataclasses import asdict, dataclass, field

from legal_assistant.core.config import settings


@dataclass(frozen=True)
class Agent:
    id: str
    name: str
    short_name: str
    description: str
    icon: str  # Opaque reference resolved by the front-end
    theme: dict[str, str] = field(default_factory=dict)
    provider: str = "gemini"

    def to_dict(self) -> dict:
        return asdict(self)


AGENTS: list[Agent] = [
    Agent(
        id="popia",
        name="POPIA Agent",
        short_name="POPIA",
        description="Your guide to the Protection of Personal Information Act.",
        icon="icon:popia",
        theme={"accent": "#38BDF8", "bubble": "#0C4A6E"},
    ),
    Agent(
        id="rental",
        name="Rental Law Agent",
        short_name="Rental Law",
        description="Assistance with rental housing agreements and disputes.",
        icon="icon:rental",
        theme={"accent": "#34D399", "bubble": "#064E3B"},
    ),
    Agent(
        id="consumer",
        name="Consumer Protection Agent",
        short_name="Consumer Protection",
        description="Understand your rights as a consumer.",
        icon="icon:consumer",
        theme={"accent": "#FBBF24", "bubble": "#78350F"},
    ),
    Agent(
        id="general",
        name="General Legal",
        short_name="General Legal",
        description="For general legal queries and triage.",
        icon="icon:general",
        theme={"accent": "#A78BFA", "bubble": "#4C1D95"},
    ),
]

_AGENTS_BY_ID = {agent.id: agent for agent in AGENTS}


def find_agent(agent_id: str) -> Agent | None:
    return _AGENTS_BY_ID.get(agent_id)


def get_agent(agent_id: str | None) -> Agent:
    """Look up an agent, falling back to the configured default for unknown ids."""
    if agent_id and agent_id in _AGENTS_BY_ID:
        return _AGENTS_BY_ID[agent_id]
    return _AGENTS_BY_ID.get(settings.default_agent_id, AGENTS[1])
