"""Job executors, one agent per job type."""

from typing import Dict, Type

from app.agents.base import BaseAgent
from app.agents.file import FileAnalysisAgent
from app.agents.scenario import ScenarioAgent
from app.agents.video import VideoAnalysisAgent
from app.schemas.job import JobType
from app.services.llm_client import LLMClient

AGENTS: Dict[JobType, Type[BaseAgent]] = {
    JobType.ANALYZE_VIDEO: VideoAnalysisAgent,
    JobType.ANALYZE_FILE: FileAnalysisAgent,
    JobType.GENERATE_SCENARIO: ScenarioAgent,
}

_missing = set(JobType) - set(AGENTS)
if _missing:
    raise RuntimeError(f"No agent registered for job types: {sorted(t.value for t in _missing)}")


def get_agent(job_type: JobType, llm_client: LLMClient) -> BaseAgent:
    """Instantiate the agent for a job type."""
    return AGENTS[job_type](llm_client)


__all__ = ["AGENTS", "BaseAgent", "get_agent"]
