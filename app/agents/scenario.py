"""Two-stage scenario generation agent (draft, then refine)."""

import logging
from typing import Any, Dict, List

from app.agents.base import BaseAgent
from app.config import settings
from app.schemas.common import ChatTurn, Material
from app.schemas.job import GenerateScenarioInput, JobType
from app.services.prompts import scenario_draft_prompt, scenario_refine_prompt

logger = logging.getLogger(__name__)


def format_materials(materials: List[Material]) -> List[str]:
    """Render the selected materials as markdown sections."""
    return [f"# {m.name}\n{m.content}" for m in materials if m.selected]


def format_chat_history(history: List[ChatTurn]) -> str:
    """Serialize the discussion as `role: content` blocks."""
    return "\n\n".join(f"{m.role}: {m.content}" for m in history)


class ScenarioAgent(BaseAgent):
    """Agent for drafting and refining a video scenario."""

    JOB_TYPE = JobType.GENERATE_SCENARIO
    MODEL = settings.OPENROUTER_MODEL_SCENARIO

    async def _run(self, input_data: GenerateScenarioInput) -> Dict[str, Any]:
        """Draft, then rewrite the draft. Both calls must succeed."""
        styles = format_materials(input_data.styles)
        sources = format_materials(input_data.sources)
        chat_text = format_chat_history(input_data.chat_history)

        draft = await self._complete(
            [{"role": "user", "content": scenario_draft_prompt(styles, sources, chat_text)}]
        )
        logger.info(f"Scenario draft generated ({len(draft)} chars), refining")

        scenario = await self._complete(
            [{"role": "user", "content": scenario_refine_prompt(styles, sources, chat_text, draft)}]
        )
        return {"scenario": scenario}
