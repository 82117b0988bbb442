"""Video analysis agent."""

import logging
from typing import Any, Dict

from app.agents.base import BaseAgent
from app.config import settings
from app.schemas.job import AnalyzeVideoInput, JobType
from app.services.prompts import VIDEO_ANALYSIS_PROMPTS

logger = logging.getLogger(__name__)


class VideoAnalysisAgent(BaseAgent):
    """Analyze a video's style or summarize its content."""

    JOB_TYPE = JobType.ANALYZE_VIDEO
    MODEL = settings.OPENROUTER_MODEL_VIDEO

    async def _run(self, input_data: AnalyzeVideoInput) -> Dict[str, Any]:
        """Send the instruction together with the video reference."""
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": VIDEO_ANALYSIS_PROMPTS[input_data.mode]},
                    {"type": "video_url", "video_url": {"url": input_data.url}},
                ],
            }
        ]
        content = await self._complete(messages)
        return {"content": content}
