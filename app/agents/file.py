"""File analysis agent."""

import logging
from typing import Any, Dict

from app.agents.base import BaseAgent
from app.config import settings
from app.schemas.job import AnalyzeFileInput, JobType
from app.services.errors import InputValidationError
from app.services.prompts import PDF_ANALYSIS_PROMPTS, text_analysis_prompt

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"

FILE_PARSER_PLUGIN = {"id": "file-parser", "pdf": {"engine": "pdf-text"}}


class FileAnalysisAgent(BaseAgent):
    """Analyze an uploaded document, either as a PDF attachment or as extracted text."""

    JOB_TYPE = JobType.ANALYZE_FILE
    MODEL = settings.OPENROUTER_MODEL_CHAT

    async def _run(self, input_data: AnalyzeFileInput) -> Dict[str, Any]:
        """Branch on payload shape."""
        if input_data.file_data and input_data.file_type == PDF_MIME_TYPE:
            return await self._analyze_pdf(input_data)

        if input_data.content:
            messages = [
                {"role": "user", "content": text_analysis_prompt(input_data.mode, input_data.content)}
            ]
            content = await self._complete(messages)
            return {"content": content}

        raise InputValidationError("Invalid file input")

    async def _analyze_pdf(self, input_data: AnalyzeFileInput) -> Dict[str, Any]:
        logger.info(f"Analyzing PDF attachment {input_data.filename or 'document.pdf'}")
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": PDF_ANALYSIS_PROMPTS[input_data.mode]},
                    {
                        "type": "file",
                        "file": {
                            "filename": input_data.filename or "document.pdf",
                            "file_data": input_data.file_data,
                        },
                    },
                ],
            }
        ]
        content = await self._complete(messages, plugins=[FILE_PARSER_PLUGIN])
        return {"content": content}
