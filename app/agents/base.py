"""Base agent: input validation and provider access shared by all job types."""

import logging
from typing import Any, Dict, List

from app.schemas.job import JobInput, JobType, parse_job_input
from app.services.llm_client import LLMClient

logger = logging.getLogger(__name__)


class BaseAgent:
    """
    Base class for job executors.

    An agent is a function of its declared input to a result payload. It does
    not retry: failures propagate to the job processor, which owns the retry
    policy.
    """

    JOB_TYPE: JobType
    MODEL: str

    def __init__(self, llm_client: LLMClient):
        """Initialize base agent."""
        self.llm = llm_client

    async def execute(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate the payload and run the agent.

        Args:
            payload: Raw job input

        Returns:
            Result payload

        Raises:
            InputValidationError: If the payload does not match JOB_TYPE,
                before any provider call is made
        """
        input_data = parse_job_input(self.JOB_TYPE, payload)
        logger.info(f"Agent {self.__class__.__name__} started")
        result = await self._run(input_data)
        logger.info(f"Agent {self.__class__.__name__} succeeded")
        return result

    async def _run(self, input_data: JobInput) -> Dict[str, Any]:
        """Run the agent logic (to be implemented by subclasses)."""
        raise NotImplementedError

    async def _complete(self, messages: List[Dict[str, Any]], **kwargs) -> str:
        """Single non-streaming completion against this agent's model."""
        return await self.llm.chat_completion(model=self.MODEL, messages=messages, **kwargs)
