"""OpenRouter LLM client with typed provider failures."""

import hashlib
import json
import logging
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from app.config import settings
from app.services.errors import NetworkTransientError, ProviderClientError, ProviderServerError

logger = logging.getLogger(__name__)

# 429 is treated like a server-side hiccup: the same request may succeed later.
RETRYABLE_STATUS_CODES = {429}


class LLMClient:
    """Async client for the OpenRouter chat completions API."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize the LLM client."""
        self.api_key = settings.OPENROUTER_API_KEY
        self.base_url = settings.OPENROUTER_BASE_URL
        self.site_url = settings.SITE_URL
        self.site_name = settings.SITE_NAME
        self.timeout = settings.LLM_TIMEOUT_SECONDS
        self._transport = transport

    def _hash_text(self, text: str) -> str:
        """Hash text using SHA256."""
        return hashlib.sha256(text.encode()).hexdigest()

    def _build_headers(self) -> Dict[str, str]:
        """Build HTTP headers for OpenRouter."""
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if self.site_url:
            headers["HTTP-Referer"] = self.site_url
        if self.site_name:
            headers["X-Title"] = self.site_name
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    def _build_payload(
        self,
        model: str,
        messages: List[Dict[str, Any]],
        temperature: float,
        max_tokens: int,
        stream: bool,
        plugins: Optional[List[Dict[str, Any]]],
    ) -> Dict[str, Any]:
        payload = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "stream": stream,
        }
        if plugins:
            payload["plugins"] = plugins

        request_hash = self._hash_text(json.dumps(payload, sort_keys=True, ensure_ascii=False))
        logger.info(f"LLM request to {model}, hash: {request_hash[:16]}")
        return payload

    def _raise_for_status(self, response: httpx.Response, body: str = "") -> None:
        """Map HTTP error statuses onto provider failures."""
        status = response.status_code
        if status < 400:
            return
        detail = (body or "")[:200]
        if status >= 500 or status in RETRYABLE_STATUS_CODES:
            logger.warning(f"Retryable error {status} from OpenRouter")
            raise ProviderServerError(f"Provider error {status}: {detail}", status_code=status)
        raise ProviderClientError(f"Provider rejected request {status}: {detail}", status_code=status)

    async def chat_completion(
        self,
        model: str,
        messages: List[Dict[str, Any]],
        temperature: float = 0.7,
        max_tokens: int = 8000,
        plugins: Optional[List[Dict[str, Any]]] = None,
    ) -> str:
        """
        Call OpenRouter chat completions API (non-streaming).

        Args:
            model: Model identifier
            messages: List of message dicts with 'role' and 'content'
            temperature: Sampling temperature
            max_tokens: Maximum tokens in response
            plugins: Optional OpenRouter plugins (e.g. file-parser)

        Returns:
            Response content as string

        Raises:
            NetworkTransientError: On timeouts and connection failures
            ProviderServerError: On 5xx / 429 responses
            ProviderClientError: On other 4xx responses
        """
        payload = self._build_payload(model, messages, temperature, max_tokens, False, plugins)

        try:
            async with self._client() as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers=self._build_headers(),
                    json=payload,
                )
        except httpx.TransportError as e:
            raise NetworkTransientError(f"Network error talking to OpenRouter: {e}") from e

        self._raise_for_status(response, response.text)

        result = response.json()
        content = result["choices"][0]["message"].get("content") or ""

        response_hash = self._hash_text(content)
        logger.info(f"LLM response hash: {response_hash[:16]}")

        return content

    async def stream_chat_completion(
        self,
        model: str,
        messages: List[Dict[str, Any]],
        temperature: float = 0.7,
        max_tokens: int = 8000,
    ) -> AsyncIterator[str]:
        """
        Stream content deltas from OpenRouter.

        Yields:
            Text chunks in arrival order
        """
        payload = self._build_payload(model, messages, temperature, max_tokens, True, None)

        try:
            async with self._client() as client:
                async with client.stream(
                    "POST",
                    f"{self.base_url}/chat/completions",
                    headers=self._build_headers(),
                    json=payload,
                ) as response:
                    if response.status_code >= 400:
                        body = (await response.aread()).decode("utf-8", errors="replace")
                        self._raise_for_status(response, body)

                    async for line in response.aiter_lines():
                        if not line.startswith("data:"):
                            continue
                        data = line[len("data:"):].strip()
                        if data == "[DONE]":
                            break
                        try:
                            chunk = json.loads(data)
                        except json.JSONDecodeError:
                            logger.debug(f"Skipping non-JSON stream line: {data[:80]}")
                            continue
                        choices = chunk.get("choices") or [{}]
                        content = (choices[0].get("delta") or {}).get("content")
                        if content:
                            yield content
        except httpx.TransportError as e:
            raise NetworkTransientError(f"Network error talking to OpenRouter: {e}") from e
