import logging
from typing import Any, Dict, List, Optional

import httpx

from .config import OPENROUTER_BASE_URL
from .errors import ProviderError

logger = logging.getLogger(__name__)

Message = Dict[str, str]


def _error_payload(body: Any) -> tuple[Optional[int], Optional[str]]:
    """Return ``(code, message)`` from an OpenAI-style ``{"error": {...}}`` body."""
    if not isinstance(body, dict) or not isinstance(body.get("error"), dict):
        return None, None
    error = body["error"]
    code = error.get("code")
    try:
        code = int(code) if code is not None else None
    except (TypeError, ValueError):
        code = None
    return code, error.get("message")


class OpenRouterClient:
    """Chat-completion client for OpenRouter's OpenAI-compatible API.

    Pass ``http_client`` to share a connection pool (or a mock transport in
    tests); otherwise the client owns one and ``aclose`` releases it.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = OPENROUTER_BASE_URL,
        timeout: float = 90.0,
        site_url: Optional[str] = None,
        app_title: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._headers = {"Authorization": f"Bearer {api_key}"}
        if site_url:
            self._headers["HTTP-Referer"] = site_url
        if app_title:
            self._headers["X-Title"] = app_title
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def complete(
        self,
        model: str,
        messages: List[Message],
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        payload = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        try:
            response = await self._client.post(
                f"{self.base_url}/chat/completions",
                json=payload,
                headers=self._headers,
            )
        except httpx.HTTPError as exc:
            raise ProviderError(f"OpenRouter request failed: {exc}") from exc

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            # Surface the provider's own error message
            try:
                _, msg = _error_payload(exc.response.json())
            except ValueError:
                msg = None
            status = exc.response.status_code
            raise ProviderError(
                f"OpenRouter API error ({status}): {msg or exc}",
                upstream_status=status,
            ) from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError(f"Unexpected response from OpenRouter: {exc}") from exc

        # OpenRouter can report upstream failures inside a 200 response
        code, msg = _error_payload(data)
        if code is not None or msg is not None:
            raise ProviderError(
                f"OpenRouter API error ({code}): {msg}",
                upstream_status=code,
            )

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            logger.warning("OpenRouter response carried no message content")
            return ""
        return content or ""
