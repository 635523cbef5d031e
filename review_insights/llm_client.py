from __future__ import annotations
import json
import logging
import re
from typing import Any, Dict, Optional

import httpx

from .config import Settings
from .errors import ConfigurationError, EmptyOutputError, TransportError
from .schemas import PromptPayload, SummarizeResponse

logger = logging.getLogger(__name__)

_JSON_FENCE_RE = re.compile(r"```(?:json)?(.*?)```", flags=re.DOTALL | re.IGNORECASE)


def _extract_json(text: str) -> Dict[str, Any]:
    """
    Pull a JSON object out of model output that may be fenced or wrapped in prose.
    Raises ValueError when nothing parses.
    """
    t = (text or "").strip()
    if not t:
        raise ValueError("empty model output")
    candidates = [t]
    m = _JSON_FENCE_RE.search(t)
    if m:
        candidates.append(m.group(1).strip())
    first, last = t.find("{"), t.rfind("}")
    if first != -1 and last > first:
        candidates.append(t[first:last + 1])

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data
    raise ValueError("could not extract JSON object from model output")


class LLMClient:
    """
    Gemini generateContent client for structured summaries:
      - await execute(payload) -> SummarizeResponse
    One request per call; no retries and no caching.
    """

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        if not (settings.google_api_key or "").strip():
            raise ConfigurationError("GOOGLE_API_KEY environment variable is not set")
        self.settings = settings
        self.model = settings.gemini_model
        self._owns_session = http_client is None
        self.session = http_client or httpx.AsyncClient(timeout=settings.request_timeout)

    @property
    def endpoint(self) -> str:
        return f"{self.settings.gemini_api_base}/models/{self.model}:generateContent"

    def _request_body(self, payload: PromptPayload) -> Dict[str, Any]:
        return {
            "contents": [{"role": "user", "parts": [{"text": payload.prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": payload.output_schema,
                "temperature": self.settings.temperature,
                "maxOutputTokens": self.settings.max_tokens,
            },
        }

    async def execute(self, payload: PromptPayload) -> SummarizeResponse:
        headers = {"x-goog-api-key": self.settings.google_api_key}
        try:
            r = await self.session.post(self.endpoint, json=self._request_body(payload), headers=headers)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("model service returned HTTP %s: %s", e.response.status_code, e.response.text[:500])
            raise TransportError(f"model service returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error("model service request failed: %r", e)
            raise TransportError(f"model service request failed: {e!r}") from e

        return self._parse(r)

    def _parse(self, r: httpx.Response) -> SummarizeResponse:
        try:
            body = r.json()
        except ValueError as e:
            raise EmptyOutputError("model service returned a non-JSON body") from e

        candidates = body.get("candidates") if isinstance(body, dict) else None
        if not isinstance(candidates, list) or not candidates or not isinstance(candidates[0], dict):
            raise EmptyOutputError("no output received from the model")
        first = candidates[0]
        try:
            parts = first["content"]["parts"]
            content = "".join(p.get("text", "") for p in parts)
        except (KeyError, TypeError, AttributeError) as e:
            raise EmptyOutputError(
                f"no output received from the model (finishReason={first.get('finishReason')})"
            ) from e

        try:
            data = _extract_json(content)
        except ValueError as e:
            raise EmptyOutputError(str(e)) from e

        summary = data.get("summary")
        if not isinstance(summary, str) or not summary.strip():
            raise EmptyOutputError("model output has no summary")
        return SummarizeResponse(summary=summary.strip())

    async def aclose(self) -> None:
        if self._owns_session:
            await self.session.aclose()

    async def __aenter__(self) -> "LLMClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
