"""
Text-generation service HTTP client.

Used endpoint:
- POST /generate  {"prompt": str, "max_tokens": int, "temperature": float}
                  -> {"haiku": str, "is_funny": bool}

One request per call. Retrying is left to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from .errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 60.0


@dataclass(frozen=True)
class PoemDraft:
    text: str
    is_funny: bool

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "is_funny": self.is_funny}


def _normalize_base_url(base_url: str) -> str:
    base_url = (base_url or "").strip()
    if not base_url:
        raise ConfigurationError("GENERATION_API_URL is empty.")
    return base_url.rstrip("/")


def parse_draft(data: Any) -> PoemDraft:
    """
    Validate a decoded /generate reply. Raises UpstreamError on any shape mismatch.
    """
    if not isinstance(data, dict):
        raise UpstreamError("Generation service returned a non-object body.")

    text = data.get("haiku")
    is_funny = data.get("is_funny")
    if not isinstance(text, str) or not text.strip():
        raise UpstreamError("Generation service returned no poem text.")
    if not isinstance(is_funny, bool):
        raise UpstreamError("Generation service returned no funniness flag.")
    return PoemDraft(text=text.strip(), is_funny=is_funny)


class GenerationClient:
    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = _normalize_base_url(base_url)
        api_key = (api_key or "").strip()
        if not api_key:
            raise ConfigurationError("GENERATION_API_KEY is empty.")
        self._api_key = api_key
        self._timeout_s = timeout_s
        self._http_client = http_client

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        url = f"{self._base_url}/generate"
        if self._http_client is not None:
            return await self._http_client.post(url, json=payload, headers=self._headers(), timeout=self._timeout_s)
        async with httpx.AsyncClient(timeout=self._timeout_s) as client:
            return await client.post(url, json=payload, headers=self._headers())

    async def generate(self, prompt_content: str, max_tokens: int, temperature: float) -> PoemDraft:
        """
        Ask the service for one poem written from `prompt_content`.
        """
        payload = {
            "prompt": prompt_content,
            "max_tokens": int(max_tokens),
            "temperature": float(temperature),
        }

        try:
            resp = await self._post(payload)
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Generation request failed: {exc.__class__.__name__}: {exc}") from exc

        if not resp.is_success:
            # Avoid dumping huge bodies; include a small snippet.
            body = resp.text[:500]
            logger.warning("generation_failed status=%s", resp.status_code)
            raise UpstreamError(
                f"Generation request failed: {resp.status_code} {body}",
                status=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise UpstreamError("Generation service returned a malformed response.", status=resp.status_code) from exc

        try:
            draft = parse_draft(data)
        except UpstreamError as exc:
            exc.status = resp.status_code
            raise
        logger.info("generation_succeeded chars=%s is_funny=%s", len(draft.text), draft.is_funny)
        return draft
