from __future__ import annotations

import abc
import json
from typing import Any, Dict

import httpx

from .config import LLMConfig
from .logging_utils import get_logger

logger = get_logger(__name__)


class LLMError(RuntimeError):
    pass


class LLMClient(abc.ABC):
    @abc.abstractmethod
    async def complete_json(self, prompt: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None


class NullLLMClient(LLMClient):
    """Stand-in used when no API key is configured; never produces output."""

    async def complete_json(self, prompt: Dict[str, Any]) -> Dict[str, Any]:
        logger.warning("llm_unconfigured", messages=len(prompt.get("messages", [])))
        return {}


class OpenAIClient(LLMClient):
    def __init__(self, cfg: LLMConfig, api_key: str, client: httpx.AsyncClient | None = None):
        self._cfg = cfg
        self._api_key = api_key
        self._client = client or httpx.AsyncClient(timeout=cfg.timeout_s)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def complete_json(self, prompt: Dict[str, Any]) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
        }
        payload = {
            "model": self._cfg.model,
            "response_format": {"type": "json_object"},
            "temperature": self._cfg.temperature,
            "max_tokens": self._cfg.max_tokens,
            **prompt,
        }
        url = self._cfg.base_url.rstrip("/") + "/chat/completions"
        try:
            resp = await self._client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            raise LLMError(f"LLM request failed: {exc}") from exc
        if resp.status_code >= 400:
            raise LLMError(f"LLM HTTP {resp.status_code}: {resp.text}")
        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise LLMError("Unexpected LLM response") from exc
        if not content:
            return {}
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            raise LLMError("LLM did not return valid JSON") from exc
        if not isinstance(result, dict):
            raise LLMError("LLM returned a non-object JSON payload")
        return result


def build_llm_client(cfg: LLMConfig, api_key: str) -> LLMClient:
    if cfg.provider.lower() == "openai":
        if not api_key:
            logger.warning("llm_api_key_missing", provider=cfg.provider)
            return NullLLMClient()
        return OpenAIClient(cfg, api_key)
    raise ValueError(f"Unsupported LLM provider: {cfg.provider}")


__all__ = ["LLMClient", "OpenAIClient", "NullLLMClient", "build_llm_client", "LLMError"]
