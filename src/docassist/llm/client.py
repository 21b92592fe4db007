"""Streaming client for an OpenAI-compatible chat completions API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Dict, List, Sequence

import httpx

from docassist.config import DEFAULT_MODEL, DEFAULT_MODEL_BASE_URL

logger = logging.getLogger(__name__)

_DONE = "[DONE]"


class ModelError(RuntimeError):
    """Raised when the hosted model cannot produce a completion."""


@dataclass(slots=True)
class ModelConfig:
    base_url: str = DEFAULT_MODEL_BASE_URL
    model_name: str = DEFAULT_MODEL
    api_key: str | None = None
    timeout: float = 60.0


class ChatModelClient:
    """Thin wrapper around the ``/chat/completions`` streaming endpoint."""

    def __init__(
        self,
        config: ModelConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config or ModelConfig()
        self._transport = transport

    def build_payload(self, system: str, messages: Sequence[Dict[str, str]]) -> Dict[str, object]:
        conversation: List[Dict[str, str]] = [{"role": "system", "content": system}]
        conversation.extend(
            {"role": message["role"], "content": message["content"]} for message in messages
        )
        return {"model": self.config.model_name, "messages": conversation, "stream": True}

    async def stream(self, system: str, messages: Sequence[Dict[str, str]]) -> AsyncIterator[str]:
        """Yield text deltas of the model's answer."""
        if not self.config.api_key:
            raise ModelError("Model API key is not configured")

        headers = {"Authorization": f"Bearer {self.config.api_key}"}
        payload = self.build_payload(system, messages)
        try:
            async with httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=httpx.Timeout(self.config.timeout),
                transport=self._transport,
            ) as client:
                async with client.stream(
                    "POST", "/chat/completions", json=payload, headers=headers
                ) as response:
                    if response.status_code >= 400:
                        body = await response.aread()
                        raise ModelError(
                            f"Model API returned {response.status_code}: "
                            f"{body.decode('utf-8', errors='replace')[:200]}"
                        )
                    async for line in response.aiter_lines():
                        text = _parse_event(line)
                        if text is _END:
                            return
                        if text:
                            yield text
        except httpx.HTTPError as exc:
            logger.error("Model request failed: %s", exc)
            raise ModelError(f"Model request failed: {exc}") from exc


_END = object()


def _parse_event(line: str) -> str | object | None:
    """Extract the delta text of one server-sent event line."""
    line = line.strip()
    if not line.startswith("data:"):
        return None
    data = line[len("data:"):].strip()
    if data == _DONE:
        return _END
    try:
        event = json.loads(data)
    except json.JSONDecodeError:
        logger.debug("Ignoring malformed event: %s", data[:80])
        return None
    if not isinstance(event, dict):
        return None
    choices = event.get("choices") or []
    if not choices:
        return None
    delta = choices[0].get("delta") or {}
    return delta.get("content")
