"""
llm_router.py — Multi-LLM Router
Sends a prompt to the healthiest configured provider, rotating API keys on
rate limits and falling through to the next provider on any other failure.
The rest of the app only sees generate_text and generate_structured, both
raising AIServiceError when no provider could answer.
"""

import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from goalforge.errors import AIServiceError
from goalforge.providers.base import BaseProvider
from goalforge.providers.gemini_provider import GeminiProvider
from goalforge.providers.groq_provider import GroqProvider
from goalforge.services.cache_service import ResponseCache
from goalforge.services.key_manager import KeyManager

logger = logging.getLogger(__name__)

# Lower priority is tried first
_DEFAULT_PROVIDERS = [
    {"name": "gemini", "provider_class": GeminiProvider, "priority": 1},
    {"name": "groq",   "provider_class": GroqProvider,   "priority": 2},
]

FAILURE_PENALTY = 5
LATENCY_PENALTY = 0.1


def extract_json(text: str, schema: dict | None = None) -> Any:
    """Parse the JSON payload out of a model answer, tolerating surrounding prose."""
    if not text:
        raise ValueError("Empty response")
    text = text.strip()
    try:
        return json.loads(text)
    except ValueError:
        pass
    want_array = bool(schema) and str(schema.get("type", "")).upper() == "ARRAY"
    opener, closer = ("[", "]") if want_array else ("{", "}")
    start = text.find(opener)
    end = text.rfind(closer) + 1
    if start == -1 or end == 0:
        raise ValueError("No JSON found in response")
    return json.loads(text[start:end])


def _is_rate_limit(error: str) -> bool:
    return "429" in error or "rate" in error.lower()


@dataclass
class ProviderSlot:
    name: str
    factory: Callable[..., BaseProvider]
    priority: int
    failure_count: int = 0
    total_calls: int = 0
    avg_response_time: float = 0.0
    last_used: Optional[str] = None

    @property
    def score(self) -> float:
        return self.priority + self.failure_count * FAILURE_PENALTY + self.avg_response_time * LATENCY_PENALTY

    def record_success(self, elapsed: float):
        self.total_calls += 1
        self.avg_response_time = round(
            self.avg_response_time + (elapsed - self.avg_response_time) / self.total_calls, 3
        )
        self.failure_count = max(0, self.failure_count - 1)
        self.last_used = datetime.now(timezone.utc).isoformat()

    def as_status(self, available_keys: int) -> dict:
        return {
            "name": self.name,
            "available_keys": available_keys,
            "failure_count": self.failure_count,
            "avg_response_time": self.avg_response_time,
            "last_used": self.last_used,
            "priority": self.priority,
        }


class LLMRouter:
    def __init__(self, key_manager: KeyManager | None = None, providers: list[dict] | None = None):
        self.key_manager = key_manager or KeyManager()
        self.cache = ResponseCache()
        # Providers without a single configured key are left out entirely
        self.providers: list[ProviderSlot] = [
            ProviderSlot(name=p["name"], factory=p["provider_class"], priority=p["priority"])
            for p in providers or _DEFAULT_PROVIDERS
            if self.key_manager.has_keys(p["name"])
        ]

    def _ordered(self) -> list[ProviderSlot]:
        return sorted(self.providers, key=lambda s: s.score)

    async def _ask(self, slot: ProviderSlot, prompt: str, schema: dict | None) -> tuple[str | None, str]:
        """Try every usable key of one provider. Returns (text, last error)."""
        while True:
            api_key = self.key_manager.get_next_key(slot.name)
            if api_key is None:
                return None, f"{slot.name}: no usable API key"

            started = time.time()
            try:
                result = await slot.factory(api_key=api_key).generate(prompt, response_schema=schema)
            except Exception as exc:
                slot.failure_count += 1
                logger.warning(f"LLM provider {slot.name} raised: {exc}")
                return None, f"{slot.name}: {exc}"

            if result.get("status") == "success" and result.get("text"):
                slot.record_success(round(time.time() - started, 3))
                return result["text"], ""

            error = str(result.get("error") or "empty response")
            if _is_rate_limit(error):
                logger.info(f"Key for {slot.name} rate limited, rotating")
                self.key_manager.mark_exhausted_by_value(slot.name, api_key)
                continue

            slot.failure_count += 1
            logger.warning(f"LLM provider {slot.name} failed: {error}")
            return None, f"{slot.name}: {error}"

    async def route(self, prompt: str, response_schema: dict | None = None, cache_ttl: int = 0) -> dict:
        """Answer a prompt from the cache or the first provider that succeeds.

        Returns a dict with text, provider, status, error and cached.
        """
        schema_key = json.dumps(response_schema, sort_keys=True) if response_schema else ""
        if cache_ttl > 0:
            hit = self.cache.get(prompt, schema_key)
            if hit is not None:
                return {**hit, "cached": True}

        last_error = "No AI provider is configured"
        for slot in self._ordered():
            text, error = await self._ask(slot, prompt, response_schema)
            if text is None:
                last_error = error
                continue
            response = {"text": text, "provider": slot.name, "status": "success", "error": None, "cached": False}
            self.cache.set(prompt, response, cache_ttl, schema_key)
            return response

        return {"text": None, "provider": None, "status": "error", "error": last_error, "cached": False}

    async def generate_text(self, prompt: str, cache_ttl: int = 0) -> str:
        resp = await self.route(prompt, cache_ttl=cache_ttl)
        if resp["status"] != "success":
            raise AIServiceError(resp["error"] or "Text generation failed")
        return resp["text"]

    async def generate_structured(self, prompt: str, schema: dict, cache_ttl: int = 0) -> Any:
        resp = await self.route(prompt, response_schema=schema, cache_ttl=cache_ttl)
        if resp["status"] != "success":
            raise AIServiceError(resp["error"] or "Structured generation failed")
        try:
            return extract_json(resp["text"], schema)
        except ValueError as e:
            raise AIServiceError(f"Unparseable AI response: {e}") from e

    def get_provider_status(self) -> list[dict]:
        return [s.as_status(self.key_manager.get_active_key_count(s.name)) for s in self.providers]


_router_instance = None


def get_llm_router() -> LLMRouter:
    global _router_instance
    if _router_instance is None:
        _router_instance = LLMRouter()
    return _router_instance
