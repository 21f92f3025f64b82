"""
key_manager.py — API key rotation
Each AI provider may be configured with several keys. Keys are handed out
round-robin; a key that hits its rate limit is parked until the next UTC day.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable, Optional

from goalforge.config import GEMINI_API_KEYS, GROQ_API_KEYS


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


@dataclass
class ApiKey:
    value: str
    exhausted_on: Optional[date] = None
    requests_today: int = 0


class KeyManager:
    def __init__(self, provider_keys: dict[str, list[str]] | None = None, today: Callable[[], date] = _utc_today):
        if provider_keys is None:
            provider_keys = {"gemini": GEMINI_API_KEYS, "groq": GROQ_API_KEYS}
        self._today = today
        self._day = today()
        self._cursor: dict[str, int] = {name: 0 for name in provider_keys}
        self.keys: dict[str, list[ApiKey]] = {
            name: [ApiKey(v) for v in values] for name, values in provider_keys.items()
        }

    def has_keys(self, provider: str) -> bool:
        return bool(self.keys.get(provider))

    def _roll_day(self):
        today = self._today()
        if today != self._day:
            self._day = today
            self.reset_daily()

    def get_next_key(self, provider: str) -> str | None:
        """Next usable key for the provider, or None when all are spent."""
        self._roll_day()
        pool = self.keys.get(provider) or []
        start = self._cursor.get(provider, 0)
        for step in range(len(pool)):
            index = (start + step) % len(pool)
            key = pool[index]
            if key.exhausted_on is None:
                key.requests_today += 1
                self._cursor[provider] = index + 1
                return key.value
        return None

    def mark_exhausted_by_value(self, provider: str, key_value: str):
        for key in self.keys.get(provider) or []:
            if key.value == key_value:
                key.exhausted_on = self._today()
                return

    def reset_daily(self):
        for pool in self.keys.values():
            for key in pool:
                key.exhausted_on = None
                key.requests_today = 0

    def get_active_key_count(self, provider: str) -> int:
        return sum(1 for key in self.keys.get(provider) or [] if key.exhausted_on is None)
