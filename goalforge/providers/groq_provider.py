import json

import httpx
from goalforge.providers.base import BaseProvider


GROQ_MODELS = [
    "llama-3.3-70b-versatile",
    "llama-3.1-8b-instant",
]


class GroqProvider(BaseProvider):
    """Provider for Groq inference API using standard httpx."""

    def __init__(self, api_key: str, transport: httpx.AsyncBaseTransport | None = None):
        self.api_key = api_key
        self.endpoint = "https://api.groq.com/openai/v1/chat/completions"
        self.transport = transport

    @property
    def name(self) -> str:
        return "groq"

    async def generate(self, prompt: str, model: str | None = None, response_schema: dict | None = None) -> dict:
        used_model = model or GROQ_MODELS[0]
        if response_schema is not None:
            # No native schema support: spell the shape out in the prompt
            prompt = (
                f"{prompt}\n\nReturn ONLY valid JSON matching this schema, no explanations:\n"
                f"{json.dumps(response_schema)}"
            )
        try:
            headers = {
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json"
            }
            body = {
                "model": used_model,
                "messages": [{"role": "user", "content": prompt}],
                "max_tokens": 2048,
            }

            async with httpx.AsyncClient(timeout=30.0, transport=self.transport) as client:
                response = await client.post(self.endpoint, headers=headers, json=body)
                response.raise_for_status()
                data = response.json()
                text = data["choices"][0]["message"]["content"] if data.get("choices") else None

            return self._result(used_model, text=text)
        except httpx.TimeoutException:
            return self._result(used_model, error="Timeout")
        except httpx.HTTPStatusError as e:
            return self._result(used_model, error=f"{e.response.status_code} {e.response.text[:200]}")
        except Exception as e:
            return self._result(used_model, error=str(e))
