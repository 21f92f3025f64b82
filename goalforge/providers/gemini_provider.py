import asyncio

from goalforge.config import GEMINI_MODEL
from goalforge.providers.base import BaseProvider


class GeminiProvider(BaseProvider):
    """Provider for Google Gemini API using the official SDK."""

    def __init__(self, api_key: str):
        self.api_key = api_key

    @property
    def name(self) -> str:
        return "gemini"

    async def generate(self, prompt: str, model: str | None = None, response_schema: dict | None = None) -> dict:
        used_model = model or GEMINI_MODEL
        try:
            import google.generativeai as genai
            # genai is configured module-wide, so set the key right before each call
            genai.configure(api_key=self.api_key)

            generation_config = None
            if response_schema is not None:
                generation_config = genai.GenerationConfig(
                    response_mime_type="application/json",
                    response_schema=response_schema,
                )

            g_model = genai.GenerativeModel(
                model_name=used_model,
                generation_config=generation_config,
            )

            # Apply 30s timeout manually using asyncio
            response = await asyncio.wait_for(g_model.generate_content_async(prompt), timeout=30.0)
            return self._result(used_model, text=response.text)
        except asyncio.TimeoutError:
            return self._result(used_model, error="Timeout")
        except Exception as e:
            return self._result(used_model, error=str(e))
