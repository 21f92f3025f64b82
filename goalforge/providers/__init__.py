from goalforge.providers.base import BaseProvider
from goalforge.providers.gemini_provider import GeminiProvider
from goalforge.providers.groq_provider import GroqProvider


__all__ = [
    "BaseProvider",
    "GeminiProvider",
    "GroqProvider",
]
