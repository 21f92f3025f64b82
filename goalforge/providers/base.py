from abc import ABC, abstractmethod


class BaseProvider(ABC):
    """Abstract base class for all AI providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The name of this provider (e.g. 'groq', 'gemini')."""
        ...

    @abstractmethod
    async def generate(self, prompt: str, model: str | None = None, response_schema: dict | None = None) -> dict:
        """
        Send a single-prompt generation request.

        Args:
            prompt: The full prompt text.
            model: Optional model identifier. Provider uses its default if None.
            response_schema: Optional JSON schema the answer must follow. Providers
                without native structured output fall back to prompt instructions.

        Returns:
            dict with keys:
                - text: the generated text, None on failure
                - provider: provider name
                - model: model used
                - status: "success" | "failed"
                - error: error message on failure, else None
        """
        ...

    def _result(self, model: str, text: str | None = None, error: str | None = None) -> dict:
        return {
            "text": text,
            "provider": self.name,
            "model": model,
            "status": "failed" if error else "success",
            "error": error,
        }
