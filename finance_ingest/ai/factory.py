from typing import ClassVar

from finance_ingest.ai.example_client_adapter import ExampleClientAdapter
from finance_ingest.ai.openai_client_adapter import OpenAIClientAdapter
from finance_ingest.ai.service import AIService
from finance_ingest.config.settings import Settings


class AIServiceFactory:
    """Creates the configured AI service."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> AIService:
        """Create an AI service from application settings."""
        provider = settings.ai_provider.lower()
        if provider == "example":
            return AIService(client=ExampleClientAdapter(), model="example")
        client = OpenAIClientAdapter(
            api_key=settings.ai_api_key or "not-set",
            timeout_seconds=settings.ai_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
        )
        return AIService(
            client=client,
            model=settings.ai_model_name,
            temperature=settings.ai_temperature,
            timeout_seconds=settings.ai_timeout_seconds,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        custom_url = settings.ai_base_url.strip()
        if provider == "openai":
            return custom_url or None
        if provider == "openai_compatible":
            if not custom_url:
                raise ValueError("ai_base_url is required for ai_provider=openai_compatible")
            return custom_url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return custom_url or default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(f"Unknown AI provider '{provider}'. Choose from: {supported}")
