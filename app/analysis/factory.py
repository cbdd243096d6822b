from typing import ClassVar

from app.analysis.analyzer import StructuredExtractionClient
from app.analysis.client_base import BaseAnalysisClient
from app.analysis.example_client_adapter import ExampleClientAdapter
from app.analysis.openai_client_adapter import OpenAIClientAdapter
from app.config.settings import Settings


class AnalysisClientFactory:
    """Creates the configured content-understanding client."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseAnalysisClient:
        """Create the provider client named by ``analysis_provider``."""
        provider = settings.analysis_provider.strip().lower()
        if provider == "example":
            return ExampleClientAdapter()
        return OpenAIClientAdapter(
            api_key=settings.api_key,
            timeout_seconds=settings.analysis_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def create_structured_client(
        cls,
        settings: Settings,
        client: BaseAnalysisClient | None = None,
    ) -> StructuredExtractionClient:
        """Wrap a provider client (the configured one by default) with model settings."""
        return StructuredExtractionClient(
            client=client if client is not None else cls.create(settings),
            model=settings.analysis_model_name,
            temperature=settings.analysis_temperature,
            json_mode=settings.analysis_json_mode,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        override = (settings.analysis_base_url or "").strip()
        if provider == "openai":
            return override or None
        if provider == "openai_compatible":
            if not override:
                raise ValueError(
                    "analysis_base_url is required for analysis_provider=openai_compatible"
                )
            return override
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return override or default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(
            f"Unknown analysis provider '{provider}'. Choose from: {supported}"
        )
