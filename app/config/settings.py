from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    app_env: str = "dev"
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 3000

    shared_secret: str = Field(
        default="",
        validation_alias=AliasChoices("shared_secret", "secret_key"),
    )
    max_upload_bytes: int = 10 * 1024 * 1024
    expose_raw_response: bool = True
    disconnect_poll_seconds: float = 0.5

    pdf_engine: str = "pdfplumber"
    native_text_min_chars: int = 50
    image_max_edge_px: int = 1500
    image_jpeg_quality: int = 85

    api_key: str = Field(
        default="",
        validation_alias=AliasChoices("api_key", "openai_api_key"),
    )
    analysis_provider: str = "openai"
    analysis_model_name: str = "gpt-4o"
    analysis_base_url: str | None = None
    analysis_timeout_seconds: int = 60
    # clamped to 0.0-0.2 by the analysis client
    analysis_temperature: float = 0.0
    analysis_json_mode: bool = True

    boundary_policy: str = "repair"
