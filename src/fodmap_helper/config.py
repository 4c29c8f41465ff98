"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")
_DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "data" / "fodmap-foods.json"

CHAT_PROVIDERS = {"auto", "azure", "ollama", "mock"}
STREAM_MODES = {"synthetic", "native"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    environment: str = _ENVIRONMENT
    catalog_path: str = str(_DEFAULT_CATALOG_PATH)
    chat_provider: str = "auto"
    azure_openai_api_endpoint: str | None = None
    azure_openai_api_key: str | None = None
    azure_openai_api_version: str = "2024-10-21"
    azure_openai_api_deployment_name: str = "gpt-4o-mini"
    ollama_base_url: str = "http://localhost:11434"
    ollama_chat_model: str = "llama3.1:latest"
    chat_temperature: float = 0.3
    stream_mode: str = "synthetic"
    stream_delay_seconds: float = 0.02
    food_results_limit: int = 3
    history_limit: int = 20
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    history_dir: str = ".chat-history"

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def resolve_chat_provider(settings: Settings) -> str:
    """Return the concrete chat provider for the configured mode.

    ``auto`` picks Azure OpenAI when an endpoint is configured and the
    template responder otherwise. Unknown values fall back to ``auto``.
    """
    provider = settings.chat_provider.strip().lower()
    if provider not in CHAT_PROVIDERS or provider == "auto":
        return "azure" if settings.azure_openai_api_endpoint else "mock"
    return provider


def uses_managed_history(settings: Settings) -> bool:
    """Return true when the Supabase history store is fully configured."""
    return bool(settings.supabase_url and settings.supabase_service_key)
