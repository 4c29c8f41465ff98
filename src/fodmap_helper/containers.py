"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path

from supabase import create_client

from fodmap_helper.adapters.azure_openai_chat_client import AzureOpenAIChatClient
from fodmap_helper.adapters.file_history_repository import FileChatHistoryRepository
from fodmap_helper.adapters.json_catalog_source import JsonCatalogSource
from fodmap_helper.adapters.mock_chat_client import MockChatClient
from fodmap_helper.adapters.ollama_chat_client import HttpxOllamaChatClient
from fodmap_helper.adapters.supabase_history_repository import (
    SupabaseChatHistoryRepository,
)
from fodmap_helper.config import Settings, resolve_chat_provider, uses_managed_history
from fodmap_helper.services.catalog import CatalogStore
from fodmap_helper.services.chat import ChatModel, ChatService, SyntheticStreamModel
from fodmap_helper.services.context import ContextAssembler
from fodmap_helper.services.history import ChatHistoryRepository, HistoryService

_logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    catalog: CatalogStore
    context_assembler: ContextAssembler
    history_service: HistoryService
    chat_service: ChatService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    catalog = CatalogStore(JsonCatalogSource(Path(resolved_settings.catalog_path)))
    assembler = ContextAssembler(catalog)
    history_service = HistoryService(_build_history_repository(resolved_settings))
    model, close_model = _build_chat_model(resolved_settings, assembler)
    if resolved_settings.stream_mode == "synthetic":
        model = SyntheticStreamModel(
            model=model, delay_seconds=resolved_settings.stream_delay_seconds
        )
    chat_service = ChatService(
        assembler=assembler,
        model=model,
        history=history_service,
        food_results_limit=resolved_settings.food_results_limit,
        history_limit=resolved_settings.history_limit,
    )

    async def close_resources() -> None:
        if close_model is not None:
            await close_model()

    return AppContainer(
        settings=resolved_settings,
        catalog=catalog,
        context_assembler=assembler,
        history_service=history_service,
        chat_service=chat_service,
        close_resources=close_resources,
    )


def _build_chat_model(
    settings: Settings, assembler: ContextAssembler
) -> tuple[ChatModel, Callable[[], Awaitable[None]] | None]:
    """Select the chat model implementation for the configured provider."""
    provider = resolve_chat_provider(settings)
    if provider == "azure" and settings.azure_openai_api_endpoint:
        _logger.info(
            "Using Azure OpenAI deployment %s",
            settings.azure_openai_api_deployment_name,
        )
        azure_client = AzureOpenAIChatClient.create(
            endpoint=settings.azure_openai_api_endpoint,
            api_key=settings.azure_openai_api_key,
            api_version=settings.azure_openai_api_version,
            deployment=settings.azure_openai_api_deployment_name,
            temperature=settings.chat_temperature,
        )
        return azure_client, azure_client.close
    if provider == "ollama":
        _logger.info("Using Ollama model %s", settings.ollama_chat_model)
        ollama_client = HttpxOllamaChatClient.create(
            base_url=settings.ollama_base_url,
            model=settings.ollama_chat_model,
            temperature=settings.chat_temperature,
        )
        return ollama_client, ollama_client.close
    _logger.info("No chat model provider configured, using mock responses")
    return MockChatClient(assembler), None


def _build_history_repository(settings: Settings) -> ChatHistoryRepository:
    """Select the managed store when configured, the file store otherwise."""
    if uses_managed_history(settings):
        return SupabaseChatHistoryRepository(
            create_client(settings.supabase_url, settings.supabase_service_key)
        )
    return FileChatHistoryRepository(Path(settings.history_dir))
