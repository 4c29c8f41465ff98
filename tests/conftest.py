"""Shared test fixtures."""

from collections.abc import AsyncIterator
from dataclasses import dataclass, field

import pytest

from fodmap_helper.config import Settings
from fodmap_helper.containers import AppContainer
from fodmap_helper.domain.chat import ChatMessage, ChatSessionRecord, ChatSessionSummary
from fodmap_helper.domain.foods import FodmapDetails, FoodRecord
from fodmap_helper.errors import DataLoadError
from fodmap_helper.services.catalog import CatalogSource, CatalogStore
from fodmap_helper.services.chat import ChatModel, ChatService, SyntheticStreamModel
from fodmap_helper.services.context import ContextAssembler
from fodmap_helper.services.history import ChatHistoryRepository, HistoryService
from fodmap_helper.services.prompts import TITLE_SYSTEM_PROMPT

BANANA = FoodRecord(
    id="f1",
    name="Banana",
    rating="low",
    category="Fruit",
    safe_serving="1 medium ripe banana",
    tips="Pick firm bananas.",
    alternatives=(),
)
APPLE = FoodRecord(
    id="f2",
    name="Apple",
    rating="high",
    category="Fruit",
    safe_serving="Avoid",
    tips="High in fructose and sorbitol.",
    alternatives=("Orange", "Kiwi"),
)
AVOCADO = FoodRecord(
    id="f3",
    name="Avocado",
    rating="moderate",
    category="Fruit",
    safe_serving="30 g",
    tips="Larger servings are high in sorbitol.",
    alternatives=("Cucumber",),
)
GARLIC = FoodRecord(
    id="f4",
    name="Garlic",
    rating="high",
    category="Vegetables",
    safe_serving=None,
    details=FodmapDetails(oligos=2, fructose=0, polyols=0, lactose=0),
)
RICE = FoodRecord(
    id="f5",
    name="White rice",
    rating="low",
    category="Grains",
    safe_serving="1 cup cooked",
)


@dataclass
class InMemoryCatalogSource(CatalogSource):
    """Catalog source serving a fixed list of records."""

    records: list[FoodRecord] = field(default_factory=list)
    calls: int = 0

    def load_records(self) -> list[FoodRecord]:
        self.calls += 1
        return list(self.records)


@dataclass
class FailingCatalogSource(CatalogSource):
    """Catalog source that always fails to load."""

    calls: int = 0

    def load_records(self) -> list[FoodRecord]:
        self.calls += 1
        raise DataLoadError("Unable to read catalog: /secret/path/foods.json")


@dataclass
class FakeChatModel(ChatModel):
    """Scripted chat model that records prompts."""

    reply: str = "✅ Banana is LOW FODMAP!\n\nEnjoy  it  firm.\n<<What about apples?>>"
    fragments: list[str] | None = None
    title: str = "Banana questions"
    fail: bool = False
    fail_after: int | None = None
    prompts: list[list[ChatMessage]] = field(default_factory=list)

    async def complete(self, messages: list[ChatMessage]) -> str:
        self.prompts.append(messages)
        if self.fail:
            raise RuntimeError("model offline")
        if messages and messages[0].content == TITLE_SYSTEM_PROMPT:
            return self.title
        return self.reply

    async def stream(self, messages: list[ChatMessage]) -> AsyncIterator[str]:
        self.prompts.append(messages)
        if self.fail:
            raise RuntimeError("model offline")
        for index, fragment in enumerate(self.fragments or [self.reply]):
            if self.fail_after is not None and index >= self.fail_after:
                raise RuntimeError("connection reset")
            yield fragment


@dataclass
class InMemoryChatHistoryRepository(ChatHistoryRepository):
    """In-memory chat history for tests."""

    sessions: dict[tuple[str, str], ChatSessionRecord] = field(default_factory=dict)
    fail: bool = False

    def get_session(self, user_id: str, session_id: str) -> ChatSessionRecord | None:
        if self.fail:
            raise RuntimeError("store offline")
        return self.sessions.get((user_id, session_id))

    def list_sessions(self, user_id: str) -> list[ChatSessionSummary]:
        if self.fail:
            raise RuntimeError("store offline")
        return [
            ChatSessionSummary(id=session.id, title=session.title)
            for (owner, _), session in self.sessions.items()
            if owner == user_id
        ]

    def append_message(
        self, user_id: str, session_id: str, message: ChatMessage
    ) -> None:
        current = self._get_or_create(user_id, session_id)
        self.sessions[(user_id, session_id)] = ChatSessionRecord(
            id=current.id,
            user_id=user_id,
            title=current.title,
            messages=[*current.messages, message],
        )

    def set_title(self, user_id: str, session_id: str, title: str) -> None:
        current = self._get_or_create(user_id, session_id)
        self.sessions[(user_id, session_id)] = ChatSessionRecord(
            id=current.id,
            user_id=user_id,
            title=title,
            messages=current.messages,
        )

    def _get_or_create(self, user_id: str, session_id: str) -> ChatSessionRecord:
        return self.sessions.get(
            (user_id, session_id),
            ChatSessionRecord(id=session_id, user_id=user_id, title=None),
        )


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        chat_provider="mock",
        stream_delay_seconds=0,
        history_dir=str(tmp_path / "history"),
    )


@pytest.fixture
def foods() -> list[FoodRecord]:
    return [BANANA, APPLE, AVOCADO, GARLIC, RICE]


@pytest.fixture
def catalog_source(foods: list[FoodRecord]) -> InMemoryCatalogSource:
    return InMemoryCatalogSource(foods)


@pytest.fixture
def catalog(catalog_source: InMemoryCatalogSource) -> CatalogStore:
    return CatalogStore(catalog_source)


@pytest.fixture
def chat_model() -> FakeChatModel:
    return FakeChatModel()


@pytest.fixture
def history_repository() -> InMemoryChatHistoryRepository:
    return InMemoryChatHistoryRepository()


@pytest.fixture
def container(
    settings: Settings,
    catalog: CatalogStore,
    chat_model: FakeChatModel,
    history_repository: InMemoryChatHistoryRepository,
) -> AppContainer:
    assembler = ContextAssembler(catalog)
    history_service = HistoryService(history_repository)
    chat_service = ChatService(
        assembler=assembler,
        model=SyntheticStreamModel(model=chat_model, delay_seconds=0),
        history=history_service,
        food_results_limit=settings.food_results_limit,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        catalog=catalog,
        context_assembler=assembler,
        history_service=history_service,
        chat_service=chat_service,
        close_resources=close_resources,
    )
