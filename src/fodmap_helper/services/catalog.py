"""Read-only FODMAP food catalog with a guarded one-time load."""

import logging
import re
import threading
from dataclasses import dataclass, field
from typing import Protocol

from fodmap_helper.domain.foods import FoodRecord
from fodmap_helper.errors import DataLoadError

_logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10


class CatalogSource(Protocol):
    """Interface for the static data source backing the catalog."""

    def load_records(self) -> list[FoodRecord]:
        """Return every catalog record, raising DataLoadError on failure."""


@dataclass
class CatalogStore:
    """In-memory catalog loaded once per process lifetime."""

    source: CatalogSource
    search_limit: int = SEARCH_LIMIT
    _foods: list[FoodRecord] = field(default_factory=list, init=False, repr=False)
    _by_id: dict[str, FoodRecord] = field(default_factory=dict, init=False, repr=False)
    _loaded: bool = field(default=False, init=False, repr=False)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )

    def load(self) -> None:
        """Load the catalog once; failures degrade to an empty catalog."""
        if self._loaded:
            return
        with self._lock:
            if self._loaded:
                return
            try:
                records = self.source.load_records()
            except DataLoadError:
                _logger.exception("Failed to load FODMAP food data")
                records = []
            by_id: dict[str, FoodRecord] = {}
            for record in records:
                if record.id in by_id:
                    _logger.warning("Skipping duplicate food id: %s", record.id)
                    continue
                by_id[record.id] = record
            self._foods = list(by_id.values())
            self._by_id = by_id
            self._loaded = True
            _logger.info("Loaded %s FODMAP foods", len(self._foods))

    def list_all(self) -> list[FoodRecord]:
        """Return every food in catalog order."""
        self.load()
        return list(self._foods)

    def find_by_id(self, food_id: str) -> FoodRecord | None:
        """Return a food by id, if present."""
        self.load()
        return self._by_id.get(food_id)

    def search(self, query: str) -> list[FoodRecord]:
        """Case-insensitive substring search over names and categories."""
        self.load()
        term = query.strip().lower()
        if not term:
            return []
        results = [
            food
            for food in self._foods
            if term in food.name.lower()
            or (food.category is not None and term in food.category.lower())
        ]
        return results[: self.search_limit]

    def find_mentions(self, text: str) -> list[FoodRecord]:
        """Return foods whose name appears in free text, in catalog order."""
        self.load()
        lowered = text.lower()
        results = [
            food
            for food in self._foods
            if re.search(rf"\b{re.escape(food.name.lower())}", lowered)
        ]
        return results[: self.search_limit]

    def filter_by_rating(self, rating: str) -> list[FoodRecord]:
        """Return foods with an exact rating match."""
        self.load()
        return [food for food in self._foods if food.rating == rating]

    def filter_by_category(self, category: str) -> list[FoodRecord]:
        """Return foods in a category, compared case-insensitively."""
        self.load()
        wanted = category.strip().lower()
        return [
            food
            for food in self._foods
            if food.category is not None and food.category.lower() == wanted
        ]

    def categories(self) -> list[str]:
        """Return the sorted distinct category names."""
        self.load()
        return sorted({food.category for food in self._foods if food.category})
