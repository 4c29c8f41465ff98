"""JSON file catalog source accepting both catalog schema versions."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from fodmap_helper.domain.foods import FodmapDetails, FoodRecord
from fodmap_helper.errors import DataLoadError
from fodmap_helper.services.catalog import CatalogSource

_logger = logging.getLogger(__name__)


class RawFodmapDetails(BaseModel):
    """Severity codes as stored in category-bearing catalogs."""

    oligos: int = 0
    fructose: int = 0
    polyols: int = 0
    lactose: int = 0


class RawFoodRecord(BaseModel):
    """Catalog row in either schema version.

    Version A rows carry ``fodmap``, ``category``, ``qty`` and ``details``.
    Version B rows carry ``rating``, ``safeServing``, ``tips`` and
    ``alternatives``. A row must name exactly one of ``fodmap`` or ``rating``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    rating: Literal["low", "moderate", "high"] | None = None
    fodmap: Literal["low", "high"] | None = None
    category: str | None = None
    qty: str | None = None
    safe_serving: str | None = Field(default=None, alias="safeServing")
    tips: str | None = None
    alternatives: list[str] = Field(default_factory=list)
    details: RawFodmapDetails | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        if isinstance(value, int):
            return str(value)
        return value

    @model_validator(mode="after")
    def _single_rating_field(self) -> "RawFoodRecord":
        if (self.rating is None) == (self.fodmap is None):
            raise ValueError("exactly one of 'rating' or 'fodmap' is required")
        return self

    def to_record(self) -> FoodRecord:
        """Normalize into the canonical food record."""
        details = None
        if self.details is not None:
            details = FodmapDetails(
                oligos=self.details.oligos,
                fructose=self.details.fructose,
                polyols=self.details.polyols,
                lactose=self.details.lactose,
            )
        return FoodRecord(
            id=self.id,
            name=self.name.strip(),
            rating=self.rating or self.fodmap or "high",
            category=self.category,
            safe_serving=self.safe_serving or self.qty,
            tips=self.tips,
            alternatives=tuple(self.alternatives),
            details=details,
        )


@dataclass
class JsonCatalogSource(CatalogSource):
    """Reads food records from a JSON array on disk."""

    path: Path

    def load_records(self) -> list[FoodRecord]:
        """Parse the file, skipping rows that fail validation."""
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise DataLoadError(f"Unable to read catalog: {exc}") from exc
        if not isinstance(payload, list):
            raise DataLoadError("Catalog must be a JSON array of food records")

        records: list[FoodRecord] = []
        for index, row in enumerate(payload):
            try:
                records.append(RawFoodRecord.model_validate(row).to_record())
            except PydanticValidationError as exc:
                _logger.warning(
                    "Skipping invalid catalog row %s: %s", index, exc.errors()
                )
        return records
