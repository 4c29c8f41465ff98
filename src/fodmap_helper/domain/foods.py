"""Domain models for the FODMAP food catalog."""

from collections.abc import Mapping
from dataclasses import dataclass

RATINGS = ("low", "moderate", "high")


@dataclass(frozen=True)
class FodmapDetails:
    """Per-class severity codes (0 low, 1 medium, 2 high)."""

    oligos: int
    fructose: int
    polyols: int
    lactose: int


@dataclass(frozen=True)
class FoodRecord:
    """Represents a read-only food entry from the catalog."""

    id: str
    name: str
    rating: str
    category: str | None = None
    safe_serving: str | None = None
    tips: str | None = None
    alternatives: tuple[str, ...] = ()
    details: FodmapDetails | None = None


@dataclass(frozen=True)
class RatingResult:
    """Derived rating for a food record."""

    food: FoodRecord
    verdict: str
    safe_for_low_fodmap: bool
    recommendation: str
    components: Mapping[str, str] | None = None


@dataclass(frozen=True)
class FoodContext:
    """Grounding block plus the matches it was rendered from."""

    prompt_block: str
    matches: list[FoodRecord]
