"""Rating engine mapping catalog records to recommendations.

The verdict always comes from the catalog's assigned rating. The per-class
breakdown only explains a verdict; it never overrides it.
"""

from fodmap_helper.domain.foods import FodmapDetails, FoodRecord, RatingResult

_SEVERITY_WORDS = {0: "low", 1: "medium", 2: "high"}

SAFE_MARKER = "✅"
CAUTION_MARKER = "⚠️"
AVOID_MARKER = "❌"


def severity_word(code: int) -> str:
    """Map a severity code to a word; unknown codes read as low."""
    return _SEVERITY_WORDS.get(code, "low")


def component_breakdown(details: FodmapDetails) -> dict[str, str]:
    """Return the severity word for each FODMAP sugar class."""
    return {
        "oligosaccharides": severity_word(details.oligos),
        "disaccharides": severity_word(details.lactose),
        "monosaccharides": severity_word(details.fructose),
        "polyols": severity_word(details.polyols),
    }


def rate(food: FoodRecord) -> RatingResult:
    """Derive the rating and recommendation for a food."""
    components = component_breakdown(food.details) if food.details else None
    return RatingResult(
        food=food,
        verdict=food.rating,
        safe_for_low_fodmap=food.rating == "low",
        recommendation=_recommendation(food, components),
        components=components,
    )


def _recommendation(food: FoodRecord, components: dict[str, str] | None) -> str:
    if food.rating == "low":
        if food.safe_serving:
            return f"{SAFE_MARKER} Safe to eat in servings of {food.safe_serving}"
        return f"{SAFE_MARKER} Generally safe for low FODMAP diet"

    if food.rating == "moderate":
        if food.safe_serving:
            return (
                f"{CAUTION_MARKER} Moderate FODMAP. Stick to {food.safe_serving} "
                "per sitting to stay low FODMAP."
            )
        return f"{CAUTION_MARKER} Moderate FODMAP. Keep portions small."

    if components:
        flagged = [
            name for name, level in components.items() if level in {"medium", "high"}
        ]
        if flagged:
            return (
                f"{AVOID_MARKER} High in {', '.join(flagged)}. "
                "Avoid or consume very small amounts."
            )
    text = f"{AVOID_MARKER} Not recommended for low FODMAP diet"
    if food.alternatives:
        text += f". Try {', '.join(food.alternatives)} instead."
    return text
