"""Grounding context assembly for chat prompts."""

from dataclasses import dataclass

from fodmap_helper.domain.foods import FoodContext, FoodRecord
from fodmap_helper.services.catalog import CatalogStore
from fodmap_helper.services.rating import rate

CONTEXT_HEADER = "FODMAP FOOD INFORMATION:\n"


@dataclass
class ContextAssembler:
    """Builds the food grounding block for a user utterance."""

    catalog: CatalogStore

    def build_context(self, utterance: str) -> FoodContext:
        """Match foods in the utterance and render their ratings."""
        matches = self.catalog.search(utterance)
        if not matches:
            matches = self.catalog.find_mentions(utterance)
        if not matches:
            return FoodContext(prompt_block="", matches=[])
        blocks = [render_food_block(food) for food in matches]
        return FoodContext(prompt_block=CONTEXT_HEADER + "".join(blocks), matches=matches)


def render_food_block(food: FoodRecord) -> str:
    """Render one food as grounding text."""
    rating = rate(food)
    headline = f"{food.name}: {rating.verdict.upper()} FODMAP"
    if food.category:
        headline += f" ({food.category})"
    if food.safe_serving:
        headline += f" - Safe serving: {food.safe_serving}"
    lines = [headline]
    if food.tips:
        lines.append(f"Tips: {food.tips}")
    if food.alternatives:
        lines.append(f"Alternatives: {', '.join(food.alternatives)}")
    lines.append(f"Recommendation: {rating.recommendation}")
    return "\n".join(lines) + "\n\n"
