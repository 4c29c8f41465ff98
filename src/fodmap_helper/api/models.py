"""Pydantic models for the chat protocol and search payloads."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from fodmap_helper.domain.chat import ProtocolDelta
from fodmap_helper.domain.foods import FoodRecord, RatingResult


class ChatMessagePayload(BaseModel):
    """Chat message in a request body."""

    role: str = "user"
    content: str | None = None


class ChatContextPayload(BaseModel):
    """Optional client context for a chat request."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    session_id: str | None = Field(default=None, alias="sessionId")
    user_id: str | None = Field(default=None, alias="userId")


class ChatRequestPayload(BaseModel):
    """Chat request body."""

    messages: list[ChatMessagePayload] = Field(default_factory=list)
    context: ChatContextPayload | None = None


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_json_dict(self) -> dict[str, object]:
        """Dump using wire names, dropping absent fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class FodmapDetailsPayload(_CamelModel):
    """Severity codes for category-bearing catalogs."""

    oligos: int
    fructose: int
    polyols: int
    lactose: int


class FoodPayload(_CamelModel):
    """Food summary as sent to clients."""

    id: str
    name: str
    rating: str
    category: str | None = None
    safe_serving: str | None = Field(default=None, alias="safeServing")
    tips: str | None = None
    alternatives: list[str] = Field(default_factory=list)
    details: FodmapDetailsPayload | None = None

    @classmethod
    def from_record(cls, food: FoodRecord) -> "FoodPayload":
        """Build the payload for a catalog record."""
        details = None
        if food.details is not None:
            details = FodmapDetailsPayload(
                oligos=food.details.oligos,
                fructose=food.details.fructose,
                polyols=food.details.polyols,
                lactose=food.details.lactose,
            )
        return cls(
            id=food.id,
            name=food.name,
            rating=food.rating,
            category=food.category,
            safe_serving=food.safe_serving,
            tips=food.tips,
            alternatives=list(food.alternatives),
            details=details,
        )


class RatingPayload(_CamelModel):
    """Derived rating as sent to clients."""

    food: FoodPayload
    rating: str
    safe_for_low_fodmap: bool = Field(alias="safeForLowFodmap")
    recommendation: str
    components: dict[str, str] | None = None
    safe_serving: str | None = Field(default=None, alias="safeServing")
    tips: str | None = None
    alternatives: list[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: RatingResult) -> "RatingPayload":
        """Build the payload for a rating result."""
        return cls(
            food=FoodPayload.from_record(result.food),
            rating=result.verdict,
            safe_for_low_fodmap=result.safe_for_low_fodmap,
            recommendation=result.recommendation,
            components=dict(result.components) if result.components else None,
            safe_serving=result.food.safe_serving,
            tips=result.food.tips,
            alternatives=list(result.food.alternatives),
        )


class DeltaContent(_CamelModel):
    """Text fragment of a delta."""

    content: str
    role: Literal["assistant"] = "assistant"


class DeltaContext(_CamelModel):
    """Side-channel data attached to every delta."""

    session_id: str = Field(alias="sessionId")
    food_results: list[FoodPayload] | None = Field(default=None, alias="foodResults")


class DeltaPayload(_CamelModel):
    """One NDJSON line of the chat stream."""

    delta: DeltaContent
    context: DeltaContext
    finish_reason: str | None = Field(default=None, alias="finishReason")

    @classmethod
    def from_delta(cls, delta: ProtocolDelta) -> "DeltaPayload":
        """Build the wire payload for a protocol delta."""
        food_results = None
        if delta.food_results:
            food_results = [FoodPayload.from_record(food) for food in delta.food_results]
        return cls(
            delta=DeltaContent(content=delta.content),
            context=DeltaContext(
                session_id=delta.session_id, food_results=food_results
            ),
            finish_reason=delta.finish_reason,
        )
