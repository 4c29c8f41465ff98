"""Food search endpoints."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, Request

from fodmap_helper.api.models import FoodPayload, RatingPayload
from fodmap_helper.domain.foods import RATINGS
from fodmap_helper.errors import NotFoundError, ValidationError
from fodmap_helper.services.rating import rate

if TYPE_CHECKING:
    from fodmap_helper.containers import AppContainer
    from fodmap_helper.domain.foods import FoodRecord

router = APIRouter(tags=["search"])
_logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2


@router.get("/search")
def search_foods(  # noqa: PLR0913
    request: Request,
    q: str | None = None,
    id: str | None = None,  # noqa: A002
    category: str | None = None,
    rating: str | None = None,
) -> dict[str, object]:
    """Look up foods by id, category, rating bucket, or name."""
    container: AppContainer = request.app.state.container
    catalog = container.catalog
    _logger.info(
        "FODMAP search: query=%s category=%s rating=%s id=%s", q, category, rating, id
    )

    if id:
        food = catalog.find_by_id(id)
        if food is None:
            raise NotFoundError("Food not found")
        return _rated(food)

    if category:
        results = [_rated(food) for food in catalog.filter_by_category(category)]
        return {"results": results, "total": len(results)}

    if rating:
        if rating not in RATINGS:
            raise ValidationError("Rating must be one of: low, moderate, high")
        results = [_rated(food) for food in catalog.filter_by_rating(rating)]
        return {"results": results, "total": len(results)}

    if q is not None:
        if len(q.strip()) < MIN_QUERY_LENGTH:
            raise ValidationError("Query must be at least 2 characters long")
        results = [_rated(food) for food in catalog.search(q)]
        return {"results": results, "total": len(results), "query": q}

    results = [_rated(food) for food in catalog.list_all()]
    return {"results": results, "total": len(results)}


@router.get("/search/categories")
def list_categories(request: Request) -> dict[str, object]:
    """Return the distinct food categories."""
    container: AppContainer = request.app.state.container
    return {"categories": container.catalog.categories()}


def _rated(food: FoodRecord) -> dict[str, object]:
    return {
        "food": FoodPayload.from_record(food).to_json_dict(),
        "rating": RatingPayload.from_result(rate(food)).to_json_dict(),
    }
