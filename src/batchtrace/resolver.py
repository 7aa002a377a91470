from __future__ import annotations

from typing import Iterable, Protocol

from .models import Ingredient


class IngredientSource(Protocol):
    def available_ingredient(self, ingredient_id: int) -> Ingredient: ...


def resolve_suppliers(source: IngredientSource, ingredient_ids: Iterable[int]) -> list[str]:
    """Return the distinct suppliers behind *ingredient_ids*, in first-seen order.

    Every reference is looked up before anything is returned, so an unknown or
    unavailable ingredient anywhere in the list raises
    ``UnknownOrUnavailableIngredientError`` and no partial set escapes.
    """
    ingredients = [source.available_ingredient(ingredient_id) for ingredient_id in ingredient_ids]
    # dict preserves insertion order; first occurrence wins.
    return list(dict.fromkeys(ingredient.supplier for ingredient in ingredients))
