"""In-memory keyed ledger of ingredients and products."""

from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime
from typing import Callable, Sequence

from .errors import InvalidInputError, NotFoundError, UnknownOrUnavailableIngredientError
from .events import EventLog
from .identity import AccessGate
from .models import ApprovalRecord, EventType, Ingredient, LedgerCounts, Product, Vote
from .resolver import resolve_suppliers

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def _require_text(value: str | None, field_name: str) -> str:
    text = (value or "").strip()
    if not text:
        raise InvalidInputError(f"{field_name} required")
    return text


class LedgerStore:
    """Owned arena of ingredients and products indexed by monotonically allocated IDs.

    The per-product vote map and approval history live here too and change
    under the same lock as the product record. ``lock`` is shared with the
    approval state machine and the query engine: every mutation and every
    snapshot read runs while holding it.
    """

    def __init__(
        self,
        *,
        events: EventLog | None = None,
        gate: AccessGate | None = None,
        clock: Clock = utc_now,
        max_ingredients_per_product: int = 256,
    ) -> None:
        self.events = events if events is not None else EventLog()
        self.gate = gate if gate is not None else AccessGate()
        self.clock = clock
        self.max_ingredients_per_product = max_ingredients_per_product
        self.lock = threading.RLock()
        self._ingredients: dict[int, Ingredient] = {}
        self._products: dict[int, Product] = {}
        self._votes: dict[int, dict[str, Vote]] = {}
        self._history: dict[int, list[ApprovalRecord]] = {}
        self._next_ingredient_id = 1
        self._next_product_id = 1

    # ------------------------------------------------------------------
    # Counters
    # ------------------------------------------------------------------

    @property
    def next_ingredient_id(self) -> int:
        with self.lock:
            return self._next_ingredient_id

    @property
    def next_product_id(self) -> int:
        with self.lock:
            return self._next_product_id

    def counts(self) -> LedgerCounts:
        with self.lock:
            return LedgerCounts(ingredients=len(self._ingredients), products=len(self._products))

    # ------------------------------------------------------------------
    # Ingredients
    # ------------------------------------------------------------------

    def add_ingredient(self, name: str, supplier: str, category: str, *, caller: str) -> int:
        """Record a new ingredient and return its ID.

        Raises:
            InvalidInputError: If name or category is blank, or supplier/caller is the null identity.
        """
        clean_name = _require_text(name, "Name")
        clean_category = _require_text(category, "Category")
        supplier_id = self.gate.resolve(supplier, field_name="supplier")
        actor = self.gate.resolve(caller)

        with self.lock:
            ingredient_id = self._next_ingredient_id
            ingredient = Ingredient(
                id=ingredient_id,
                name=clean_name,
                supplier=supplier_id,
                category=clean_category,
                available=True,
                created_at=self.clock(),
            )
            self._ingredients[ingredient_id] = ingredient
            self._next_ingredient_id += 1
            sealed = self.events.seal(
                EventType.INGREDIENT_ADDED,
                entity_id=ingredient_id,
                actor=actor,
                timestamp=ingredient.created_at,
                payload={"name": clean_name, "supplier": supplier_id, "category": clean_category},
            )
        self.events.publish([sealed])
        logger.info("Added ingredient %d (%s) from supplier %s", ingredient_id, clean_name, supplier_id)
        return ingredient_id

    def mark_ingredient_unavailable(self, ingredient_id: int, *, caller: str) -> Ingredient:
        """Retire an ingredient from future products. Existing products keep their snapshot."""
        actor = self.gate.resolve(caller)
        with self.lock:
            ingredient = self._ingredient(ingredient_id)
            if not ingredient.available:
                return ingredient.model_copy()
            ingredient.available = False
            sealed = self.events.seal(
                EventType.INGREDIENT_MARKED_UNAVAILABLE,
                entity_id=ingredient_id,
                actor=actor,
                timestamp=self.clock(),
            )
            retired = ingredient.model_copy()
        self.events.publish([sealed])
        logger.info("Ingredient %d marked unavailable by %s", ingredient_id, actor)
        return retired

    def get_ingredient(self, ingredient_id: int) -> Ingredient:
        with self.lock:
            return self._ingredient(ingredient_id).model_copy()

    def available_ingredient(self, ingredient_id: int) -> Ingredient:
        """Return an ingredient usable in a new product, or raise UnknownOrUnavailableIngredientError."""
        with self.lock:
            ingredient = self._ingredients.get(ingredient_id)
            if ingredient is None or not ingredient.available:
                raise UnknownOrUnavailableIngredientError(ingredient_id)
            return ingredient.model_copy()

    def list_ingredients(self) -> list[Ingredient]:
        with self.lock:
            return [self._ingredients[key].model_copy() for key in sorted(self._ingredients)]

    def _ingredient(self, ingredient_id: int) -> Ingredient:
        ingredient = self._ingredients.get(ingredient_id)
        if ingredient is None:
            raise NotFoundError(f"Invalid ingredient ID: {ingredient_id}")
        return ingredient

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def create_product(self, name: str, batch_id: str, ingredient_ids: Sequence[int], *, caller: str) -> int:
        """Create a product batch and freeze its required-approver set.

        Raises:
            InvalidInputError: If name/batch_id is blank, the ingredient list is empty or too long,
                or caller is the null identity.
            UnknownOrUnavailableIngredientError: If any referenced ingredient is unknown or unavailable.
        """
        clean_name = _require_text(name, "Name")
        clean_batch = _require_text(batch_id, "Batch ID")
        references = list(ingredient_ids)
        if not references:
            raise InvalidInputError("Need at least one ingredient")
        if len(references) > self.max_ingredients_per_product:
            raise InvalidInputError(
                f"Too many ingredients: {len(references)} > {self.max_ingredients_per_product}"
            )
        actor = self.gate.resolve(caller)

        with self.lock:
            suppliers = resolve_suppliers(self, references)
            product_id = self._next_product_id
            product = Product(
                id=product_id,
                name=clean_name,
                batch_id=clean_batch,
                ingredient_ids=references,
                suppliers=suppliers,
                required_count=len(suppliers),
                created_at=self.clock(),
            )
            self._products[product_id] = product
            self._votes[product_id] = {supplier: Vote.NO_VOTE for supplier in suppliers}
            self._history[product_id] = []
            self._next_product_id += 1
            sealed = self.events.seal(
                EventType.PRODUCT_CREATED,
                entity_id=product_id,
                actor=actor,
                timestamp=product.created_at,
                payload={"batch_id": clean_batch, "ingredient_ids": references, "suppliers": suppliers},
            )
        self.events.publish([sealed])
        logger.info(
            "Created product %d (%s, batch %s) requiring %d supplier approvals",
            product_id,
            clean_name,
            clean_batch,
            len(suppliers),
        )
        return product_id

    def get_product(self, product_id: int) -> Product:
        with self.lock:
            return self.product_ref(product_id).model_copy(deep=True)

    def list_products(self) -> list[Product]:
        with self.lock:
            return [self._products[key].model_copy(deep=True) for key in sorted(self._products)]

    def product_ref(self, product_id: int) -> Product:
        """Live product record; callers must hold ``lock`` and must not leak it."""
        product = self._products.get(product_id)
        if product is None:
            raise NotFoundError(f"Invalid product ID: {product_id}")
        return product

    def votes_ref(self, product_id: int) -> dict[str, Vote]:
        self.product_ref(product_id)
        return self._votes[product_id]

    def history_ref(self, product_id: int) -> list[ApprovalRecord]:
        self.product_ref(product_id)
        return self._history[product_id]
