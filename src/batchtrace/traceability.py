"""Read-only joins across products, ingredients, and suppliers."""

from __future__ import annotations

import logging

from .errors import NotYetApprovedError
from .ledger import LedgerStore
from .models import (
    Ingredient,
    Product,
    ProductProgress,
    ProductStatus,
    SupplierStats,
    TraceabilityIngredient,
    TraceabilityReport,
    Vote,
)

logger = logging.getLogger(__name__)


class TraceabilityQueryEngine:
    def __init__(self, store: LedgerStore) -> None:
        self.store = store

    def get_traceability(self, product_id: int) -> TraceabilityReport:
        """Return the provenance of a unanimously approved product.

        Raises:
            NotFoundError: If the product ID was never allocated.
            NotYetApprovedError: If the product is not in ``approved`` status.
        """
        store = self.store
        with store.lock:
            product = store.product_ref(product_id)
            if product.status != ProductStatus.APPROVED or product.finalized_at is None:
                raise NotYetApprovedError(product_id, product.status.value)
            ingredients = [store.get_ingredient(ingredient_id) for ingredient_id in product.ingredient_ids]
            report = TraceabilityReport(
                product_id=product.id,
                name=product.name,
                batch_id=product.batch_id,
                status=product.status,
                suppliers=list(product.suppliers),
                ingredients=[
                    TraceabilityIngredient(
                        id=ingredient.id,
                        name=ingredient.name,
                        category=ingredient.category,
                        supplier=ingredient.supplier,
                    )
                    for ingredient in ingredients
                ],
                approvals=list(store.history_ref(product_id)),
                created_at=product.created_at,
                finalized_at=product.finalized_at,
            )
        logger.debug("traceability served for product %d (%d ingredients)", product_id, len(report.ingredients))
        return report

    def get_progress(self, product_id: int) -> ProductProgress:
        store = self.store
        with store.lock:
            product = store.product_ref(product_id)
            votes = store.votes_ref(product_id)
            return ProductProgress(
                product_id=product.id,
                approved_count=product.approved_count,
                required_count=product.required_count,
                status=product.status,
                awaiting=[supplier for supplier in product.suppliers if votes[supplier] == Vote.NO_VOTE],
            )

    def get_product(self, product_id: int) -> Product:
        return self.store.get_product(product_id)

    def get_ingredient(self, ingredient_id: int) -> Ingredient:
        return self.store.get_ingredient(ingredient_id)

    def list_products(self) -> list[Product]:
        return self.store.list_products()

    def list_available_ingredients(self) -> list[Ingredient]:
        return [ingredient for ingredient in self.store.list_ingredients() if ingredient.available]

    def products_by_status(self, status: ProductStatus) -> list[Product]:
        return [product for product in self.store.list_products() if product.status == status]

    def pending_for_supplier(self, supplier: str) -> list[int]:
        """IDs of non-finalized products still waiting on *supplier*'s vote."""
        store = self.store
        supplier_id = store.gate.resolve(supplier, field_name="supplier")
        pending: list[int] = []
        with store.lock:
            for product in store.list_products():
                if product.is_finalized:
                    continue
                if store.votes_ref(product.id).get(supplier_id) == Vote.NO_VOTE:
                    pending.append(product.id)
        return pending

    def supplier_stats(self, supplier: str) -> SupplierStats:
        store = self.store
        supplier_id = store.gate.resolve(supplier, field_name="supplier")
        stats = SupplierStats(supplier=supplier_id)
        with store.lock:
            for product in store.list_products():
                vote = store.votes_ref(product.id).get(supplier_id)
                if vote is None:
                    continue
                stats.products += 1
                if vote == Vote.APPROVED:
                    stats.approved += 1
                elif vote == Vote.REJECTED:
                    stats.rejected += 1
                elif not product.is_finalized:
                    stats.pending += 1
        return stats
