"""Per-product multi-supplier voting engine."""

from __future__ import annotations

import logging

from .errors import ProductFinalizedError
from .ledger import LedgerStore
from .models import (
    PRODUCT_STATUS_TRANSITIONS,
    TERMINAL_PRODUCT_STATUSES,
    ApprovalRecord,
    EventType,
    Product,
    ProductStatus,
    Vote,
)

logger = logging.getLogger(__name__)


class ApprovalStateMachine:
    """Drives products from ``created`` to ``approved`` or ``rejected``.

    Approval needs every supplier in the product's frozen supplier set; a
    single rejection finalizes the product at once. Each supplier votes once.
    """

    def __init__(self, store: LedgerStore) -> None:
        self.store = store

    def approve(self, product_id: int, *, caller: str) -> Product:
        """Record ``caller``'s approval and return a snapshot of the product.

        Raises:
            NotFoundError: If the product ID was never allocated.
            NotAuthorizedSupplierError: If caller is not a supplier of the product or already voted.
            ProductFinalizedError: If the product was already rejected by another supplier.
        """
        return self._vote(product_id, caller, Vote.APPROVED)

    def reject(self, product_id: int, *, caller: str) -> Product:
        """Record ``caller``'s rejection, finalizing the product immediately."""
        return self._vote(product_id, caller, Vote.REJECTED)

    def get_vote(self, product_id: int, supplier: str) -> Vote:
        store = self.store
        supplier_id = store.gate.resolve(supplier, field_name="supplier")
        with store.lock:
            return store.votes_ref(product_id).get(supplier_id, Vote.NO_VOTE)

    def get_history(self, product_id: int) -> list[ApprovalRecord]:
        with self.store.lock:
            return list(self.store.history_ref(product_id))

    def _vote(self, product_id: int, caller: str, decision: Vote) -> Product:
        store = self.store
        voter = store.gate.resolve(caller)
        with store.lock:
            product = store.product_ref(product_id)
            votes = store.votes_ref(product_id)
            store.gate.require_voter(product, votes, voter)
            if product.is_finalized:
                raise ProductFinalizedError(product_id, voter, product.status.value)

            now = store.clock()
            if decision == Vote.APPROVED:
                approved_count = product.approved_count + 1
                target = ProductStatus.APPROVED if approved_count == product.required_count else ProductStatus.PENDING
            else:
                approved_count = product.approved_count
                target = ProductStatus.REJECTED
            self._assert_transition(product, target)

            # All checks passed; apply every field change together.
            votes[voter] = decision
            store.history_ref(product_id).append(ApprovalRecord(supplier=voter, decision=decision, responded_at=now))
            product.approved_count = approved_count
            product.status = target
            if target in TERMINAL_PRODUCT_STATUSES:
                product.finalized_at = now

            sealed = []
            payload = {"approved_count": product.approved_count, "required_count": product.required_count}
            if decision == Vote.APPROVED:
                sealed.append(
                    store.events.seal(
                        EventType.PRODUCT_APPROVED, entity_id=product_id, actor=voter, timestamp=now, payload=payload
                    )
                )
                if target == ProductStatus.APPROVED:
                    sealed.append(
                        store.events.seal(
                            EventType.PRODUCT_FULLY_APPROVED,
                            entity_id=product_id,
                            actor=voter,
                            timestamp=now,
                            payload=payload,
                        )
                    )
            else:
                sealed.append(
                    store.events.seal(
                        EventType.PRODUCT_REJECTED, entity_id=product_id, actor=voter, timestamp=now, payload=payload
                    )
                )
            snapshot = product.model_copy(deep=True)

        store.events.publish(sealed)
        logger.info(
            "Product %d: %s by %s (%d/%d) -> %s",
            product_id,
            decision.value,
            voter,
            snapshot.approved_count,
            snapshot.required_count,
            snapshot.status.value,
        )
        return snapshot

    @staticmethod
    def _assert_transition(product: Product, target: ProductStatus) -> None:
        allowed = PRODUCT_STATUS_TRANSITIONS[product.status]
        if target not in allowed:
            raise ValueError(
                f"Illegal product status transition for {product.id}: {product.status.value} -> {target.value}"
            )
