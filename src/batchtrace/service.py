from __future__ import annotations

from typing import Sequence

from .approvals import ApprovalStateMachine
from .events import EventLog
from .identity import AccessGate
from .ledger import Clock, LedgerStore, utc_now
from .models import (
    ApprovalRecord,
    Ingredient,
    LedgerCounts,
    Product,
    ProductProgress,
    Role,
    SupplierStats,
    TraceabilityReport,
    User,
    Vote,
)
from .settings import RuntimeSettings
from .traceability import TraceabilityQueryEngine
from .users import UserRegistry


class SupplyChainService:
    """Single entry point over the ledger, voting engine, query engine and user registry.

    All collaborators share one ``EventLog`` and one ``AccessGate``; the
    store's lock serializes every ledger mutation.
    """

    def __init__(self, settings: RuntimeSettings | None = None, *, clock: Clock = utc_now) -> None:
        self.settings = settings if settings is not None else RuntimeSettings.from_env()
        self.events = EventLog()
        self.gate = AccessGate()
        self.store = LedgerStore(
            events=self.events,
            gate=self.gate,
            clock=clock,
            max_ingredients_per_product=self.settings.max_ingredients_per_product,
        )
        self.approvals = ApprovalStateMachine(self.store)
        self.queries = TraceabilityQueryEngine(self.store)
        self.users = UserRegistry(
            self.settings.owner_identity,
            owner_display_name=self.settings.owner_display_name,
            gate=self.gate,
            events=self.events,
            clock=clock,
        )

    @property
    def owner(self) -> str:
        return self.users.owner

    # Mutations

    def add_ingredient(self, name: str, supplier: str, category: str, *, caller: str) -> int:
        return self.store.add_ingredient(name, supplier, category, caller=caller)

    def mark_ingredient_unavailable(self, ingredient_id: int, *, caller: str) -> Ingredient:
        return self.store.mark_ingredient_unavailable(ingredient_id, caller=caller)

    def create_product(self, name: str, batch_id: str, ingredient_ids: Sequence[int], *, caller: str) -> int:
        return self.store.create_product(name, batch_id, ingredient_ids, caller=caller)

    def approve_product(self, product_id: int, *, caller: str) -> Product:
        return self.approvals.approve(product_id, caller=caller)

    def reject_product(self, product_id: int, *, caller: str) -> Product:
        return self.approvals.reject(product_id, caller=caller)

    def create_user(self, identity: str, role: Role | str, display_name: str, *, caller: str) -> User:
        return self.users.create_user(identity, role, display_name, caller=caller)

    # Reads

    def get_ingredient(self, ingredient_id: int) -> Ingredient:
        return self.queries.get_ingredient(ingredient_id)

    def get_product(self, product_id: int) -> Product:
        return self.queries.get_product(product_id)

    def get_traceability(self, product_id: int) -> TraceabilityReport:
        return self.queries.get_traceability(product_id)

    def get_progress(self, product_id: int) -> ProductProgress:
        return self.queries.get_progress(product_id)

    def get_vote(self, product_id: int, supplier: str) -> Vote:
        return self.approvals.get_vote(product_id, supplier)

    def get_history(self, product_id: int) -> list[ApprovalRecord]:
        return self.approvals.get_history(product_id)

    def get_all_products(self) -> list[Product]:
        return self.queries.list_products()

    def get_all_available_ingredients(self) -> list[Ingredient]:
        return self.queries.list_available_ingredients()

    def get_supplier_stats(self, supplier: str) -> SupplierStats:
        return self.queries.supplier_stats(supplier)

    def get_counts(self) -> LedgerCounts:
        return self.store.counts()
