from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProductStatus(str, Enum):
    CREATED = "created"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


TERMINAL_PRODUCT_STATUSES = frozenset({ProductStatus.APPROVED, ProductStatus.REJECTED})

PRODUCT_STATUS_TRANSITIONS: dict[ProductStatus, set[ProductStatus]] = {
    ProductStatus.CREATED: {ProductStatus.PENDING, ProductStatus.APPROVED, ProductStatus.REJECTED},
    ProductStatus.PENDING: {ProductStatus.PENDING, ProductStatus.APPROVED, ProductStatus.REJECTED},
    ProductStatus.APPROVED: set(),
    ProductStatus.REJECTED: set(),
}


class Vote(str, Enum):
    NO_VOTE = "no_vote"
    APPROVED = "approved"
    REJECTED = "rejected"


class Role(str, Enum):
    UNREGISTERED = "unregistered"
    MANAGER = "manager"
    SELLER = "seller"
    SUPPLIER = "supplier"


class EventType(str, Enum):
    INGREDIENT_ADDED = "IngredientAdded"
    INGREDIENT_MARKED_UNAVAILABLE = "IngredientMarkedUnavailable"
    PRODUCT_CREATED = "ProductCreated"
    PRODUCT_APPROVED = "ProductApproved"
    PRODUCT_REJECTED = "ProductRejected"
    PRODUCT_FULLY_APPROVED = "ProductFullyApproved"
    USER_CREATED = "UserCreated"


class Ingredient(BaseModel):
    """Raw ingredient as recorded in the ledger."""

    id: int
    name: str
    supplier: str
    category: str
    available: bool = True
    created_at: datetime


class Product(BaseModel):
    """Product batch with the supplier set frozen at creation time."""

    id: int
    name: str
    batch_id: str
    ingredient_ids: list[int]
    suppliers: list[str]
    approved_count: int = 0
    required_count: int
    status: ProductStatus = ProductStatus.CREATED
    created_at: datetime
    finalized_at: datetime | None = None

    @property
    def is_finalized(self) -> bool:
        return self.status in TERMINAL_PRODUCT_STATUSES


class ApprovalRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    supplier: str
    decision: Vote
    responded_at: datetime


class LedgerEvent(BaseModel):
    """One sealed entry of the append-only notification log."""

    model_config = ConfigDict(frozen=True)

    sequence: int
    event_type: EventType
    entity_id: str
    actor: str
    timestamp: datetime
    payload: dict[str, Any] = Field(default_factory=dict)
    previous_hash: str | None = None
    event_hash: str = ""

    def body(self) -> dict[str, Any]:
        """Return the hashed portion of the event (everything but ``event_hash``)."""
        return self.model_dump(mode="json", exclude={"event_hash"})


class User(BaseModel):
    identity: str
    role: Role
    display_name: str
    registered_at: datetime
    registered_by: str


class LedgerCounts(BaseModel):
    ingredients: int
    products: int


class TraceabilityIngredient(BaseModel):
    id: int
    name: str
    category: str
    supplier: str


class TraceabilityReport(BaseModel):
    product_id: int
    name: str
    batch_id: str
    status: ProductStatus
    suppliers: list[str]
    ingredients: list[TraceabilityIngredient]
    approvals: list[ApprovalRecord]
    created_at: datetime
    finalized_at: datetime


class ProductProgress(BaseModel):
    product_id: int
    approved_count: int
    required_count: int
    status: ProductStatus
    awaiting: list[str]


class SupplierStats(BaseModel):
    supplier: str
    products: int = 0
    approved: int = 0
    rejected: int = 0
    pending: int = 0


class UserStats(BaseModel):
    managers: int = 0
    sellers: int = 0
    suppliers: int = 0
