from importlib.metadata import version

from .approvals import ApprovalStateMachine
from .canonical import canonical_digest, to_canonical_json
from .errors import (
    AccessDeniedError,
    AlreadyRegisteredError,
    InvalidInputError,
    LedgerError,
    NotAuthorizedSupplierError,
    NotFoundError,
    NotYetApprovedError,
    ProductFinalizedError,
    UnknownOrUnavailableIngredientError,
)
from .events import EventLog
from .identity import NULL_IDENTITY, AccessGate, is_null_identity, normalize_identity
from .ledger import LedgerStore
from .models import (
    PRODUCT_STATUS_TRANSITIONS,
    ApprovalRecord,
    EventType,
    Ingredient,
    LedgerCounts,
    LedgerEvent,
    Product,
    ProductProgress,
    ProductStatus,
    Role,
    SupplierStats,
    TraceabilityIngredient,
    TraceabilityReport,
    User,
    UserStats,
    Vote,
)
from .resolver import resolve_suppliers
from .service import SupplyChainService
from .settings import RuntimeSettings
from .traceability import TraceabilityQueryEngine
from .users import UserRegistry


def get_version() -> str:
    try:
        return version("batchtrace")
    except Exception:
        return "0.0.0"


__all__ = [
    "AccessDeniedError",
    "AccessGate",
    "AlreadyRegisteredError",
    "ApprovalRecord",
    "ApprovalStateMachine",
    "EventLog",
    "EventType",
    "Ingredient",
    "InvalidInputError",
    "LedgerCounts",
    "LedgerError",
    "LedgerEvent",
    "LedgerStore",
    "NotAuthorizedSupplierError",
    "NotFoundError",
    "NotYetApprovedError",
    "Product",
    "ProductFinalizedError",
    "ProductProgress",
    "ProductStatus",
    "Role",
    "RuntimeSettings",
    "SupplierStats",
    "SupplyChainService",
    "TraceabilityIngredient",
    "TraceabilityQueryEngine",
    "TraceabilityReport",
    "UnknownOrUnavailableIngredientError",
    "User",
    "UserRegistry",
    "UserStats",
    "Vote",
    "NULL_IDENTITY",
    "PRODUCT_STATUS_TRANSITIONS",
    "canonical_digest",
    "get_version",
    "is_null_identity",
    "normalize_identity",
    "resolve_suppliers",
    "to_canonical_json",
]
