"""Replay a JSON operation script against a fresh ledger."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, ValidationError

from .models import ProductStatus, Role
from .service import SupplyChainService

logger = logging.getLogger(__name__)


class AddIngredientOp(BaseModel):
    op: Literal["add_ingredient"]
    caller: str
    name: str
    supplier: str
    category: str


class CreateProductOp(BaseModel):
    op: Literal["create_product"]
    caller: str
    name: str
    batch_id: str
    ingredient_ids: list[int]


class MarkUnavailableOp(BaseModel):
    op: Literal["mark_unavailable"]
    caller: str
    ingredient_id: int


class ApproveOp(BaseModel):
    op: Literal["approve"]
    caller: str
    product_id: int


class RejectOp(BaseModel):
    op: Literal["reject"]
    caller: str
    product_id: int


class CreateUserOp(BaseModel):
    op: Literal["create_user"]
    caller: str
    identity: str
    role: Role
    display_name: str


Operation = Annotated[
    Union[AddIngredientOp, CreateProductOp, MarkUnavailableOp, ApproveOp, RejectOp, CreateUserOp],
    Field(discriminator="op"),
]


class ReplayScript(BaseModel):
    operations: list[Operation]


def load_script(path: Path) -> ReplayScript:
    """Read and validate a replay script.

    Raises:
        FileNotFoundError: If the script does not exist.
        ValueError: If the file is not valid JSON or fails validation.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Replay script not found: {path}")
    text = path.read_text(encoding="utf-8")
    try:
        return ReplayScript.model_validate_json(text)
    except ValidationError as exc:
        raise ValueError(f"replay script at {path} failed validation: {exc}") from exc


def apply_operation(service: SupplyChainService, operation: Operation) -> object:
    if isinstance(operation, AddIngredientOp):
        return service.add_ingredient(operation.name, operation.supplier, operation.category, caller=operation.caller)
    if isinstance(operation, CreateProductOp):
        return service.create_product(
            operation.name, operation.batch_id, operation.ingredient_ids, caller=operation.caller
        )
    if isinstance(operation, MarkUnavailableOp):
        return service.mark_ingredient_unavailable(operation.ingredient_id, caller=operation.caller)
    if isinstance(operation, ApproveOp):
        return service.approve_product(operation.product_id, caller=operation.caller)
    if isinstance(operation, RejectOp):
        return service.reject_product(operation.product_id, caller=operation.caller)
    if isinstance(operation, CreateUserOp):
        return service.create_user(operation.identity, operation.role, operation.display_name, caller=operation.caller)
    raise TypeError(f"Unsupported operation: {type(operation).__name__}")


def run_script(service: SupplyChainService, script: ReplayScript) -> int:
    """Apply every operation in order; ledger errors propagate and stop the run."""
    for index, operation in enumerate(script.operations, start=1):
        logger.debug("replay step %d: %s", index, operation.op)
        apply_operation(service, operation)
    return len(script.operations)


def demo_script() -> ReplayScript:
    """Two suppliers, three ingredients, one approved and one rejected batch."""
    raw = {
        "operations": [
            {"op": "add_ingredient", "caller": "0xadmin", "name": "Organic Tomatoes", "supplier": "0xsupplier1", "category": "Vegetables"},
            {"op": "add_ingredient", "caller": "0xadmin", "name": "Fresh Basil", "supplier": "0xsupplier2", "category": "Herbs"},
            {"op": "add_ingredient", "caller": "0xadmin", "name": "Mozzarella", "supplier": "0xsupplier1", "category": "Dairy"},
            {"op": "create_product", "caller": "0xadmin", "name": "Margherita Pizza", "batch_id": "BATCH001", "ingredient_ids": [1, 2, 3]},
            {"op": "create_product", "caller": "0xadmin", "name": "Caprese Salad", "batch_id": "BATCH002", "ingredient_ids": [1, 2]},
            {"op": "approve", "caller": "0xsupplier1", "product_id": 1},
            {"op": "approve", "caller": "0xsupplier2", "product_id": 1},
            {"op": "approve", "caller": "0xsupplier1", "product_id": 2},
            {"op": "reject", "caller": "0xsupplier2", "product_id": 2},
        ]
    }
    return ReplayScript.model_validate(raw)


def summarize(service: SupplyChainService) -> list[dict[str, object]]:
    """One summary per product, with the traceability report attached when approved."""
    summaries: list[dict[str, object]] = []
    for product in service.get_all_products():
        summary: dict[str, object] = {
            "product_id": product.id,
            "name": product.name,
            "batch_id": product.batch_id,
            "status": product.status,
            "approved_count": product.approved_count,
            "required_count": product.required_count,
            "suppliers": product.suppliers,
        }
        if product.status == ProductStatus.APPROVED:
            summary["traceability"] = service.get_traceability(product.id)
        summaries.append(summary)
    return summaries
