from __future__ import annotations

import pytest

from batchtrace import NotFoundError, NotYetApprovedError, ProductStatus, SupplyChainService, Vote

from conftest import ADMIN, OUTSIDER, SUPPLIER_1, SUPPLIER_2


def _approve_all(service: SupplyChainService, product_id: int) -> None:
    for supplier in service.get_product(product_id).suppliers:
        service.approve_product(product_id, caller=supplier)


def test_traceability_hidden_until_approved(service_with_product: SupplyChainService) -> None:
    service = service_with_product
    with pytest.raises(NotYetApprovedError):
        service.get_traceability(1)

    service.approve_product(1, caller=SUPPLIER_1)
    assert service.get_product(1).status == ProductStatus.PENDING
    with pytest.raises(NotYetApprovedError) as excinfo:
        service.get_traceability(1)
    assert excinfo.value.status == "pending"


def test_traceability_hidden_for_rejected_product(service_with_product: SupplyChainService) -> None:
    service_with_product.reject_product(1, caller=SUPPLIER_1)
    with pytest.raises(NotYetApprovedError):
        service_with_product.get_traceability(1)


def test_traceability_unknown_product(service: SupplyChainService) -> None:
    with pytest.raises(NotFoundError):
        service.get_traceability(1)


def test_traceability_joins_ingredients_in_stored_order(service: SupplyChainService) -> None:
    service.add_ingredient("Tomatoes", SUPPLIER_1, "Vegetables", caller=ADMIN)
    service.add_ingredient("Basil", SUPPLIER_2, "Herbs", caller=ADMIN)
    service.add_ingredient("Mozzarella", SUPPLIER_1, "Dairy", caller=ADMIN)
    service.create_product("Margherita Pizza", "BATCH001", [3, 1, 2], caller=ADMIN)
    _approve_all(service, 1)

    report = service.get_traceability(1)

    assert report.product_id == 1
    assert report.batch_id == "BATCH001"
    assert report.status == ProductStatus.APPROVED
    assert report.suppliers == [SUPPLIER_1, SUPPLIER_2]
    assert [(item.id, item.name, item.category) for item in report.ingredients] == [
        (3, "Mozzarella", "Dairy"),
        (1, "Tomatoes", "Vegetables"),
        (2, "Basil", "Herbs"),
    ]
    assert [record.decision for record in report.approvals] == [Vote.APPROVED, Vote.APPROVED]
    assert report.finalized_at == service.get_product(1).finalized_at


def test_traceability_survives_ingredient_retirement(service_with_product: SupplyChainService) -> None:
    service = service_with_product
    _approve_all(service, 1)
    service.mark_ingredient_unavailable(2, caller=ADMIN)
    assert [item.name for item in service.get_traceability(1).ingredients] == ["Tomatoes", "Basil"]


def test_progress_tracks_awaiting_suppliers(service_with_product: SupplyChainService) -> None:
    service = service_with_product
    progress = service.get_progress(1)
    assert (progress.approved_count, progress.required_count) == (0, 2)
    assert progress.awaiting == [SUPPLIER_1, SUPPLIER_2]

    service.approve_product(1, caller=SUPPLIER_2)
    progress = service.get_progress(1)
    assert progress.approved_count == 1
    assert progress.status == ProductStatus.PENDING
    assert progress.awaiting == [SUPPLIER_1]

    with pytest.raises(NotFoundError):
        service.get_progress(7)


def test_bulk_listing_and_status_filter(service_with_product: SupplyChainService) -> None:
    service = service_with_product
    service.create_product("Second", "BATCH002", [1], caller=ADMIN)
    service.approve_product(2, caller=SUPPLIER_1)

    assert [product.id for product in service.get_all_products()] == [1, 2]
    assert [product.id for product in service.queries.products_by_status(ProductStatus.APPROVED)] == [2]
    assert [product.id for product in service.queries.products_by_status(ProductStatus.CREATED)] == [1]


def test_pending_for_supplier(service_with_product: SupplyChainService) -> None:
    service = service_with_product
    service.create_product("Second", "BATCH002", [1], caller=ADMIN)
    service.create_product("Third", "BATCH003", [1, 2], caller=ADMIN)

    assert service.queries.pending_for_supplier(SUPPLIER_1) == [1, 2, 3]
    assert service.queries.pending_for_supplier(SUPPLIER_2) == [1, 3]

    service.reject_product(3, caller=SUPPLIER_2)
    service.approve_product(1, caller=SUPPLIER_1)
    assert service.queries.pending_for_supplier(SUPPLIER_1) == [2]
    assert service.queries.pending_for_supplier(SUPPLIER_2) == [1]
    assert service.queries.pending_for_supplier(OUTSIDER) == []


def test_supplier_stats(service_with_product: SupplyChainService) -> None:
    service = service_with_product
    service.create_product("Second", "BATCH002", [1], caller=ADMIN)
    service.create_product("Third", "BATCH003", [1, 2], caller=ADMIN)
    service.approve_product(1, caller=SUPPLIER_1)
    service.reject_product(3, caller=SUPPLIER_1)

    stats = service.get_supplier_stats(SUPPLIER_1)
    assert (stats.products, stats.approved, stats.rejected, stats.pending) == (3, 1, 1, 1)

    # Supplier 2 never voted on product 3, but it is finalized, so it is not pending.
    stats = service.get_supplier_stats(SUPPLIER_2)
    assert (stats.products, stats.approved, stats.rejected, stats.pending) == (2, 0, 0, 1)
