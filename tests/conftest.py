from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from batchtrace import RuntimeSettings, SupplyChainService

OWNER = "0x" + "a1" * 20
ADMIN = "0x" + "ad" * 20
SUPPLIER_1 = "0x" + "11" * 20
SUPPLIER_2 = "0x" + "22" * 20
SUPPLIER_3 = "0x" + "33" * 20
OUTSIDER = "0x" + "55" * 20


class StepClock:
    """Deterministic clock that advances one second per reading."""

    def __init__(self) -> None:
        self.current = datetime(2026, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def settings() -> RuntimeSettings:
    return RuntimeSettings(owner_identity=OWNER).normalized()


@pytest.fixture
def service(settings: RuntimeSettings, clock: StepClock) -> SupplyChainService:
    return SupplyChainService(settings, clock=clock)


@pytest.fixture
def service_with_product(service: SupplyChainService) -> SupplyChainService:
    """Tomatoes from supplier 1, basil from supplier 2, product 1 built from both."""
    service.add_ingredient("Tomatoes", SUPPLIER_1, "Vegetables", caller=ADMIN)
    service.add_ingredient("Basil", SUPPLIER_2, "Herbs", caller=ADMIN)
    service.create_product("Test Product", "BATCH001", [1, 2], caller=ADMIN)
    return service
