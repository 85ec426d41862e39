"""
Tests — order_line_fulfilled integration point.

@file inventory/tests/test_signals.py
"""

import uuid

import pytest

from core.exceptions import InsufficientStockError, ResourceNotFoundError
from inventory.models import StockMovement
from inventory.services import BalanceService
from inventory.signals import order_line_fulfilled
from tests.factories import ProductFactory, WarehouseFactory

pytestmark = pytest.mark.django_db


@pytest.fixture
def balance():
    return BalanceService.create(
        product_id=ProductFactory().pk,
        warehouse_id=WarehouseFactory().pk,
        variant_name='Blue',
        quantity=10,
    )


def _fulfil(balance, quantity, reference_id=None):
    return order_line_fulfilled.send(
        sender=None,
        product_id=balance.product_id,
        variant_name='Blue',
        warehouse_id=balance.warehouse_id,
        quantity=quantity,
        reference_id=reference_id or uuid.uuid4(),
        reference_type='Order',
    )


class TestOrderLineFulfilled:

    def test_disabled_by_default(self, balance):
        _fulfil(balance, 4)
        balance.refresh_from_db()
        assert balance.quantity == 10
        assert not StockMovement.objects.filter(kind=StockMovement.Kind.SALE).exists()

    def test_deducts_when_enabled(self, balance, settings):
        settings.INVENTORY_DEDUCT_ON_ORDER = True
        order_id = uuid.uuid4()
        [(_, movement)] = [r for r in _fulfil(balance, 4, order_id) if r[1] is not None]
        balance.refresh_from_db()
        assert balance.quantity == 6
        assert movement.kind == StockMovement.Kind.SALE
        assert (movement.reference_type, movement.reference_id) == ('Order', order_id)

    def test_rejects_oversell(self, balance, settings):
        settings.INVENTORY_DEDUCT_ON_ORDER = True
        with pytest.raises(InsufficientStockError):
            _fulfil(balance, 11)
        balance.refresh_from_db()
        assert balance.quantity == 10

    def test_missing_balance(self, balance, settings):
        settings.INVENTORY_DEDUCT_ON_ORDER = True
        with pytest.raises(ResourceNotFoundError):
            order_line_fulfilled.send(
                sender=None,
                product_id=balance.product_id,
                variant_name='Red',
                warehouse_id=balance.warehouse_id,
                quantity=1,
            )
