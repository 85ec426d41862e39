"""
Tests — StockBalance constraints and StockMovement insert-only behaviour.

@file inventory/tests/test_models.py
"""

import pytest
from django.db import IntegrityError, transaction

from inventory.models import StockBalance, StockMovement
from tests.factories import ProductFactory, StockBalanceFactory, WarehouseFactory


pytestmark = pytest.mark.django_db


def _movement(balance, **overrides):
    fields = dict(
        balance=balance,
        product=balance.product,
        variant_name=balance.variant_name,
        warehouse=balance.warehouse,
        kind=StockMovement.Kind.PURCHASE,
        sequence=1,
        quantity=5,
        requested_quantity=5,
        previous_quantity=0,
        new_quantity=5,
    )
    fields.update(overrides)
    return StockMovement.objects.create(**fields)


class TestStockBalance:

    def test_low_stock_at_reorder_point(self):
        assert StockBalanceFactory(quantity=10, reorder_point=10).is_low_stock is True
        assert StockBalanceFactory(quantity=11, reorder_point=10).is_low_stock is False

    def test_zero_reorder_point_flags_only_empty(self):
        assert StockBalanceFactory(quantity=0, reorder_point=0).is_low_stock is True
        assert StockBalanceFactory(quantity=1, reorder_point=0).is_low_stock is False

    def test_out_of_stock(self):
        assert StockBalanceFactory(quantity=0).is_out_of_stock is True

    def test_one_active_balance_per_triple(self):
        product, warehouse = ProductFactory(), WarehouseFactory()
        StockBalanceFactory(product=product, warehouse=warehouse, variant_name='Red')
        with pytest.raises(IntegrityError):
            StockBalanceFactory(product=product, warehouse=warehouse, variant_name='Red')

    def test_base_variant_is_covered_by_uniqueness(self):
        product, warehouse = ProductFactory(), WarehouseFactory()
        StockBalanceFactory(product=product, warehouse=warehouse)
        with pytest.raises(IntegrityError):
            StockBalanceFactory(product=product, warehouse=warehouse)

    def test_triple_reusable_after_soft_delete(self):
        product, warehouse = ProductFactory(), WarehouseFactory()
        old = StockBalanceFactory(product=product, warehouse=warehouse, variant_name='Red')
        old.soft_delete()
        new = StockBalanceFactory(product=product, warehouse=warehouse, variant_name='Red')
        assert StockBalance.objects.filter(product=product).count() == 2
        assert new.pk != old.pk

    def test_variants_are_distinct_cells(self):
        product, warehouse = ProductFactory(), WarehouseFactory()
        StockBalanceFactory(product=product, warehouse=warehouse, variant_name='Red')
        StockBalanceFactory(product=product, warehouse=warehouse, variant_name='Blue')
        StockBalanceFactory(product=product, warehouse=warehouse)
        assert StockBalance.objects.filter(product=product, is_deleted=False).count() == 3


class TestStockMovementInsertOnly:

    def test_create_movement(self):
        movement = _movement(StockBalanceFactory())
        assert movement.pk is not None
        assert movement.quantity == 5

    def test_update_raises(self):
        movement = _movement(StockBalanceFactory())
        movement.notes = 'edited'
        with pytest.raises(NotImplementedError) as exc_info:
            movement.save()
        assert 'insert-only' in str(exc_info.value)

    def test_delete_raises(self):
        movement = _movement(StockBalanceFactory())
        with pytest.raises(NotImplementedError):
            movement.delete()
        assert StockMovement.objects.filter(pk=movement.pk).exists()

    def test_inconsistent_delta_rejected(self):
        balance = StockBalanceFactory()
        with pytest.raises(IntegrityError), transaction.atomic():
            _movement(balance, quantity=5, previous_quantity=0, new_quantity=7)

    def test_sequence_unique_per_balance(self):
        balance = StockBalanceFactory()
        _movement(balance, sequence=1)
        with pytest.raises(IntegrityError), transaction.atomic():
            _movement(balance, sequence=1, previous_quantity=5, new_quantity=10)
