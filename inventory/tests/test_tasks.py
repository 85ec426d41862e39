"""
Tests — Celery tasks (run eagerly).

@file inventory/tests/test_tasks.py
"""

import pytest
from django.conf import settings

from catalog.models import Product
from inventory.tasks import resync_product_totals_task
from tests.factories import ProductFactory, StockBalanceFactory

pytestmark = pytest.mark.django_db


class TestResyncProductTotalsTask:

    def test_repairs_drift(self):
        product = ProductFactory()
        StockBalanceFactory(product=product, quantity=9)
        Product.objects.filter(pk=product.pk).update(total_stock=1)
        result = resync_product_totals_task.delay().get()
        assert result == {'checked': 1, 'corrected': 1}
        product.refresh_from_db()
        assert product.total_stock == 9

    def test_scheduled_with_beat(self):
        entry = settings.CELERY_BEAT_SCHEDULE['inventory-resync-product-totals']
        assert entry['task'] == resync_product_totals_task.name
