"""
Inventory — Signals

``order_line_fulfilled`` is the seam between the order side and the
ledger. Senders fire it when an order line ships; the receiver deducts
stock only when INVENTORY_DEDUCT_ON_ORDER is on.

@file inventory/signals.py
"""

import logging

from django.conf import settings
from django.dispatch import Signal, receiver

from core.exceptions import ResourceNotFoundError

from .models import StockMovement

logger = logging.getLogger('stockroom')

# kwargs: product_id, variant_name, warehouse_id, quantity,
#         reference_id, reference_type, actor
order_line_fulfilled = Signal()


@receiver(order_line_fulfilled)
def deduct_stock_for_order_line(sender, *, product_id, warehouse_id, quantity,
                                variant_name=None, reference_id=None,
                                reference_type='Order', actor=None, **kwargs):
    if not getattr(settings, 'INVENTORY_DEDUCT_ON_ORDER', False):
        return None

    from .services import AdjustmentService, BalanceService, OnInsufficientStock

    balance = BalanceService.find_active(product_id, variant_name, warehouse_id)
    if balance is None:
        raise ResourceNotFoundError(detail='Stock not found.')

    _, movement = AdjustmentService.apply(
        balance_id=balance.pk,
        delta=-quantity,
        kind=StockMovement.Kind.SALE,
        on_insufficient=OnInsufficientStock.REJECT,
        notes=f'{reference_type} fulfilment',
        actor=actor,
        reference_type=reference_type,
        reference_id=reference_id,
    )
    logger.info('Order line %s deducted %d from balance %s', reference_id, quantity, balance.pk)
    return movement
