"""
Inventory — Celery Tasks

Periodic resync of Product.total_stock from active balances.

@file inventory/tasks.py
"""

import logging

from celery import shared_task

logger = logging.getLogger('stockroom')


@shared_task(name='inventory.resync_product_totals')
def resync_product_totals_task():
    """
    Recompute every product's total_stock. Scheduled by Celery Beat every
    INVENTORY_RESYNC_INTERVAL_MINUTES to repair drift left by any write
    that bypassed the service layer.
    """
    from .services import ReconciliationService

    result = ReconciliationService.sync_all_product_totals()
    logger.info('resync_product_totals_task completed: %d corrected.', result['corrected'])
    return result
