"""
Inventory — Models

StockBalance holds the current quantity per (product, variant, warehouse);
StockMovement is the insert-only trail of every change to it. The balance
is authoritative; movements are never replayed to derive it.

@file inventory/models.py
"""

import uuid

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from core.models import RegulatedModel

# Empty string stands for the base (non-variant) product so the unique
# constraint below also covers it; the API exposes it as null.
BASE_VARIANT = ''


class StockBalance(RegulatedModel):
    """
    Quantity on hand for one product variant in one warehouse.

    ``version`` increments on every ledgered write and guards the
    compare-and-swap update in AdjustmentService.
    """

    product = models.ForeignKey(
        'catalog.Product',
        on_delete=models.PROTECT,
        related_name='stock_balances',
        verbose_name=_('product'),
    )
    variant_name = models.CharField(
        _('variant name'), max_length=255, blank=True, default=BASE_VARIANT,
    )
    warehouse = models.ForeignKey(
        'catalog.Warehouse',
        on_delete=models.PROTECT,
        related_name='stock_balances',
        verbose_name=_('warehouse'),
    )
    quantity = models.PositiveIntegerField(_('quantity'), default=0)
    reorder_point = models.PositiveIntegerField(
        _('reorder point'), default=10,
        help_text=_('At or below this quantity the cell is reported as low stock.'),
    )
    version = models.PositiveIntegerField(_('version'), default=0)

    class Meta:
        verbose_name = _('stock balance')
        verbose_name_plural = _('stock balances')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['product', 'is_deleted'], name='balance_product_idx'),
            models.Index(fields=['warehouse', 'is_deleted'], name='balance_warehouse_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['product', 'variant_name', 'warehouse'],
                condition=models.Q(is_deleted=False),
                name='unique_active_stock_balance',
            ),
            models.CheckConstraint(
                condition=models.Q(quantity__gte=0),
                name='stock_balance_quantity_non_negative',
            ),
        ]

    def __str__(self):
        variant = self.variant_name or 'base'
        return f'{self.product_id}/{variant}@{self.warehouse_id} qty={self.quantity}'

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.reorder_point

    @property
    def is_out_of_stock(self) -> bool:
        return self.quantity == 0


class StockMovement(models.Model):
    """
    A single immutable ledger entry (insert only).

    ``quantity`` is the delta actually applied, so new = previous + quantity
    always holds. ``requested_quantity`` keeps what the caller asked for;
    the two differ only when a deduction was clamped at zero.
    """

    class Kind(models.TextChoices):
        PURCHASE = 'purchase', _('Purchase')
        SALE = 'sale', _('Sale')
        ADJUSTMENT = 'adjustment', _('Adjustment')
        TRANSFER = 'transfer', _('Transfer')
        RETURN = 'return', _('Return')
        DAMAGE = 'damage', _('Damage')

    id = models.UUIDField(
        primary_key=True, default=uuid.uuid4, editable=False,
    )
    balance = models.ForeignKey(
        StockBalance,
        on_delete=models.PROTECT,
        related_name='movements',
        verbose_name=_('balance'),
    )
    product = models.ForeignKey(
        'catalog.Product',
        on_delete=models.PROTECT,
        related_name='stock_movements',
        verbose_name=_('product'),
    )
    variant_name = models.CharField(
        _('variant name'), max_length=255, blank=True, default=BASE_VARIANT,
    )
    warehouse = models.ForeignKey(
        'catalog.Warehouse',
        on_delete=models.PROTECT,
        related_name='stock_movements',
        verbose_name=_('warehouse'),
    )
    kind = models.CharField(
        _('kind'), max_length=16,
        choices=Kind.choices, db_index=True,
    )
    sequence = models.PositiveIntegerField(
        _('sequence'),
        help_text=_('Balance version produced by this write; orders movements per balance.'),
    )
    quantity = models.IntegerField(_('quantity'))
    requested_quantity = models.IntegerField(_('requested quantity'))
    previous_quantity = models.PositiveIntegerField(_('previous quantity'))
    new_quantity = models.PositiveIntegerField(_('new quantity'))
    reference_id = models.UUIDField(
        _('reference ID'), null=True, blank=True,
        help_text=_('Source record: order, purchase order, etc.'),
    )
    reference_type = models.CharField(
        _('reference type'), max_length=100, blank=True,
    )
    notes = models.TextField(_('notes'), blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name='+',
        verbose_name=_('created by'),
    )
    created_at = models.DateTimeField(
        _('created at'), auto_now_add=True, db_index=True,
    )
    # No updated_at: immutable record.

    class Meta:
        verbose_name = _('stock movement')
        verbose_name_plural = _('stock movements')
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['product', 'created_at'], name='movement_product_idx'),
            models.Index(fields=['warehouse', 'created_at'], name='movement_warehouse_idx'),
            models.Index(fields=['kind', 'created_at'], name='movement_kind_idx'),
            models.Index(fields=['reference_type', 'reference_id'], name='movement_reference_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['balance', 'sequence'],
                name='unique_movement_sequence_per_balance',
            ),
            models.CheckConstraint(
                condition=models.Q(new_quantity=models.F('previous_quantity') + models.F('quantity')),
                name='stock_movement_delta_consistent',
            ),
        ]

    def __str__(self):
        return f'{self.kind} {self.quantity:+d} ({self.previous_quantity}->{self.new_quantity}) balance={self.balance_id}'

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise NotImplementedError('StockMovement is insert-only; updates are not allowed.')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise NotImplementedError('StockMovement records cannot be deleted.')
