"""
Catalog — Models

Products and warehouses as seen by the stock ledger. Catalog CRUD lives
elsewhere; these tables only carry what the ledger reads, plus the
denormalized Product.total_stock the ledger keeps in sync.

@file catalog/models.py
"""

from django.db import models
from django.utils.translation import gettext_lazy as _

from core.models import RegulatedModel


class Product(RegulatedModel):
    """
    A sellable product. ``variants`` is a list of ``{"name": ...}`` objects;
    an empty list means the product is only stocked as its base form.

    total_stock is a cache recomputed by ReconciliationService after every
    ledger write. It is eventually consistent and never the source of truth.
    """

    title = models.CharField(_('title'), max_length=255, db_index=True)
    slug = models.SlugField(_('slug'), max_length=255)
    thumbnail = models.URLField(_('thumbnail'), max_length=500, blank=True)
    variants = models.JSONField(_('variants'), default=list, blank=True)
    total_stock = models.PositiveIntegerField(_('total stock'), default=0)

    class Meta:
        verbose_name = _('product')
        verbose_name_plural = _('products')
        ordering = ['title']
        constraints = [
            models.UniqueConstraint(
                fields=['slug'],
                condition=models.Q(is_deleted=False),
                name='unique_active_product_slug',
            ),
        ]

    def __str__(self):
        return self.title

    @property
    def variant_names(self) -> list[str]:
        return [v['name'] for v in self.variants or [] if isinstance(v, dict) and v.get('name')]


class Warehouse(RegulatedModel):
    """A physical stock location."""

    title = models.CharField(_('title'), max_length=255)
    slug = models.SlugField(_('slug'), max_length=255)
    address = models.CharField(_('address'), max_length=500, blank=True)

    class Meta:
        verbose_name = _('warehouse')
        verbose_name_plural = _('warehouses')
        ordering = ['title']
        constraints = [
            models.UniqueConstraint(
                fields=['slug'],
                condition=models.Q(is_deleted=False),
                name='unique_active_warehouse_slug',
            ),
        ]

    def __str__(self):
        return self.title
