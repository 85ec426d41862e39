"""
Inventory — Django Admin Configuration

Balances are browsable but quantities are read-only here: changes must go
through the ledger. Movements are fully read-only.

@file inventory/admin.py
"""

from django.contrib import admin

from .models import StockBalance, StockMovement


@admin.register(StockBalance)
class StockBalanceAdmin(admin.ModelAdmin):
    list_display = ('product', 'variant_name', 'warehouse', 'quantity', 'reorder_point', 'is_deleted')
    list_filter = ('warehouse', 'is_deleted')
    search_fields = ('product__title', 'variant_name', 'warehouse__title')
    readonly_fields = ('id', 'product', 'variant_name', 'warehouse', 'quantity', 'version',
                       'created_at', 'updated_at', 'deleted_at')

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'kind', 'product', 'variant_name', 'warehouse',
                    'quantity', 'previous_quantity', 'new_quantity')
    list_filter = ('kind', 'warehouse')
    search_fields = ('product__title', 'notes', 'reference_type')
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
