"""
Catalog — Django Admin Configuration

total_stock is read-only: only the stock ledger writes it.

@file catalog/admin.py
"""

from django.contrib import admin

from .models import Product, Warehouse


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('title', 'slug', 'total_stock', 'is_deleted', 'created_at')
    list_filter = ('is_deleted',)
    search_fields = ('title', 'slug')
    readonly_fields = ('id', 'total_stock', 'created_at', 'updated_at')
    prepopulated_fields = {'slug': ('title',)}
    ordering = ('title',)


@admin.register(Warehouse)
class WarehouseAdmin(admin.ModelAdmin):
    list_display = ('title', 'slug', 'address', 'is_deleted')
    list_filter = ('is_deleted',)
    search_fields = ('title', 'slug', 'address')
    readonly_fields = ('id', 'created_at', 'updated_at')
    prepopulated_fields = {'slug': ('title',)}
    ordering = ('title',)
