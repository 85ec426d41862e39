"""
Inventory — Permissions

Reads for any authenticated user; writes for stock managers
(superuser, staff, or the INVENTORY_MANAGER group).

@file inventory/permissions.py
"""

from rest_framework.permissions import SAFE_METHODS, BasePermission


class CanManageStock(BasePermission):

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        if request.method in SAFE_METHODS:
            return True
        return request.user.can_manage_stock
