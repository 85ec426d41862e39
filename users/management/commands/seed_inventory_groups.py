"""
Users — Management Command: seed_inventory_groups

Creates the INVENTORY_MANAGER group whose members may write to the stock
ledger, and grants it the inventory model permissions used by the admin.

Usage::

    python manage.py seed_inventory_groups

Idempotent: safe to re-run (uses get_or_create).

@file users/management/commands/seed_inventory_groups.py
"""

from django.contrib.auth.models import Group, Permission
from django.core.management.base import BaseCommand
from django.db import transaction

from users.models import INVENTORY_MANAGER_GROUP

MANAGER_PERMISSIONS = [
    ('inventory', 'view_stockbalance'),
    ('inventory', 'change_stockbalance'),
    ('inventory', 'view_stockmovement'),
    ('catalog', 'view_product'),
    ('catalog', 'view_warehouse'),
]


class Command(BaseCommand):
    help = 'Seed the INVENTORY_MANAGER group and its permissions.'

    @transaction.atomic
    def handle(self, *args, **options):
        group, created = Group.objects.get_or_create(name=INVENTORY_MANAGER_GROUP)
        self.stdout.write(f'  {"Created" if created else "Exists"}: {INVENTORY_MANAGER_GROUP}')

        granted = 0
        for app_label, codename in MANAGER_PERMISSIONS:
            try:
                perm = Permission.objects.get(content_type__app_label=app_label, codename=codename)
            except Permission.DoesNotExist:
                self.stderr.write(f'  Missing permission {app_label}.{codename}; run migrate first.')
                continue
            group.permissions.add(perm)
            granted += 1

        self.stdout.write(self.style.SUCCESS(
            f'Done. {granted} permission(s) on {INVENTORY_MANAGER_GROUP}.'
        ))
