"""
Users — Management Command Tests

@file users/tests/test_commands.py
"""

from io import StringIO

import pytest
from django.contrib.auth.models import Group
from django.core.management import call_command

from tests.factories import UserFactory
from users.models import INVENTORY_MANAGER_GROUP

pytestmark = pytest.mark.django_db


class TestSeedInventoryGroups:

    def test_creates_group_idempotently(self):
        call_command('seed_inventory_groups', stdout=StringIO(), stderr=StringIO())
        call_command('seed_inventory_groups', stdout=StringIO(), stderr=StringIO())
        assert Group.objects.filter(name=INVENTORY_MANAGER_GROUP).count() == 1

    def test_grants_stock_write_access(self):
        call_command('seed_inventory_groups', stdout=StringIO(), stderr=StringIO())
        user = UserFactory()
        user.groups.add(Group.objects.get(name=INVENTORY_MANAGER_GROUP))
        assert user.can_manage_stock is True
        assert user.has_perm('inventory.view_stockmovement')
