"""
Users — Model Tests

Email-keyed manager and the stock-management permission check.

@file users/tests/test_models.py
"""

import pytest
from django.contrib.auth.models import Group

from tests.factories import InventoryManagerFactory, SuperuserFactory, UserFactory
from users.models import User

pytestmark = pytest.mark.django_db


class TestUserManager:

    def test_create_user_normalizes_email(self):
        user = User.objects.create_user(email='Clerk@EXAMPLE.com', password='Pass2026!!x')
        assert user.email == 'Clerk@example.com'
        assert user.check_password('Pass2026!!x')
        assert user.is_staff is False

    def test_create_user_requires_email(self):
        with pytest.raises(ValueError):
            User.objects.create_user(email='', password='x')

    def test_create_superuser_flags(self):
        user = User.objects.create_superuser(email='root@example.com', password='Pass2026!!x')
        assert user.is_staff and user.is_superuser

    def test_active_excludes_deleted_and_inactive(self):
        active = UserFactory()
        UserFactory(is_active=False)
        UserFactory(is_deleted=True)
        assert list(User.objects.active()) == [active]


class TestCanManageStock:

    def test_plain_user_cannot(self):
        assert UserFactory().can_manage_stock is False

    def test_staff_can(self):
        assert UserFactory(is_staff=True).can_manage_stock is True

    def test_superuser_can(self):
        assert SuperuserFactory().can_manage_stock is True

    def test_manager_group_member_can(self):
        assert InventoryManagerFactory().can_manage_stock is True

    def test_other_group_does_not_grant(self):
        user = UserFactory()
        user.groups.add(Group.objects.create(name='SALES'))
        assert user.can_manage_stock is False

    def test_full_name_falls_back_to_email(self):
        user = UserFactory(first_name='', last_name='')
        assert str(user) == user.email
