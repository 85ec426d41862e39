"""
Stockroom — Test Factories

Factory Boy factories for generating test data. Used across all test
modules.

@file tests/factories.py
"""

import uuid

import factory
from django.contrib.auth.models import Group

from catalog.models import Product, Warehouse
from core.models import AuditLog
from inventory.models import StockBalance
from users.models import INVENTORY_MANAGER_GROUP, User


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User
        skip_postgeneration_save = True

    email = factory.Sequence(lambda n: f'user-{n}@stockroom.test')
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    is_active = True

    @factory.post_generation
    def password(self, create, extracted, **kwargs):
        password = extracted or 'TestPass2026!'
        self.set_password(password)
        if create:
            self.save(update_fields=['password'])


class SuperuserFactory(UserFactory):
    is_staff = True
    is_superuser = True


class InventoryManagerFactory(UserFactory):
    """Non-staff user in the INVENTORY_MANAGER group."""

    @factory.post_generation
    def manager_group(self, create, extracted, **kwargs):
        if create:
            group, _ = Group.objects.get_or_create(name=INVENTORY_MANAGER_GROUP)
            self.groups.add(group)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------

class ProductFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Product

    title = factory.Sequence(lambda n: f'Product {n:03d}')
    slug = factory.Sequence(lambda n: f'product-{n:03d}')
    thumbnail = factory.Sequence(lambda n: f'https://cdn.stockroom.test/p/{n}.jpg')
    variants = factory.LazyFunction(lambda: [{'name': 'Red'}, {'name': 'Blue'}])


class WarehouseFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Warehouse

    title = factory.Sequence(lambda n: f'Warehouse {n:03d}')
    slug = factory.Sequence(lambda n: f'warehouse-{n:03d}')
    address = factory.Faker('address')


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------

class StockBalanceFactory(factory.django.DjangoModelFactory):
    """
    Writes the row directly, without a movement. Tests that need a
    ledgered opening balance go through BalanceService.create instead.
    """

    class Meta:
        model = StockBalance

    product = factory.SubFactory(ProductFactory)
    variant_name = ''
    warehouse = factory.SubFactory(WarehouseFactory)
    quantity = 0
    reorder_point = 10


# ---------------------------------------------------------------------------
# Audit
# ---------------------------------------------------------------------------

class AuditLogFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = AuditLog

    actor = factory.SubFactory(UserFactory)
    action = AuditLog.ActionChoices.CREATE
    model_name = 'StockBalance'
    object_id = factory.LazyFunction(lambda: str(uuid.uuid4()))
    new_values = factory.LazyFunction(lambda: {'quantity': 0})
