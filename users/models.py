"""
Users — Models

Custom User model with UUID PK and email-based authentication. Users are
the actors recorded on balances, movements and audit entries.

@file users/models.py
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.models import RegulatedModel
from users.managers import UserManager

INVENTORY_MANAGER_GROUP = 'INVENTORY_MANAGER'


class User(AbstractBaseUser, PermissionsMixin, RegulatedModel):
    """Back-office user. Stock write access comes from the INVENTORY_MANAGER group or staff status."""

    email = models.EmailField(_('email'), unique=True)
    first_name = models.CharField(_('first name'), max_length=100, blank=True)
    last_name = models.CharField(_('last name'), max_length=100, blank=True)

    is_staff = models.BooleanField(_('staff status'), default=False)
    is_active = models.BooleanField(_('active'), default=True)
    date_joined = models.DateTimeField(_('date joined'), default=timezone.now)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        verbose_name = _('user')
        verbose_name_plural = _('users')
        ordering = ['-created_at']

    def __str__(self):
        return self.get_full_name()

    def get_full_name(self):
        full = f'{self.first_name} {self.last_name}'.strip()
        return full or self.email

    def get_short_name(self):
        return self.first_name or self.email

    @property
    def can_manage_stock(self) -> bool:
        if self.is_superuser or self.is_staff:
            return True
        return self.groups.filter(name=INVENTORY_MANAGER_GROUP).exists()
