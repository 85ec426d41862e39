"""
Inventory — URL Configuration

@file inventory/urls.py
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import StockBalanceViewSet, StockMovementViewSet

app_name = 'inventory'

router = DefaultRouter()
router.register('balances', StockBalanceViewSet, basename='balance')
router.register('movements', StockMovementViewSet, basename='movement')

urlpatterns = [
    path('', include(router.urls)),
]
