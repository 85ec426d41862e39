"""
Inventory — Views

Balances: list, create, retrieve, patch, soft delete, bulk receive,
adjust, quick-adjust, per-balance movements, summary and stats.
Movements: read-only, filterable ledger listing.

@file inventory/views.py
"""

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .permissions import CanManageStock
from .serializers import (
    AdjustSerializer,
    BulkReceiveSerializer,
    QuickAdjustSerializer,
    StockBalanceCreateSerializer,
    StockBalanceReadSerializer,
    StockBalanceUpdateSerializer,
    StockMovementReadSerializer,
)
from .services import (
    AdjustmentService,
    BalanceService,
    MovementLog,
    ReconciliationService,
)


class StockBalanceViewSet(
    mixins.ListModelMixin,
    viewsets.GenericViewSet,
):
    """
    Stock balances per (product, variant, warehouse). Every quantity
    change goes through AdjustmentService and is ledgered.
    """

    permission_classes = [IsAuthenticated, CanManageStock]
    serializer_class = StockBalanceReadSerializer
    filterset_fields = ['product', 'warehouse']
    ordering_fields = ['created_at', 'quantity', 'reorder_point']
    ordering = ['-created_at']

    def get_queryset(self):
        return BalanceService.active_balances()

    def get_serializer_class(self):
        if self.action == 'create':
            return StockBalanceCreateSerializer
        if self.action == 'partial_update':
            return StockBalanceUpdateSerializer
        if self.action == 'adjust':
            return AdjustSerializer
        if self.action == 'quick_adjust':
            return QuickAdjustSerializer
        if self.action == 'bulk':
            return BulkReceiveSerializer
        if self.action == 'movements':
            return StockMovementReadSerializer
        return StockBalanceReadSerializer

    def _read(self, balance):
        return StockBalanceReadSerializer(balance, context={'request': self.request}).data

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        balance = BalanceService.create(
            product_id=serializer.validated_data['product_id'],
            warehouse_id=serializer.validated_data['warehouse_id'],
            variant_name=serializer.validated_data.get('variant_name'),
            quantity=serializer.validated_data['quantity'],
            reorder_point=serializer.validated_data.get('reorder_point'),
            actor=request.user,
        )
        return Response(self._read(balance), status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        return Response(self._read(BalanceService.get(pk)))

    def partial_update(self, request, pk=None):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        balance = BalanceService.patch(balance_id=pk, actor=request.user, **serializer.validated_data)
        return Response(self._read(balance))

    def destroy(self, request, pk=None):
        BalanceService.soft_delete(balance_id=pk, actor=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['post'], url_path='bulk')
    def bulk(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = BalanceService.bulk_receive(actor=request.user, **serializer.validated_data)
        return Response(
            {
                'created': [self._read(b) for b in result['created']],
                'updated': [self._read(b) for b in result['updated']],
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=['post'], url_path='adjust')
    def adjust(self, request, pk=None):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        balance = AdjustmentService.adjust(balance_id=pk, actor=request.user, **serializer.validated_data)
        return Response(self._read(balance))

    @action(detail=True, methods=['post'], url_path='quick-adjust')
    def quick_adjust(self, request, pk=None):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        balance, movement = AdjustmentService.quick_adjust(
            balance_id=pk,
            operation=serializer.validated_data['operation'],
            quantity=serializer.validated_data['quantity'],
            notes=serializer.validated_data.get('notes'),
            actor=request.user,
        )
        return Response({
            'stock': self._read(balance),
            'movement': StockMovementReadSerializer(movement).data,
        })

    @action(detail=True, methods=['get'], url_path='movements')
    def movements(self, request, pk=None):
        balance = BalanceService.get(pk)
        qs = MovementLog.list_by_balance(balance.product_id, balance.variant_name, balance.warehouse_id)
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(StockMovementReadSerializer(page, many=True).data)
        return Response(StockMovementReadSerializer(qs, many=True).data)

    @action(detail=False, methods=['get'], url_path='summary')
    def summary(self, request):
        products = ReconciliationService.summarize()
        return Response({
            'products': products,
            'stats': ReconciliationService.stats(products),
        })

    @action(detail=False, methods=['get'], url_path='stats')
    def stats(self, request):
        return Response(ReconciliationService.stats())


class StockMovementViewSet(viewsets.ReadOnlyModelViewSet):
    """Ledger listing, newest first. Movements are never edited or deleted."""

    permission_classes = [IsAuthenticated]
    serializer_class = StockMovementReadSerializer
    filterset_fields = ['product', 'warehouse', 'kind', 'balance']
    ordering_fields = ['created_at']

    def get_queryset(self):
        return MovementLog.list()
