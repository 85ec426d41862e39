"""
Inventory — Serializers

Read serializers for balances and movements, input serializers for each
write operation. The base variant is stored as '' and exposed as null.

@file inventory/serializers.py
"""

from rest_framework import serializers

from .models import StockBalance, StockMovement
from .services import QUICK_ADJUST_OPERATIONS, display_variant


class StockBalanceReadSerializer(serializers.ModelSerializer):
    product_title = serializers.CharField(source='product.title', read_only=True)
    warehouse_title = serializers.CharField(source='warehouse.title', read_only=True)
    variant_name = serializers.SerializerMethodField()
    is_low_stock = serializers.BooleanField(read_only=True)
    is_out_of_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = StockBalance
        fields = [
            'id', 'product', 'product_title', 'variant_name',
            'warehouse', 'warehouse_title', 'quantity', 'reorder_point',
            'is_low_stock', 'is_out_of_stock', 'version',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_variant_name(self, obj):
        return display_variant(obj.variant_name)


class StockMovementReadSerializer(serializers.ModelSerializer):
    variant_name = serializers.SerializerMethodField()
    kind_display = serializers.CharField(source='get_kind_display', read_only=True)

    class Meta:
        model = StockMovement
        fields = [
            'id', 'balance', 'product', 'variant_name', 'warehouse',
            'kind', 'kind_display', 'sequence', 'quantity', 'requested_quantity',
            'previous_quantity', 'new_quantity', 'reference_type', 'reference_id',
            'notes', 'created_by', 'created_at',
        ]
        read_only_fields = fields

    def get_variant_name(self, obj):
        return display_variant(obj.variant_name)


class StockBalanceCreateSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    variant_name = serializers.CharField(max_length=255, required=False, allow_null=True, allow_blank=True)
    warehouse_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=0, default=0)
    reorder_point = serializers.IntegerField(min_value=0, required=False)


class StockBalanceUpdateSerializer(serializers.Serializer):
    """PATCH: reorder_point edit and/or a ledgered quantity correction."""
    quantity = serializers.IntegerField(min_value=0, required=False)
    reorder_point = serializers.IntegerField(min_value=0, required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('Provide quantity and/or reorder_point.')
        return attrs


class AdjustSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)
    reason = serializers.CharField(max_length=1000)
    kind = serializers.ChoiceField(
        choices=StockMovement.Kind.choices,
        default=StockMovement.Kind.ADJUSTMENT,
    )


class QuickAdjustSerializer(serializers.Serializer):
    operation = serializers.ChoiceField(choices=QUICK_ADJUST_OPERATIONS)
    quantity = serializers.IntegerField(min_value=1)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True)


class BulkReceiveLineSerializer(serializers.Serializer):
    variant_name = serializers.CharField(max_length=255, required=False, allow_null=True, allow_blank=True)
    quantity = serializers.IntegerField(min_value=0)
    reorder_point = serializers.IntegerField(min_value=0, required=False)


class BulkReceiveSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    warehouse_id = serializers.UUIDField()
    variants = BulkReceiveLineSerializer(many=True)

    def validate_variants(self, value):
        if not value:
            raise serializers.ValidationError('At least one variant line is required.')
        return value
