from rest_framework import serializers
from rest_framework.validators import UniqueValidator
from decimal import Decimal
from .models import Sweet, StockMovement


class SweetSerializer(serializers.ModelSerializer):
    name = serializers.CharField(max_length=200, validators=[UniqueValidator(queryset=Sweet.objects.all(), lookup='iexact', message='A sweet with this name already exists.')])
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0.00'))
    in_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Sweet
        fields = ['id', 'name', 'category', 'description', 'price', 'quantity', 'in_stock', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class SweetCreateSerializer(SweetSerializer):
    """Create accepts an opening quantity"""
    quantity = serializers.IntegerField(min_value=0, max_value=Sweet.MAX_QUANTITY, required=False, default=0)


class SweetUpdateSerializer(SweetSerializer):
    """Stock only changes through purchase and restock"""

    class Meta(SweetSerializer.Meta):
        read_only_fields = ['quantity', 'created_at', 'updated_at']


class StockChangeSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, max_value=Sweet.MAX_QUANTITY)


class PurchaseSerializer(StockChangeSerializer):
    quantity = serializers.IntegerField(min_value=1, max_value=Sweet.MAX_QUANTITY, required=False, default=1)


class StockMovementSerializer(serializers.ModelSerializer):
    sweet_name = serializers.CharField(source='sweet.name', read_only=True)
    user_email = serializers.EmailField(source='user.email', read_only=True, default=None)

    class Meta:
        model = StockMovement
        fields = ['id', 'sweet', 'sweet_name', 'movement_type', 'quantity', 'quantity_after', 'user', 'user_email', 'created_at']
