# inventory/serializers.py

from rest_framework import serializers

from accounts.permissions import can_see_purchase_prices
from stock.models import StockTransaction, ItemActivity
from .models import InventoryCategory, InventoryItem

PRICE = dict(max_digits=10, decimal_places=2, min_value=0, required=False)


class InventoryCategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = InventoryCategory
        fields = ['id', 'name']

    def validate_name(self, value):
        if InventoryCategory.objects.filter(name__iexact=value).exists():
            raise serializers.ValidationError('Category already exists')
        return value


class InventoryItemSerializer(serializers.ModelSerializer):
    """
    Wire format uses the camelCase keys the workshop frontend expects.
    Purchase and wholesale prices are dropped for everyone but admins.
    """
    partName = serializers.CharField(source='part_name', max_length=200)
    partCode = serializers.CharField(source='part_code', max_length=100, required=False, allow_blank=True, allow_null=True)
    barcode = serializers.CharField(max_length=100, required=False, allow_blank=True)
    category = serializers.CharField(max_length=100)
    supplier = serializers.CharField(max_length=200, required=False, allow_blank=True, allow_null=True)
    availableStock = serializers.IntegerField(source='available_stock', min_value=0, required=False)
    minStockLevel = serializers.IntegerField(source='min_stock_level', min_value=0, required=False)
    unitPrice = serializers.DecimalField(source='unit_price', **PRICE)
    wholesalePrice = serializers.DecimalField(source='wholesale_price', **PRICE)
    salesPrice = serializers.DecimalField(source='sales_price', **PRICE)
    purchasePrice = serializers.DecimalField(source='purchase_price', **PRICE)
    status = serializers.CharField(read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    ADMIN_ONLY_FIELDS = ('purchasePrice', 'wholesalePrice')

    class Meta:
        model = InventoryItem
        fields = [
            'id', 'partName', 'partCode', 'barcode', 'category', 'supplier',
            'availableStock', 'minStockLevel', 'unitPrice', 'wholesalePrice',
            'salesPrice', 'purchasePrice', 'status', 'createdAt', 'updatedAt',
        ]

    def _unique(self, field, value, message):
        if not value:
            return value
        duplicates = InventoryItem.objects.filter(**{field: value})
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError(message)
        return value

    def validate_partCode(self, value):
        return self._unique('part_code', value or None, 'Part code already exists')

    def validate_barcode(self, value):
        return self._unique('barcode', value, 'Barcode already exists')

    def validate(self, attrs):
        if self.instance is not None and 'available_stock' in attrs:
            if attrs['available_stock'] != self.instance.available_stock:
                raise serializers.ValidationError(
                    'Available stock cannot be edited directly. Use stock-in or stock-out.'
                )
            attrs.pop('available_stock')
        return attrs

    def to_representation(self, instance):
        data = super().to_representation(instance)
        request = self.context.get('request')
        if request is None or not can_see_purchase_prices(request.user):
            for field in self.ADMIN_ONLY_FIELDS:
                data.pop(field, None)
        return data


class StockInSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, error_messages={'min_value': 'Valid quantity is required'})
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    billNo = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=100)
    supplierName = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=200)
    purchaseDate = serializers.DateField(required=False, allow_null=True)
    unitPrice = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True)


class StockOutSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, error_messages={'min_value': 'Valid quantity is required'})
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class StockTransactionSerializer(serializers.ModelSerializer):
    transactionType = serializers.CharField(source='transaction_type')
    previousStock = serializers.IntegerField(source='previous_stock')
    newStock = serializers.IntegerField(source='new_stock')
    referenceNo = serializers.CharField(source='reference_no')
    billNo = serializers.CharField(source='bill_no')
    supplierName = serializers.CharField(source='supplier_name')
    purchaseDate = serializers.DateField(source='purchase_date')
    unitPrice = serializers.DecimalField(source='unit_price', max_digits=10, decimal_places=2)
    createdBy = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at')

    class Meta:
        model = StockTransaction
        fields = [
            'id', 'transactionType', 'quantity', 'previousStock', 'newStock', 'referenceNo',
            'notes', 'billNo', 'supplierName', 'purchaseDate', 'unitPrice', 'createdBy', 'createdAt',
        ]
        read_only_fields = fields

    def get_createdBy(self, obj):
        return obj.created_by.display_name if obj.created_by else None


class ItemActivitySerializer(serializers.ModelSerializer):
    activityType = serializers.CharField(source='activity_type')
    activityDate = serializers.DateField(source='activity_date')
    unitPrice = serializers.DecimalField(source='unit_price', max_digits=10, decimal_places=2)
    totalPrice = serializers.DecimalField(source='total_price', max_digits=12, decimal_places=2)
    referenceType = serializers.CharField(source='reference_type')
    referenceId = serializers.IntegerField(source='reference_id')
    referenceNo = serializers.CharField(source='reference_no')
    supplierName = serializers.CharField(source='supplier_name')
    customerName = serializers.CharField(source='customer_name')
    createdBy = serializers.SerializerMethodField()

    class Meta:
        model = ItemActivity
        fields = [
            'id', 'activityType', 'activityDate', 'quantity', 'unitPrice', 'totalPrice',
            'referenceType', 'referenceId', 'referenceNo', 'supplierName', 'customerName',
            'notes', 'createdBy',
        ]
        read_only_fields = fields

    def get_createdBy(self, obj):
        return obj.created_by.display_name if obj.created_by else None
