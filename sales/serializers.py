# sales/serializers.py

from rest_framework import serializers

from .models import Invoice, SalesReturn, SalesReturnItem

AMOUNT = dict(max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True)


class InvoiceSerializer(serializers.ModelSerializer):
    invoiceNo = serializers.CharField(source='invoice_no', read_only=True)
    jobCardId = serializers.IntegerField(source='job_card_id', read_only=True)
    jobNo = serializers.CharField(source='job_card.job_no', read_only=True, default=None)
    customerId = serializers.IntegerField(source='customer_id', read_only=True)
    customerName = serializers.CharField(source='customer.name', read_only=True, default=None)
    invoiceDate = serializers.DateField(source='invoice_date', read_only=True)
    labourAmount = serializers.DecimalField(source='labour_amount', max_digits=12, decimal_places=2, read_only=True)
    partsAmount = serializers.DecimalField(source='parts_amount', max_digits=12, decimal_places=2, read_only=True)
    vatPercentage = serializers.DecimalField(source='vat_percentage', max_digits=5, decimal_places=2, read_only=True)
    grandTotal = serializers.DecimalField(source='grand_total', max_digits=12, decimal_places=2, read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Invoice
        fields = [
            'id', 'invoiceNo', 'jobCardId', 'jobNo', 'customerId', 'customerName', 'invoiceDate',
            'labourAmount', 'partsAmount', 'vatPercentage', 'grandTotal', 'status', 'createdAt',
        ]
        read_only_fields = ['status']


class InvoiceCreateSerializer(serializers.Serializer):
    jobCardId = serializers.IntegerField(source='job_card_id', required=False, allow_null=True)
    customerId = serializers.IntegerField(source='customer_id', required=False, allow_null=True)
    invoiceDate = serializers.DateField(source='invoice_date', required=False)
    labourAmount = serializers.DecimalField(source='labour_amount', **AMOUNT)
    partsAmount = serializers.DecimalField(source='parts_amount', **AMOUNT)
    vatPercentage = serializers.DecimalField(source='vat_percentage', max_digits=5, decimal_places=2,
                                             min_value=0, max_value=100, required=False, allow_null=True)
    status = serializers.ChoiceField(choices=Invoice.STATUS_CHOICES, required=False)

    def validate(self, attrs):
        if not attrs.get('job_card_id') and not attrs.get('customer_id'):
            raise serializers.ValidationError('Job card or customer is required')
        return attrs


class SalesReturnItemSerializer(serializers.ModelSerializer):
    inventoryItemId = serializers.IntegerField(source='inventory_item_id', required=False, allow_null=True)
    partName = serializers.CharField(source='inventory_item.part_name', read_only=True, default=None)
    quantity = serializers.IntegerField(min_value=1)
    unitPrice = serializers.DecimalField(source='unit_price', max_digits=10, decimal_places=2, min_value=0, required=False)
    totalPrice = serializers.DecimalField(source='total_price', max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True)

    class Meta:
        model = SalesReturnItem
        fields = ['id', 'inventoryItemId', 'partName', 'quantity', 'unitPrice', 'totalPrice']


class SalesReturnSerializer(serializers.ModelSerializer):
    returnNo = serializers.CharField(source='return_no', read_only=True)
    invoiceId = serializers.IntegerField(source='invoice_id', read_only=True)
    invoiceNo = serializers.CharField(source='invoice.invoice_no', read_only=True)
    invoiceAmount = serializers.DecimalField(source='invoice.grand_total', max_digits=12, decimal_places=2, read_only=True)
    jobCardId = serializers.IntegerField(source='job_card_id', read_only=True)
    jobNo = serializers.SerializerMethodField()
    customerName = serializers.CharField(source='customer_name', read_only=True)
    returnDate = serializers.DateField(source='return_date', read_only=True)
    returnAmount = serializers.DecimalField(source='return_amount', max_digits=12, decimal_places=2, read_only=True)
    stockUpdated = serializers.BooleanField(source='stock_updated', read_only=True)
    createdBy = serializers.CharField(source='created_by.display_name', read_only=True, default=None)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    items = SalesReturnItemSerializer(many=True, read_only=True)

    class Meta:
        model = SalesReturn
        fields = [
            'id', 'returnNo', 'invoiceId', 'invoiceNo', 'invoiceAmount', 'jobCardId', 'jobNo',
            'customerName', 'returnDate', 'returnAmount', 'reason', 'status', 'stockUpdated',
            'createdBy', 'createdAt', 'items',
        ]
        read_only_fields = ['reason', 'status']

    def get_jobNo(self, obj):
        job_card = obj.effective_job_card
        return job_card.job_no if job_card else None


class SalesReturnCreateSerializer(serializers.Serializer):
    invoiceId = serializers.IntegerField(source='invoice_id')
    jobCardId = serializers.IntegerField(source='job_card_id', required=False, allow_null=True)
    returnDate = serializers.DateField(source='return_date')
    returnAmount = serializers.DecimalField(source='return_amount', max_digits=12, decimal_places=2, min_value=0)
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    items = SalesReturnItemSerializer(many=True, required=False)


class SalesReturnUpdateSerializer(serializers.Serializer):
    status = serializers.CharField(required=False)
    reason = serializers.CharField(required=False, allow_blank=True)
