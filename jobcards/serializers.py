# jobcards/serializers.py

from rest_framework import serializers

from accounts.permissions import can_see_purchase_prices
from . import testing_data
from .models import JobCard, JobCardMaterial, TestingRecord

AMOUNT = dict(max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True)


class JobCardSerializer(serializers.ModelSerializer):
    jobNumber = serializers.CharField(source='job_no', read_only=True)
    customerId = serializers.IntegerField(source='customer_id', read_only=True)
    customerName = serializers.CharField(source='customer.name', read_only=True, default=None)
    customerPhone = serializers.CharField(source='customer.phone', read_only=True, default=None)
    companyName = serializers.CharField(source='customer.company', read_only=True, default=None)
    technicianId = serializers.IntegerField(source='technician_id', read_only=True)
    technician = serializers.CharField(source='technician.display_name', read_only=True, default=None)
    vehicleType = serializers.CharField(source='vehicle_type', read_only=True)
    vehicleNumber = serializers.CharField(source='vehicle_number', read_only=True)
    engineModel = serializers.CharField(source='engine_model', read_only=True)
    jobType = serializers.CharField(source='job_type', read_only=True)
    jobSubType = serializers.CharField(source='job_sub_type', read_only=True)
    pumpInjectorSerial = serializers.CharField(source='pump_injector_serial', read_only=True)
    receivedDate = serializers.DateField(source='received_date', read_only=True)
    expectedDeliveryDate = serializers.DateField(source='expected_delivery_date', read_only=True)
    quotationAmount = serializers.DecimalField(source='quotation_amount', max_digits=12, decimal_places=2, read_only=True)
    finalAmount = serializers.DecimalField(source='final_amount', max_digits=12, decimal_places=2, read_only=True)
    labourCost = serializers.DecimalField(source='labour_cost', max_digits=12, decimal_places=2, read_only=True)
    materialsAmount = serializers.DecimalField(source='materials_amount', max_digits=12, decimal_places=2, read_only=True)
    materialsCost = serializers.DecimalField(source='materials_cost', max_digits=12, decimal_places=2, read_only=True)
    materialsCount = serializers.IntegerField(source='materials_count', read_only=True)
    profit = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    COST_FIELDS = ('materialsCost', 'labourCost', 'profit')

    class Meta:
        model = JobCard
        fields = [
            'id', 'jobNumber', 'customerId', 'customerName', 'customerPhone', 'companyName',
            'vehicleType', 'vehicleNumber', 'engineModel', 'jobType', 'jobSubType', 'brand',
            'pumpInjectorSerial', 'technicianId', 'technician', 'quantity', 'status',
            'receivedDate', 'expectedDeliveryDate', 'description', 'quotationAmount',
            'finalAmount', 'labourCost', 'materialsAmount', 'materialsCost', 'materialsCount',
            'profit', 'createdAt', 'updatedAt',
        ]
        read_only_fields = ['brand', 'quantity', 'status', 'description']

    def to_representation(self, instance):
        data = super().to_representation(instance)
        request = self.context.get('request')
        if request is None or not can_see_purchase_prices(request.user):
            for field in self.COST_FIELDS:
                data.pop(field, None)
        return data


class JobCardWriteSerializer(serializers.Serializer):
    """
    Intake form and partial edits. Used with partial=True for updates, in
    which case only the keys the client sent reach the state machine.
    """
    customerName = serializers.CharField(source='customer_name', max_length=200)
    customerPhone = serializers.CharField(source='customer_phone', max_length=20, required=False, allow_blank=True, allow_null=True)
    companyName = serializers.CharField(source='company_name', max_length=200, required=False, allow_blank=True, allow_null=True)
    vehicleType = serializers.CharField(source='vehicle_type', max_length=100)
    vehicleNumber = serializers.CharField(source='vehicle_number', max_length=50, required=False, allow_blank=True, allow_null=True)
    engineModel = serializers.CharField(source='engine_model', max_length=100, required=False, allow_blank=True, allow_null=True)
    jobType = serializers.CharField(source='job_type', max_length=100)
    jobSubType = serializers.CharField(source='job_sub_type', max_length=100, required=False, allow_blank=True, allow_null=True)
    brand = serializers.CharField(max_length=100)
    pumpInjectorSerial = serializers.CharField(source='pump_injector_serial', max_length=100, required=False, allow_blank=True, allow_null=True)
    quantity = serializers.IntegerField(min_value=1, required=False)
    technician = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    status = serializers.CharField(max_length=50, required=False, allow_blank=True)
    receivedDate = serializers.DateField(source='received_date', required=False)
    expectedDeliveryDate = serializers.DateField(source='expected_delivery_date', required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    quotationAmount = serializers.DecimalField(source='quotation_amount', **AMOUNT)
    finalAmount = serializers.DecimalField(source='final_amount', **AMOUNT)
    labourCost = serializers.DecimalField(source='labour_cost', max_digits=12, decimal_places=2, min_value=0, required=False)

    def validate_status(self, value):
        return value.strip()


class JobCardMaterialSerializer(serializers.ModelSerializer):
    jobCardId = serializers.IntegerField(source='job_card_id', read_only=True)
    inventoryItemId = serializers.IntegerField(source='inventory_item_id', read_only=True)
    materialName = serializers.CharField(source='material_name', read_only=True)
    unitPrice = serializers.DecimalField(source='unit_price', max_digits=10, decimal_places=2, read_only=True)
    unitCost = serializers.DecimalField(source='unit_cost', max_digits=10, decimal_places=2, read_only=True)
    totalPrice = serializers.DecimalField(source='total_price', max_digits=12, decimal_places=2, read_only=True)
    totalCost = serializers.DecimalField(source='total_cost', max_digits=12, decimal_places=2, read_only=True)
    stockDeducted = serializers.BooleanField(source='stock_deducted', read_only=True)
    partCode = serializers.CharField(source='inventory_item.part_code', read_only=True, default=None)
    availableStock = serializers.IntegerField(source='inventory_item.available_stock', read_only=True, default=None)

    COST_FIELDS = ('unitCost', 'totalCost')

    class Meta:
        model = JobCardMaterial
        fields = [
            'id', 'jobCardId', 'inventoryItemId', 'materialName', 'quantity', 'unitPrice',
            'unitCost', 'totalPrice', 'totalCost', 'stockDeducted', 'partCode', 'availableStock',
        ]
        read_only_fields = ['quantity']

    def to_representation(self, instance):
        data = super().to_representation(instance)
        request = self.context.get('request')
        if request is None or not can_see_purchase_prices(request.user):
            for field in self.COST_FIELDS:
                data.pop(field, None)
        return data


class JobCardDetailSerializer(JobCardSerializer):
    materials = JobCardMaterialSerializer(many=True, read_only=True)

    class Meta(JobCardSerializer.Meta):
        fields = JobCardSerializer.Meta.fields + ['materials']


class AddMaterialSerializer(serializers.Serializer):
    inventoryItemId = serializers.IntegerField(required=False, allow_null=True)
    materialName = serializers.CharField(max_length=200, required=False, allow_blank=True)
    quantity = serializers.IntegerField(min_value=1, error_messages={'min_value': 'Valid quantity is required'})
    unitPrice = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True)
    deferDeduction = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        if attrs.get('inventoryItemId') is None and not attrs.get('materialName'):
            raise serializers.ValidationError('Valid inventory item or material name is required')
        return attrs


class TestingRecordSerializer(serializers.ModelSerializer):
    jobCardId = serializers.IntegerField(source='job_card_id', read_only=True)
    jobCardNumber = serializers.CharField(source='job_card.job_no', read_only=True)
    customerName = serializers.SerializerMethodField()
    jobType = serializers.CharField(source='job_card.job_type', read_only=True)
    brand = serializers.CharField(source='job_card.brand', read_only=True)
    categoryType = serializers.CharField(source='category_type', read_only=True)
    schemaVersion = serializers.IntegerField(source='schema_version', read_only=True)
    beforeData = serializers.JSONField(source='before_data', read_only=True)
    afterData = serializers.JSONField(source='after_data', read_only=True)
    beforeRepair = serializers.SerializerMethodField()
    afterRepair = serializers.SerializerMethodField()
    injectorParams = serializers.SerializerMethodField()
    testDate = serializers.DateField(source='test_date', read_only=True)
    approvals = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = TestingRecord
        fields = [
            'id', 'jobCardId', 'jobCardNumber', 'customerName', 'jobType', 'brand',
            'categoryType', 'schemaVersion', 'beforeData', 'afterData', 'beforeRepair',
            'afterRepair', 'injectorParams', 'testDate', 'approvals', 'createdAt', 'updatedAt',
        ]

    def get_customerName(self, obj):
        customer = obj.job_card.customer
        return customer.name if customer else None

    def get_beforeRepair(self, obj):
        return testing_data.repair_summary(obj, 'before')

    def get_afterRepair(self, obj):
        return testing_data.repair_summary(obj, 'after')

    def get_injectorParams(self, obj):
        return testing_data.injector_params(obj)

    def get_approvals(self, obj):
        approval_date = obj.approval_date
        if approval_date and hasattr(approval_date, 'isoformat'):
            approval_date = approval_date.isoformat()
        return {
            'testedBy': obj.tested_by,
            'approvedBy': obj.approved_by,
            'approvalDate': approval_date,
        }


class TestingRecordWriteSerializer(serializers.Serializer):
    """Only the plain fields; before/after data goes through testing_data.normalize."""
    jobCardId = serializers.IntegerField(required=False)
    jobCardNumber = serializers.CharField(required=False)
    testDate = serializers.DateField(required=False)

    def validate(self, attrs):
        if not self.partial and not attrs.get('jobCardId') and not attrs.get('jobCardNumber'):
            raise serializers.ValidationError('Job card is required')
        return attrs
