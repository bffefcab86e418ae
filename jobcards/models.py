# jobcards/models.py

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.db.models import Sum, Count
from django.utils import timezone


class JobCard(models.Model):
    STATUS_RECEIVED = 'Received'
    STATUS_UNDER_REPAIR = 'Under Repair'
    STATUS_TESTING = 'Testing'
    STATUS_COMPLETED = 'Completed'
    STATUS_DELIVERED = 'Delivered'
    # Status is a free label; these are the ones the workshop uses day to day.
    WELL_KNOWN_STATUSES = [STATUS_RECEIVED, STATUS_UNDER_REPAIR, STATUS_TESTING, STATUS_COMPLETED, STATUS_DELIVERED]

    job_no = models.CharField(max_length=20, unique=True, verbose_name="Job Number")
    customer = models.ForeignKey('partners.Customer', on_delete=models.SET_NULL, null=True, blank=True, related_name='job_cards')
    technician = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='assigned_job_cards')

    vehicle_type = models.CharField(max_length=100)
    vehicle_number = models.CharField(max_length=50, blank=True, null=True)
    engine_model = models.CharField(max_length=100, blank=True, null=True)
    job_type = models.CharField(max_length=100)
    job_sub_type = models.CharField(max_length=100, blank=True, null=True)
    brand = models.CharField(max_length=100)
    pump_injector_serial = models.CharField(max_length=100, blank=True, null=True)
    quantity = models.PositiveIntegerField(default=1)

    status = models.CharField(max_length=50, default=STATUS_RECEIVED)
    received_date = models.DateField(default=timezone.localdate)
    expected_delivery_date = models.DateField(blank=True, null=True)
    description = models.TextField(blank=True, null=True)

    quotation_amount = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)
    final_amount = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)
    labour_cost = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        customer = self.customer.name if self.customer else 'Walk-in'
        return f"{self.job_no} ({customer})"

    def _material_totals(self):
        if not hasattr(self, '_totals_cache'):
            self._totals_cache = self.materials.aggregate(
                amount=Sum('total_price'), cost=Sum('total_cost'), count=Count('id'),
            )
        return self._totals_cache

    @property
    def materials_amount(self):
        return self._material_totals()['amount'] or Decimal('0.00')

    @property
    def materials_cost(self):
        return self._material_totals()['cost'] or Decimal('0.00')

    @property
    def materials_count(self):
        return self._material_totals()['count'] or 0

    @property
    def profit(self):
        return (self.final_amount or Decimal('0.00')) - self.materials_cost - (self.labour_cost or Decimal('0.00'))

    def refresh_totals(self):
        self.__dict__.pop('_totals_cache', None)


class JobCardMaterial(models.Model):
    job_card = models.ForeignKey(JobCard, on_delete=models.CASCADE, related_name='materials')
    inventory_item = models.ForeignKey('inventory.InventoryItem', on_delete=models.PROTECT, null=True, blank=True, related_name='job_card_materials')
    material_name = models.CharField(max_length=200)
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    unit_cost = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total_cost = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    # True once this line's quantity has been taken out of inventory.
    stock_deducted = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gt=0), name='job_card_material_quantity_positive'),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.material_name} for {self.job_card.job_no}"

    def save(self, *args, **kwargs):
        self.total_price = (self.unit_price or 0) * self.quantity
        self.total_cost = (self.unit_cost or 0) * self.quantity
        super().save(*args, **kwargs)


class TestingRecord(models.Model):
    """
    Bench test results for a job card. Older records carry only the scalar
    columns (schema_version 1); newer ones keep structured before/after
    data as JSON (schema_version 2). See jobcards.testing_data.
    """
    job_card = models.ForeignKey(JobCard, on_delete=models.PROTECT, related_name='testing_records')
    test_date = models.DateField(default=timezone.localdate)
    category_type = models.CharField(max_length=50, blank=True, null=True)
    schema_version = models.PositiveSmallIntegerField(default=1)

    before_pressure = models.CharField(max_length=50, blank=True, null=True)
    before_leak = models.CharField(max_length=50, blank=True, null=True)
    before_calibration = models.CharField(max_length=50, blank=True, null=True)
    before_pass_fail = models.CharField(max_length=10, default='Fail')
    after_pressure = models.CharField(max_length=50, blank=True, null=True)
    after_leak = models.CharField(max_length=50, blank=True, null=True)
    after_calibration = models.CharField(max_length=50, blank=True, null=True)
    after_pass_fail = models.CharField(max_length=10, default='Fail')

    pilot_injection = models.CharField(max_length=50, blank=True, null=True)
    main_injection = models.CharField(max_length=50, blank=True, null=True)
    return_flow = models.CharField(max_length=50, blank=True, null=True)
    injector_pressure = models.CharField(max_length=50, blank=True, null=True)
    leak_test = models.CharField(max_length=10, default='Fail')

    before_data = models.JSONField(blank=True, null=True)
    after_data = models.JSONField(blank=True, null=True)

    tested_by = models.CharField(max_length=100, blank=True, null=True)
    approved_by = models.CharField(max_length=100, blank=True, null=True)
    approval_date = models.DateField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"Test of {self.job_card.job_no} on {self.test_date}"
