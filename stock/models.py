# stock/models.py

from django.db import models
from django.conf import settings
from django.utils import timezone

from workshop_system.exceptions import Conflict


class AppendOnlyQuerySet(models.QuerySet):
    def update(self, **kwargs):
        raise Conflict(f"{self.model._meta.verbose_name_plural} are append-only and cannot be updated.")

    def delete(self):
        raise Conflict(f"{self.model._meta.verbose_name_plural} are append-only and cannot be deleted.")


class AppendOnlyModel(models.Model):
    """Audit rows: written once, never changed, never removed."""

    objects = AppendOnlyQuerySet.as_manager()

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if self.pk is not None and not self._state.adding:
            raise Conflict(f"{self._meta.verbose_name} #{self.pk} is append-only and cannot be changed.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise Conflict(f"{self._meta.verbose_name} #{self.pk} is append-only and cannot be deleted.")


class StockTransaction(AppendOnlyModel):
    STOCK_IN = 'Stock In'
    STOCK_OUT = 'Stock Out'
    TRANSACTION_TYPES = [
        (STOCK_IN, 'Stock In'),
        (STOCK_OUT, 'Stock Out'),
    ]

    inventory_item = models.ForeignKey('inventory.InventoryItem', on_delete=models.PROTECT, related_name='stock_transactions')
    transaction_type = models.CharField(max_length=20, choices=TRANSACTION_TYPES)
    quantity = models.PositiveIntegerField()
    previous_stock = models.IntegerField()
    new_stock = models.IntegerField()
    reference_no = models.CharField(max_length=50, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)

    # Purchase details, filled for Stock In from a supplier bill.
    bill_no = models.CharField(max_length=100, blank=True, null=True)
    supplier_name = models.CharField(max_length=200, blank=True, null=True)
    purchase_date = models.DateField(blank=True, null=True)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, blank=True, null=True)

    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name = "stock transaction"
        verbose_name_plural = "stock transactions"

    def __str__(self):
        return f"{self.transaction_type} of {self.quantity} x {self.inventory_item.part_name}"


class ItemActivity(AppendOnlyModel):
    PURCHASE = 'Purchase'
    STOCK_IN = 'Stock In'
    STOCK_OUT = 'Stock Out'
    JOB_USAGE = 'Job Usage'
    SALE = 'Sale'
    RETURN = 'Return'
    ACTIVITY_TYPES = [
        (PURCHASE, 'Purchase'),
        (STOCK_IN, 'Stock In'),
        (STOCK_OUT, 'Stock Out'),
        (JOB_USAGE, 'Job Usage'),
        (SALE, 'Sale'),
        (RETURN, 'Return'),
    ]

    inventory_item = models.ForeignKey('inventory.InventoryItem', on_delete=models.PROTECT, related_name='activities')
    activity_type = models.CharField(max_length=20, choices=ACTIVITY_TYPES)
    activity_date = models.DateField(default=timezone.localdate)
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    reference_type = models.CharField(max_length=50, blank=True, null=True)
    reference_id = models.PositiveIntegerField(blank=True, null=True)
    reference_no = models.CharField(max_length=50, blank=True, null=True)
    supplier_name = models.CharField(max_length=200, blank=True, null=True)
    customer_name = models.CharField(max_length=200, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)

    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-activity_date', '-created_at', '-id']
        verbose_name = "item activity"
        verbose_name_plural = "item activities"

    def __str__(self):
        return f"{self.activity_type}: {self.quantity} x {self.inventory_item.part_name}"
