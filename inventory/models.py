# inventory/models.py

import random

from django.db import models
from django.core.validators import MinValueValidator

STATUS_LOW = 'Low'
STATUS_OK = 'OK'


def stock_status(available, minimum):
    """'Low' once stock falls to the minimum level, otherwise 'OK'."""
    return STATUS_LOW if available <= minimum else STATUS_OK


def generate_barcode():
    return str(random.randint(100000000000, 999999999999))


class InventoryCategory(models.Model):
    name = models.CharField(max_length=100, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = "Inventory Categories"

    def __str__(self):
        return self.name


class InventoryItemQuerySet(models.QuerySet):
    def low_stock(self):
        return self.filter(available_stock__lte=models.F('min_stock_level'))

    def in_stock(self):
        return self.filter(available_stock__gt=models.F('min_stock_level'))


class InventoryItem(models.Model):
    part_name = models.CharField(max_length=200)
    part_code = models.CharField(max_length=100, unique=True, blank=True, null=True, verbose_name="Part Code")
    barcode = models.CharField(max_length=100, unique=True, blank=True)
    category = models.CharField(max_length=100)
    supplier = models.CharField(max_length=200, blank=True, null=True)

    # Only InventoryLedger.adjust_stock writes this column after creation.
    available_stock = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    min_stock_level = models.IntegerField(default=0, validators=[MinValueValidator(0)])

    unit_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    wholesale_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    sales_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    purchase_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = InventoryItemQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(condition=models.Q(available_stock__gte=0), name='inventory_item_stock_non_negative'),
        ]

    def __str__(self):
        if self.part_code:
            return f"{self.part_name} ({self.part_code})"
        return self.part_name

    @property
    def status(self):
        return stock_status(self.available_stock, self.min_stock_level)

    @property
    def selling_price(self):
        """Price charged when the part is used on a job card."""
        return self.sales_price or self.unit_price

    def save(self, *args, **kwargs):
        if not self.barcode:
            barcode = generate_barcode()
            while InventoryItem.objects.filter(barcode=barcode).exists():
                barcode = generate_barcode()
            self.barcode = barcode
        if not self.part_code:
            self.part_code = None
        super().save(*args, **kwargs)
