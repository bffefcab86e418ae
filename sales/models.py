# sales/models.py

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone


class Invoice(models.Model):
    STATUS_UNPAID = 'Unpaid'
    STATUS_PAID = 'Paid'
    STATUS_CHOICES = [
        (STATUS_UNPAID, 'Unpaid'),
        (STATUS_PAID, 'Paid'),
    ]

    invoice_no = models.CharField(max_length=20, unique=True, verbose_name="Invoice Number")
    job_card = models.ForeignKey('jobcards.JobCard', on_delete=models.SET_NULL, null=True, blank=True, related_name='invoices')
    customer = models.ForeignKey('partners.Customer', on_delete=models.SET_NULL, null=True, blank=True, related_name='invoices')
    invoice_date = models.DateField(default=timezone.localdate)
    labour_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    parts_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    vat_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=0)
    grand_total = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_UNPAID)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='invoices')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return self.invoice_no

    def calculate_grand_total(self):
        subtotal = (self.labour_amount or Decimal('0')) + (self.parts_amount or Decimal('0'))
        vat = subtotal * (self.vat_percentage or Decimal('0')) / Decimal('100')
        return (subtotal + vat).quantize(Decimal('0.01'))

    def save(self, *args, **kwargs):
        self.grand_total = self.calculate_grand_total()
        super().save(*args, **kwargs)


class SalesReturn(models.Model):
    STATUS_PENDING = 'Pending'
    STATUS_APPROVED = 'Approved'
    STATUS_REJECTED = 'Rejected'
    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_APPROVED, 'Approved'),
        (STATUS_REJECTED, 'Rejected'),
    ]
    TERMINAL_STATUSES = (STATUS_APPROVED, STATUS_REJECTED)

    return_no = models.CharField(max_length=20, unique=True, verbose_name="Return Number")
    invoice = models.ForeignKey(Invoice, on_delete=models.PROTECT, related_name='sales_returns', help_text="The invoice being returned against.")
    job_card = models.ForeignKey('jobcards.JobCard', on_delete=models.SET_NULL, null=True, blank=True, related_name='sales_returns')
    return_date = models.DateField(default=timezone.localdate)
    return_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    reason = models.TextField(blank=True, null=True, help_text="Reason for the return.")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)
    # Set once the returned quantities have been put back into inventory.
    stock_updated = models.BooleanField(default=False)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='sales_returns')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.return_no} for {self.invoice.invoice_no}"

    @property
    def effective_job_card(self):
        return self.job_card or self.invoice.job_card

    @property
    def customer_name(self):
        job_card = self.effective_job_card
        if job_card and job_card.customer:
            return job_card.customer.name
        return self.invoice.customer.name if self.invoice.customer else None


class SalesReturnItem(models.Model):
    sales_return = models.ForeignKey(SalesReturn, related_name='items', on_delete=models.CASCADE)
    inventory_item = models.ForeignKey('inventory.InventoryItem', on_delete=models.PROTECT, null=True, blank=True, related_name='sales_return_items')
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0,
        help_text="Price of the item at the time of return."
    )
    total_price = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    class Meta:
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gt=0), name='sales_return_item_quantity_positive'),
        ]

    def __str__(self):
        name = self.inventory_item.part_name if self.inventory_item else 'item'
        return f"{self.quantity} x {name} for {self.sales_return.return_no}"
