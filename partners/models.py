# partners/models.py

from django.db import models


class ActiveCustomerManager(models.Manager):
    def get_queryset(self):
        return super().get_queryset().filter(is_deleted=False)


class Customer(models.Model):
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=20, blank=True, null=True)
    email = models.EmailField(blank=True, null=True)
    company = models.CharField(max_length=200, blank=True, null=True)
    address = models.TextField(blank=True, null=True)
    # Deleted customers stay in the table so old job cards keep their name.
    is_deleted = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = models.Manager()
    active = ActiveCustomerManager()

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    @classmethod
    def find_or_create(cls, name, phone=None):
        """Job card intake looks customers up by (name, phone) before creating one."""
        customer = cls.active.filter(name=name, phone=phone or None).first()
        if customer is None:
            customer = cls.objects.create(name=name, phone=phone or None)
        return customer
