# partners/admin.py

from django.contrib import admin
from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ('name', 'phone', 'email', 'company', 'is_deleted', 'created_at')
    list_filter = ('is_deleted',)
    search_fields = ('name', 'email', 'phone', 'company')
