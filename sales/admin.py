# sales/admin.py

from django.contrib import admin
from .models import Invoice, SalesReturn, SalesReturnItem


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ('invoice_no', 'job_card', 'customer', 'invoice_date', 'grand_total', 'status')
    list_filter = ('status', 'invoice_date')
    search_fields = ('invoice_no', 'job_card__job_no', 'customer__name')
    readonly_fields = ('invoice_no', 'grand_total', 'created_at', 'updated_at')


# Items are shown read-only; stock follows them on approval.
class SalesReturnItemInline(admin.TabularInline):
    model = SalesReturnItem
    extra = 0
    fields = ('inventory_item', 'quantity', 'unit_price', 'total_price')
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(SalesReturn)
class SalesReturnAdmin(admin.ModelAdmin):
    list_display = ('return_no', 'invoice', 'return_date', 'return_amount', 'status', 'stock_updated', 'created_by')
    list_filter = ('status', 'stock_updated', 'return_date')
    search_fields = ('return_no', 'invoice__invoice_no', 'reason')
    # Status changes go through the API so approval restocks inventory.
    readonly_fields = ('return_no', 'status', 'stock_updated', 'created_at', 'updated_at')
    inlines = [SalesReturnItemInline]
