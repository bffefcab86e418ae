from django.contrib import admin
from .models import StockTransaction, ItemActivity


class ReadOnlyAuditAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StockTransaction)
class StockTransactionAdmin(ReadOnlyAuditAdmin):
    list_display = ('created_at', 'inventory_item', 'transaction_type', 'quantity', 'previous_stock', 'new_stock', 'reference_no', 'created_by')
    list_filter = ('transaction_type', 'created_at')
    search_fields = ('inventory_item__part_name', 'reference_no', 'bill_no', 'notes')


@admin.register(ItemActivity)
class ItemActivityAdmin(ReadOnlyAuditAdmin):
    list_display = ('activity_date', 'inventory_item', 'activity_type', 'quantity', 'unit_price', 'total_price', 'reference_no')
    list_filter = ('activity_type', 'activity_date')
    search_fields = ('inventory_item__part_name', 'reference_no', 'customer_name', 'supplier_name')
