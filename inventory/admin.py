# inventory/admin.py

from django.contrib import admin
from django.utils.html import format_html
from import_export import fields, resources
from import_export.admin import ImportExportModelAdmin

from .models import InventoryCategory, InventoryItem, STATUS_LOW


@admin.register(InventoryCategory)
class InventoryCategoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'created_at')
    search_fields = ('name',)


class InventoryItemResource(resources.ModelResource):
    """Bulk import/export of parts. Stock levels are not importable; they move through stock-in."""

    available_stock = fields.Field(attribute='available_stock', column_name='available_stock', readonly=True)

    class Meta:
        model = InventoryItem
        fields = ('part_name', 'part_code', 'barcode', 'category', 'supplier', 'available_stock',
                  'min_stock_level', 'unit_price', 'wholesale_price', 'sales_price', 'purchase_price')
        export_order = fields
        import_id_fields = ('part_code',)
        skip_unchanged = True


@admin.register(InventoryItem)
class InventoryItemAdmin(ImportExportModelAdmin):
    resource_class = InventoryItemResource

    def stock_status(self, obj):
        if obj.status == STATUS_LOW:
            return format_html('<span style="color: orange; font-weight: bold;">{}</span>', obj.status)
        return format_html('<span style="color: green; font-weight: bold;">{}</span>', obj.status)
    stock_status.short_description = 'Status'

    list_display = ('part_name', 'part_code', 'barcode', 'category', 'supplier', 'available_stock', 'min_stock_level', 'sales_price', 'stock_status')
    list_filter = ('category',)
    search_fields = ('part_name', 'part_code', 'barcode', 'supplier')
    readonly_fields = ('available_stock', 'created_at', 'updated_at')
    fieldsets = (
        (None, {'fields': ('part_name', 'part_code', 'barcode', 'category', 'supplier')}),
        ('Pricing & Stock', {'fields': ('available_stock', 'min_stock_level', 'unit_price', 'wholesale_price', 'sales_price', 'purchase_price')}),
        ('Timestamps', {'fields': ('created_at', 'updated_at')}),
    )
