from django.contrib import admin
from .models import JobCard, JobCardMaterial, TestingRecord


class JobCardMaterialInline(admin.TabularInline):
    model = JobCardMaterial
    extra = 0
    fields = ('inventory_item', 'material_name', 'quantity', 'unit_price', 'total_price', 'stock_deducted')
    readonly_fields = fields
    can_delete = False

    # Lines go through the materials API so stock stays in step.
    def has_add_permission(self, request, obj=None):
        return False


@admin.register(JobCard)
class JobCardAdmin(admin.ModelAdmin):
    list_display = ('job_no', 'customer', 'vehicle_type', 'job_type', 'brand', 'technician', 'status', 'received_date')
    list_filter = ('status', 'vehicle_type', 'job_type', 'received_date')
    search_fields = ('job_no', 'customer__name', 'customer__phone', 'vehicle_number', 'pump_injector_serial')
    readonly_fields = ('job_no', 'status', 'created_at', 'updated_at')
    inlines = [JobCardMaterialInline]


@admin.register(TestingRecord)
class TestingRecordAdmin(admin.ModelAdmin):
    list_display = ('job_card', 'test_date', 'category_type', 'schema_version', 'before_pass_fail', 'after_pass_fail', 'tested_by')
    list_filter = ('schema_version', 'category_type', 'test_date')
    search_fields = ('job_card__job_no', 'tested_by', 'approved_by')
