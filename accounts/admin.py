# accounts/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User


@admin.register(User)
class CustomUserAdmin(BaseUserAdmin):
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Workshop', {'fields': ('role', 'phone', 'login_access')}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Workshop', {'fields': ('role', 'phone', 'login_access')}),
    )

    list_display = ('username', 'email', 'first_name', 'last_name', 'role', 'login_access', 'is_staff')
    list_filter = BaseUserAdmin.list_filter + ('role', 'login_access')
    search_fields = ('username', 'email', 'first_name', 'last_name', 'phone')
