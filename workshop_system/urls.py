# workshop_system/urls.py

from django.contrib import admin
from django.urls import path, include

from . import views

urlpatterns = [
    path('admin/', admin.site.urls),
    path('health/', views.health, name='health'),

    path('api/auth/', include('accounts.urls', namespace='accounts')),
    path('api/customers/', include('partners.urls', namespace='partners')),
    path('api/inventory/', include('inventory.urls', namespace='inventory')),
    path('api/', include('jobcards.urls', namespace='jobcards')),
    path('api/', include('sales.urls', namespace='sales')),
]
