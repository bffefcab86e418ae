# sales/urls.py

from django.urls import path
from . import views

app_name = 'sales'

urlpatterns = [
    path('invoices/', views.invoice_list, name='invoice_list'),
    path('invoices/<int:pk>/', views.invoice_detail, name='invoice_detail'),
    path('sales-returns/', views.sales_return_list, name='sales_return_list'),
    path('sales-returns/<int:pk>/', views.sales_return_detail, name='sales_return_detail'),
]
