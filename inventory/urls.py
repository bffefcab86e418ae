# inventory/urls.py

from django.urls import path
from . import views

app_name = 'inventory'

urlpatterns = [
    path('', views.inventory_list, name='inventory_list'),
    path('categories/', views.category_list, name='category_list'),
    path('<int:pk>/', views.inventory_detail, name='inventory_detail'),
    path('<int:pk>/stock-in/', views.stock_in, name='stock_in'),
    path('<int:pk>/stock-out/', views.stock_out, name='stock_out'),
    path('<int:pk>/transactions/', views.stock_transactions, name='stock_transactions'),
    path('<int:pk>/activity/', views.item_activity, name='item_activity'),
    path('<int:pk>/activity/export/', views.export_item_activity_excel, name='export_item_activity'),
    path('<int:pk>/barcode/', views.item_barcode, name='item_barcode'),
]
