# partners/urls.py

from django.urls import path
from . import views

app_name = 'partners'

urlpatterns = [
    path('', views.customer_list, name='customer_list'),
    path('<int:pk>/', views.customer_detail, name='customer_detail'),
]
