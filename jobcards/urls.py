# jobcards/urls.py

from django.urls import path
from . import views

app_name = 'jobcards'

urlpatterns = [
    path('job-cards/', views.job_card_list, name='job_card_list'),
    path('job-cards/<int:pk>/', views.job_card_detail, name='job_card_detail'),
    path('job-cards/<int:pk>/pdf/', views.export_job_card_pdf, name='export_job_card_pdf'),
    path('job-cards/<int:pk>/materials/', views.job_card_materials, name='job_card_materials'),
    path('job-cards/<int:pk>/materials/<int:material_id>/', views.job_card_material_detail, name='job_card_material_detail'),
    path('testing-records/', views.testing_record_list, name='testing_record_list'),
    path('testing-records/<int:pk>/', views.testing_record_detail, name='testing_record_detail'),
]
