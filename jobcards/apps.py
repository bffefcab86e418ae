# jobcards/apps.py
from django.apps import AppConfig


class JobcardsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'jobcards'
    verbose_name = 'Job Cards'
