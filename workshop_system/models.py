# workshop_system/models.py

from django.db import models


class DocumentSequence(models.Model):
    """Last number handed out per document prefix (JC, SR, INV)."""
    prefix = models.CharField(max_length=10, unique=True)
    last_number = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.prefix}: {self.last_number}"
