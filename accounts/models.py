# accounts/models.py

from django.db import models
from django.contrib.auth.models import AbstractUser


class User(AbstractUser):
    """
    Workshop staff account. The role decides which parts of the API the
    user may reach; login_access lets an admin lock an account without
    deleting it.
    """
    ROLE_ADMIN = 'admin'
    ROLE_TECHNICIAN = 'technician'
    ROLE_STOREKEEPER = 'storekeeper'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Admin'),
        (ROLE_TECHNICIAN, 'Technician'),
        (ROLE_STOREKEEPER, 'Storekeeper'),
    ]

    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_TECHNICIAN)
    phone = models.CharField(max_length=20, blank=True, null=True)
    login_access = models.BooleanField(default=True, help_text="Users without login access cannot sign in.")

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self):
        return self.username

    @property
    def display_name(self):
        return self.get_full_name() or self.username

    @property
    def is_admin_role(self):
        return self.role == self.ROLE_ADMIN

    @property
    def is_technician(self):
        return self.role == self.ROLE_TECHNICIAN

    @property
    def is_storekeeper(self):
        return self.role == self.ROLE_STOREKEEPER
