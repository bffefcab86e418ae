# accounts/backends.py

from django.contrib.auth.backends import ModelBackend


class LoginAccessBackend(ModelBackend):
    """ModelBackend that also refuses accounts whose login access was revoked."""

    def user_can_authenticate(self, user):
        if not getattr(user, 'login_access', True):
            return False
        return super().user_can_authenticate(user)
