# accounts/authentication.py

from rest_framework import exceptions
from rest_framework.authentication import TokenAuthentication


class LoginAccessTokenAuthentication(TokenAuthentication):
    """Token auth that stops honouring tokens once login access is revoked."""

    def authenticate_credentials(self, key):
        user, token = super().authenticate_credentials(key)
        if not user.login_access:
            raise exceptions.AuthenticationFailed('Login access has been disabled for this account.')
        return user, token
