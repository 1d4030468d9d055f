"""
Bearer token authentication for the API.

Tokens are issued by :mod:`core.auth_views` with simplejwt and carry the
user id and role.  The user is re-read from the database on each request
so a role change or deactivation takes effect immediately.
"""
from __future__ import annotations

from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.tokens import RefreshToken


class BearerAuthentication(JWTAuthentication):
    """``Authorization: Bearer <access token>`` authentication.

    This subclass exists to provide a stable import path for the
    project's configuration and to allow later customisation.
    """

    www_authenticate_realm = 'hospital'


def issue_tokens(user) -> RefreshToken:
    """Return a refresh token (and derived access token) carrying the role."""
    refresh = RefreshToken.for_user(user)
    refresh['role'] = user.role
    return refresh
