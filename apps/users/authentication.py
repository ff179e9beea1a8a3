"""DRF authentication backed by identity provider tokens."""

from __future__ import annotations

from django.utils.translation import gettext_lazy as _  # type: ignore
from rest_framework_simplejwt.authentication import JWTAuthentication  # type: ignore
from rest_framework_simplejwt.exceptions import AuthenticationFailed, InvalidToken  # type: ignore
from rest_framework_simplejwt.settings import api_settings  # type: ignore

from .services import IdentityConflict, mirror_identity


class IdentityProviderAuthentication(JWTAuthentication):
    """Verifies the provider's bearer token and mirrors the principal locally.

    Signature, issuer and audience checks are configured through
    ``SIMPLE_JWT``; this class only replaces the user lookup so that unknown
    subjects become customers instead of being rejected.
    """

    def get_user(self, validated_token):  # type: ignore
        try:
            uid = validated_token[api_settings.USER_ID_CLAIM]
        except KeyError:
            raise InvalidToken(_("Token contained no recognizable user identification"))

        try:
            user = mirror_identity(str(uid), validated_token)
        except IdentityConflict:
            raise AuthenticationFailed(_("Email is linked to another account"), code="identity_conflict")
        if not user.is_active:
            raise AuthenticationFailed(_("User is inactive"), code="user_inactive")
        return user
