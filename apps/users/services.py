"""Identity mirroring for principals supplied by the identity provider."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from django.db import IntegrityError, transaction  # type: ignore

from .models import LOCAL_UID_PREFIX, AppUser

logger = logging.getLogger(__name__)


class IdentityConflict(Exception):
    """The token's email already belongs to an account of another subject."""


def mirror_identity(uid: str, claims: Mapping[str, Any]) -> AppUser:
    """Return the AppUser for ``uid``, creating it from token claims on first sight.

    Profile fields the customer edited locally are never overwritten by
    later tokens; only a missing display name is filled in. A locally created
    account (``createsuperuser``) with the token's email is linked to the
    subject instead of duplicated.
    """

    user = AppUser.objects.filter(uid=uid).first()
    if user is not None:
        if not user.display_name and claims.get("name"):
            user.display_name = claims["name"]
            user.save(update_fields=["display_name", "updated_at"])
        return user

    email = claims.get("email") or f"{uid}@users.invalid"
    try:
        with transaction.atomic():
            user = AppUser.objects.create_user(
                email=email,
                uid=uid,
                display_name=claims.get("name") or "",
                phone_number=claims.get("phone_number") or "",
            )
    except IntegrityError:
        # Either a concurrent first request for the same subject, or the email is taken.
        user = AppUser.objects.filter(uid=uid).first()
        if user is None:
            user = _link_local_account(uid, email)
    else:
        logger.info(f"Mirrored new identity {uid} as user {user.pk}")
    return user


def _link_local_account(uid: str, email: str) -> AppUser:
    user = AppUser.objects.filter(email__iexact=email).first()
    if user is None or not user.uid.startswith(LOCAL_UID_PREFIX):
        logger.warning(f"Identity {uid} presented email {email} owned by another subject")
        raise IdentityConflict(f"Email {email} is linked to another identity.")
    user.uid = uid
    user.save(update_fields=["uid", "updated_at"])
    logger.info(f"Linked identity {uid} to local user {user.pk}")
    return user
