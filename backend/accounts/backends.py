"""
Authentication backend for the portal login form.

The client sends one ``identifier`` that may be a username, an e-mail
address or a national ID.  Registered in
``settings.AUTHENTICATION_BACKENDS`` ahead of Django's ``ModelBackend``.
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend

User = get_user_model()

# Tried in order; the first lookup that matches exactly one account wins.
IDENTIFIER_LOOKUPS = ("username", "email__iexact", "national_id")


class MultiFieldAuthBackend(ModelBackend):
    """Resolve ``identifier`` against username, e-mail or national ID."""

    def authenticate(self, request, identifier=None, password=None, **kwargs):
        if not identifier or password is None:
            return None

        user = self._resolve(identifier.strip())
        if user is None:
            # Same hashing cost as a real check.
            User().set_password(password)
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None

    @staticmethod
    def _resolve(identifier: str):
        for lookup in IDENTIFIER_LOOKUPS:
            matches = list(User.objects.filter(**{lookup: identifier})[:2])
            if len(matches) == 1:
                return matches[0]
        return None
