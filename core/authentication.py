# core/authentication.py
import logging
from datetime import timedelta

from django.conf import settings
from django.utils import timezone
from jose import JWTError, jwt
from rest_framework import exceptions
from rest_framework.authentication import BaseAuthentication

from core.models import User

logger = logging.getLogger(__name__)


def issue_token(user):
    """Sign a bearer token carrying the user's id and role."""
    payload = {
        "id": user.id,
        "role": user.role,
        "exp": timezone.now() + timedelta(minutes=settings.JWT_EXPIRES_MINUTES),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def _extract_bearer(authorization):
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def _decode_token(raw_token):
    try:
        return jwt.decode(raw_token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise exceptions.AuthenticationFailed("Invalid or expired token")


class JWTAuthentication(BaseAuthentication):
    def authenticate(self, request):
        token = _extract_bearer(request.META.get("HTTP_AUTHORIZATION"))
        if token is None:
            return None

        payload = _decode_token(token)
        user = User.objects.filter(id=payload.get("id")).first()
        if user is None:
            logger.warning(f"Token references unknown user id {payload.get('id')}")
            raise exceptions.AuthenticationFailed("User no longer exists")
        if not user.is_active_account:
            raise exceptions.AuthenticationFailed("Account is inactive")
        return user, payload

    def authenticate_header(self, request):
        return "Bearer"
