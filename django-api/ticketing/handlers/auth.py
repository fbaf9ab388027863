"""Session verification adapters.

Tokens are opaque to clients: a signed, timestamped payload of
``{sub, email, role}``. Account holders send ``Authorization: Bearer``;
check-in agents use the narrower ``X-Scan-Token`` header.
"""

import logging

from django.conf import settings
from django.core import signing
from rest_framework.authentication import BaseAuthentication, get_authorization_header
from rest_framework.exceptions import AuthenticationFailed

from ticketing.domain import Principal
from ticketing.domain.statuses import Role

logger = logging.getLogger(__name__)

SESSION_SALT = "ticketing.session"
SCAN_HEADER = "HTTP_X_SCAN_TOKEN"


def sign_session(principal: Principal) -> str:
    return signing.dumps(
        {"sub": principal.subject_id, "email": principal.email, "role": principal.role.value},
        salt=SESSION_SALT,
    )


def verify_session(token: str) -> Principal | None:
    """Return the principal behind ``token``, or None if it is invalid or expired."""
    try:
        payload = signing.loads(token, salt=SESSION_SALT, max_age=settings.SESSION_TOKEN_MAX_AGE)
        return Principal(
            subject_id=str(payload["sub"]),
            email=str(payload["email"]),
            role=Role(payload["role"]),
        )
    except signing.BadSignature:
        return None
    except (KeyError, TypeError, ValueError):
        logger.warning("Signed session with malformed payload rejected")
        return None


class SessionUser:
    """Minimal authenticated user wrapping a verified principal."""

    is_authenticated = True
    is_anonymous = False

    def __init__(self, principal: Principal) -> None:
        self.principal = principal
        self.pk = principal.subject_id

    def __str__(self) -> str:
        return f"{self.principal.role}:{self.principal.subject_id}"


class BearerSessionAuthentication(BaseAuthentication):
    """Authenticates account holders (customer, organizer, admin)."""

    keyword = "Bearer"

    def authenticate(self, request):
        parts = get_authorization_header(request).split()
        if not parts or parts[0].lower() != self.keyword.lower().encode():
            return None
        if len(parts) != 2:
            raise AuthenticationFailed("Invalid authorization header")
        principal = verify_session(parts[1].decode("latin-1"))
        if principal is None or principal.role is Role.AGENT:
            raise AuthenticationFailed("Invalid or expired session")
        return SessionUser(principal), principal

    def authenticate_header(self, request) -> str:
        return self.keyword


class ScanSessionAuthentication(BaseAuthentication):
    """Authenticates check-in agents through the scan session header."""

    def authenticate(self, request):
        token = request.META.get(SCAN_HEADER)
        if not token:
            return None
        principal = verify_session(token)
        if principal is None or principal.role is not Role.AGENT:
            raise AuthenticationFailed("Invalid or expired scan session")
        return SessionUser(principal), principal

    def authenticate_header(self, request) -> str:
        return "Scan"
