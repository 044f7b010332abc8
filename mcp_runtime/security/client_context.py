"""
Request Context - Identity and credentials of the caller of one request

Module: security.client_context
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - RequestContext built by serving loops per inbound frame
  - Identity used as the rate limiting key
  - Auth token extracted from the Authorization header
  - Auth payload filled in by the authorization gate

ARCHITECTURE:
RequestContext is handed to the dispatcher together with the raw frame,
and from there to every authorizer predicate and capability handler.
It is a plain carrier: no validation happens here.

SECURITY NOTES:
- auth_token is never logged (see __repr__)
- auth_payload is only set after the gate verified the token
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .permissions import token_scopes

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Extract a token from an Authorization header value

    Args:
        authorization: Header value ("Bearer <token>" or a raw token)

    Returns:
        str: The token, or None when the header is empty
    """
    if not authorization:
        return None
    if authorization.startswith(BEARER_PREFIX):
        return authorization[len(BEARER_PREFIX):].strip() or None
    return authorization.strip() or None


@dataclass
class RequestContext:
    """
    Per-request caller context

    Attributes:
        identity: Rate limiting identity (remote address, client id, ...)
        auth_token: Bearer token presented by the caller
        headers: Transport headers, if any
        auth_payload: Verified token payload (set by AuthorizationGate)
        metadata: Free-form values for authorizers and handlers
        received_at: When the frame arrived
    """
    identity: str = "anonymous"
    auth_token: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)
    auth_payload: Optional[Dict[str, Any]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    received_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_headers(cls, identity: str, headers: Dict[str, str]) -> "RequestContext":
        """
        Build a context from transport headers

        Args:
            identity: Caller identity (usually the peer address)
            headers: Header mapping (case-insensitive lookup of Authorization)

        Returns:
            RequestContext
        """
        authorization = None
        for name, value in headers.items():
            if name.lower() == "authorization":
                authorization = value
                break
        return cls(
            identity=identity or "anonymous",
            auth_token=extract_bearer_token(authorization),
            headers=dict(headers),
        )

    @property
    def is_authenticated(self) -> bool:
        """True once the gate accepted the token"""
        return self.auth_payload is not None

    @property
    def scopes(self) -> list:
        """Scopes granted by the verified token"""
        return token_scopes(self.auth_payload)

    def get_info(self) -> Dict[str, Any]:
        """
        Get context information for logging/debugging

        Returns:
            dict: Context information without credentials
        """
        return {
            "identity": self.identity,
            "authenticated": self.is_authenticated,
            "subject": (self.auth_payload or {}).get("sub"),
            "received_at": self.received_at.isoformat(),
        }

    def __repr__(self) -> str:
        return (
            f"RequestContext("
            f"identity={self.identity}, "
            f"auth={self.is_authenticated}"
            f")"
        )
