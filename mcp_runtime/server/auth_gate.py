"""
Authorization Gate - Token and scope check applied per request

Module: server.auth_gate
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - Token required on every request once a gate is configured
  - Scope check through MethodPermissions
  - Verified payload stored on the RequestContext

SECURITY NOTES:
- Missing token, invalid token and missing scope all raise
  AuthorizationError (-32600)
- The token itself is never logged
"""

import logging
from typing import Any, Dict, Optional

from ..core.errors import AuthorizationError
from ..security.jwt_verifier import TokenVerifier
from ..security.permissions import MethodPermissions


class AuthorizationGate:
    """
    Verifies the caller's token and the method's required scopes
    """

    def __init__(
        self,
        verifier: TokenVerifier,
        permissions: Optional[MethodPermissions] = None,
    ):
        """
        Args:
            verifier: TokenVerifier (e.g. JWTVerifier)
            permissions: MethodPermissions (default table if None)
        """
        self.verifier = verifier
        self.permissions = permissions or MethodPermissions.create_default()
        self.logger = logging.getLogger("server.auth_gate")

    def check(self, context: Any, method: str) -> Dict[str, Any]:
        """
        Authorize one call

        Args:
            context: RequestContext carrying auth_token
            method: JSON-RPC method name

        Returns:
            dict: Verified payload (also stored in context.auth_payload)

        Raises:
            AuthorizationError: If the call is not allowed
        """
        token = getattr(context, "auth_token", None)
        identity = getattr(context, "identity", "anonymous")
        if not token:
            self.logger.warning(f"Unauthorized call to {method} from {identity}")
            raise AuthorizationError("Unauthorized", data={"method": method})

        try:
            payload = self.verifier.check(token)
        except AuthorizationError as e:
            self.logger.warning(f"Rejected token from {identity}: {e.message}")
            raise AuthorizationError(e.message, data={"method": method}) from e

        if not self.permissions.check_permission(payload, method):
            self.logger.warning(
                f"Forbidden: {payload.get('sub', identity)} lacks scope for {method}"
            )
            raise AuthorizationError("Forbidden", data={"method": method})

        context.auth_payload = payload
        return payload
