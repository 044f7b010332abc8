"""
JWT Verifier - Bearer token verification for the authorization gate

Module: security.jwt_verifier
Date: 2026-10-17
Version: 0.1.0

CHANGELOG:
[2026-10-17 v0.1.0] Initial implementation
  - TokenVerifier interface: verify(token) -> payload | None
  - JWTVerifier with HS256 (PyJWT)
  - Secret from argument or JWT_SECRET_KEY
  - Expired and invalid tokens reported with distinct messages

ARCHITECTURE:
The runtime only consumes tokens, it never issues them. The gate calls
check(token), which returns the payload or raises AuthorizationError.
"Token expired" in the message lets WebSocket clients with auto_refresh
renew their credential.

SECURITY NOTES:
- HS256 secret must be 32+ characters (entropy)
- Only the configured algorithm is accepted
- Token expiration enforced strictly
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import jwt

from ..core.errors import AuthorizationError, ConfigurationError

SECRET_ENV_VAR = "JWT_SECRET_KEY"
MIN_SECRET_LENGTH = 32


class TokenVerifier(ABC):
    """Turns a bearer token into a payload"""

    @abstractmethod
    def verify(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Args:
            token: Bearer token

        Returns:
            dict: Payload, or None when the token is not acceptable
        """

    def check(self, token: str) -> Dict[str, Any]:
        """
        Verify or raise

        Raises:
            AuthorizationError: If the token is not acceptable
        """
        payload = self.verify(token)
        if payload is None:
            raise AuthorizationError("Invalid token")
        return payload


class JWTVerifier(TokenVerifier):
    """
    Verifies HS256 JSON Web Tokens

    Uses HS256 (HMAC-SHA256). The secret comes from the constructor or,
    when omitted, from the JWT_SECRET_KEY environment variable.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: str = "HS256",
        audience: Optional[str] = None,
        issuer: Optional[str] = None,
        leeway: float = 0,
    ):
        """
        Initialize JWT verifier

        Args:
            secret_key: Secret key for signatures (32+ characters)
            algorithm: JWT algorithm (default HS256)
            audience: Expected "aud" claim, if any
            issuer: Expected "iss" claim, if any
            leeway: Clock skew tolerance in seconds

        Raises:
            ConfigurationError: If the secret is missing or too short
        """
        secret_key = secret_key or os.environ.get(SECRET_ENV_VAR)
        if not secret_key:
            raise ConfigurationError(
                f"JWT secret missing: pass secret_key or set {SECRET_ENV_VAR}"
            )
        if len(secret_key) < MIN_SECRET_LENGTH:
            raise ConfigurationError(
                f"Secret key must be at least {MIN_SECRET_LENGTH} characters"
            )

        self.logger = logging.getLogger("security.jwt_verifier")
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.audience = audience
        self.issuer = issuer
        self.leeway = leeway

        self.logger.info(f"JWT verifier initialized (algo={algorithm})")

    def decode(self, token: str) -> Dict[str, Any]:
        """
        Verify signature and claims

        Returns:
            dict: Token payload

        Raises:
            AuthorizationError: "Token expired" or "Invalid token: ..."
        """
        if not token or not isinstance(token, str):
            raise AuthorizationError("Invalid token: empty")

        try:
            return jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
                leeway=self.leeway,
            )
        except jwt.ExpiredSignatureError as e:
            self.logger.info("Rejected expired token")
            raise AuthorizationError("Token expired") from e
        except jwt.InvalidSignatureError as e:
            self.logger.warning("Rejected token with bad signature")
            raise AuthorizationError("Invalid token: bad signature") from e
        except jwt.InvalidTokenError as e:
            self.logger.warning(f"Rejected token: {e}")
            raise AuthorizationError(f"Invalid token: {e}") from e

    def verify(self, token: str) -> Optional[Dict[str, Any]]:
        try:
            return self.decode(token)
        except AuthorizationError:
            return None

    def check(self, token: str) -> Dict[str, Any]:
        return self.decode(token)
