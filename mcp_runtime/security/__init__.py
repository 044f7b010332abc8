"""
Security module - Caller context, authorizers and token verification

Provides:
- RequestContext: identity and credentials of one request
- Authorizer family: per-entry access predicates (fail closed)
- JWTVerifier: HS256 bearer token verification (PyJWT)
- MethodPermissions: scopes required per JSON-RPC method
"""

from .authorization import (
    ALLOW_ALL,
    AllowAll,
    AuthorizedEntry,
    Authorizer,
    CallableAuthorizer,
    ScopeAuthorizer,
    as_authorizer,
)
from .client_context import RequestContext, extract_bearer_token
from .jwt_verifier import JWTVerifier, TokenVerifier
from .permissions import DEFAULT_METHOD_SCOPES, MethodPermissions, token_scopes

__all__ = [
    "ALLOW_ALL",
    "AllowAll",
    "AuthorizedEntry",
    "Authorizer",
    "CallableAuthorizer",
    "DEFAULT_METHOD_SCOPES",
    "JWTVerifier",
    "MethodPermissions",
    "RequestContext",
    "ScopeAuthorizer",
    "TokenVerifier",
    "as_authorizer",
    "extract_bearer_token",
    "token_scopes",
]
