"""FastAPI auth dependencies.

get_current_user extracts and validates the bearer token; require_policy
builds a dependency that also checks a claim policy against the token.
Missing or invalid tokens are 401, a valid token lacking the claim is 403.
"""

from typing import Optional

import structlog
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from fornecedores.auth.jwt import TokenError, verify_token
from fornecedores.auth.policies import get_policy
from fornecedores.errors import AuthorizationError

logger = structlog.get_logger()

# Registers the "Bearer" scheme in the OpenAPI document. auto_error is off
# so a missing token reaches get_current_user and becomes a 401 there.
bearer_scheme = HTTPBearer(
    scheme_name="Bearer",
    description="JWT issued by /register or /login",
    auto_error=False,
)


class CurrentIdentity:
    """The authenticated caller, rebuilt from token claims alone."""

    def __init__(
        self,
        user_id: str,
        email: Optional[str] = None,
        claims: Optional[dict[str, str]] = None,
        roles: Optional[list[str]] = None,
    ):
        self.user_id = user_id
        self.email = email
        self.claims = claims or {}
        self.roles = roles or []


async def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[CurrentIdentity]:
    """Extract current identity, or None when no bearer token is sent."""
    if credentials:
        return _authenticate_jwt(credentials.credentials)
    return None


async def get_current_user(
    identity: Optional[CurrentIdentity] = Depends(get_current_user_optional),
) -> CurrentIdentity:
    """Extract current identity (required — 401 if no auth)."""
    if not identity:
        raise HTTPException(
            status_code=401,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


def _authenticate_jwt(token: str) -> CurrentIdentity:
    try:
        payload = verify_token(token)
    except TokenError as e:
        raise HTTPException(
            status_code=401,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    return CurrentIdentity(
        user_id=payload["sub"],
        email=payload.get("email"),
        claims=payload.get("claims") or {},
        roles=payload.get("role") or [],
    )


def require_policy(name: str):
    """Dependency factory: authenticated caller that satisfies policy ``name``."""
    policy = get_policy(name)

    async def _check(
        identity: CurrentIdentity = Depends(get_current_user),
    ) -> CurrentIdentity:
        if not policy.evaluate(identity.claims):
            logger.info("auth.policy_denied", policy=name, user_id=identity.user_id)
            raise AuthorizationError(f"Policy '{name}' not satisfied")
        return identity

    return _check
