"""JWT token issuing and verification.

Tokens are stateless: the payload carries the user id, email, claims
and roles, so protected routes never look the user up again. Signing
parameters travel in a plain TokenConfig rather than being read from
globals, which keeps issue_token/verify_token easy to test.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from fornecedores.config import Settings, settings
from fornecedores.schemas.auth import ClaimRead, TokenResponse, UserToken


class TokenError(Exception):
    """Raised when token verification fails."""


@dataclass(frozen=True)
class TokenConfig:
    secret: str
    algorithm: str = "HS256"
    issuer: str = "fornecedores"
    audience: str = "https://localhost"
    expires_minutes: int = 120

    @classmethod
    def from_settings(cls, s: Optional[Settings] = None) -> "TokenConfig":
        s = s or settings
        return cls(
            secret=s.jwt_secret,
            algorithm=s.jwt_algorithm,
            issuer=s.jwt_issuer,
            audience=s.jwt_audience,
            expires_minutes=s.access_token_expire_minutes,
        )


def issue_token(
    user_id: uuid.UUID,
    email: str,
    claims: list[tuple[str, str]],
    roles: list[str],
    config: Optional[TokenConfig] = None,
) -> TokenResponse:
    """Sign an access token for a verified identity.

    ``claims`` are (type, value) pairs from the identity store; they are
    embedded under "claims" and echoed back in the response's user_token
    block together with the standard JWT claims.
    """
    config = config or TokenConfig.from_settings()
    now = datetime.now(timezone.utc)
    expires = now + timedelta(minutes=config.expires_minutes)
    payload = {
        "sub": str(user_id),
        "email": email,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "nbf": now,
        "exp": expires,
        "iss": config.issuer,
        "aud": config.audience,
        "claims": {claim_type: value for claim_type, value in claims},
        "role": list(roles),
    }
    token = jwt.encode(payload, config.secret, algorithm=config.algorithm)

    echoed = [ClaimRead(type="sub", value=str(user_id)), ClaimRead(type="email", value=email)]
    echoed += [ClaimRead(type=t, value=v) for t, v in claims]
    echoed += [ClaimRead(type="role", value=r) for r in roles]

    return TokenResponse(
        access_token=token,
        expires_in=int((expires - now).total_seconds()),
        user_token=UserToken(id=user_id, email=email, claims=echoed),
    )


def verify_token(token: str, config: Optional[TokenConfig] = None) -> dict:
    """Verify and decode a JWT token.

    Returns the payload dict on success.
    Raises TokenError on failure.
    """
    config = config or TokenConfig.from_settings()
    try:
        return jwt.decode(
            token,
            config.secret,
            algorithms=[config.algorithm],
            audience=config.audience,
            issuer=config.issuer,
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise TokenError(f"Invalid token: {e}")
