"""Auth API — registration and login.

- POST /register → create an identity, return a token for it
- POST /login → email/password → token

Both responses carry the user's claims and roles, read from the
identity store at the moment of issuing.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fornecedores.auth.jwt import issue_token
from fornecedores.db.engine import get_db
from fornecedores.db.models import User
from fornecedores.schemas.auth import LoginUser, RegisterUser, TokenResponse
from fornecedores.services.identity_service import IdentityService

router = APIRouter()


def _svc(db: AsyncSession = Depends(get_db)) -> IdentityService:
    return IdentityService(db)


async def _token_for(svc: IdentityService, user: User) -> TokenResponse:
    claims = await svc.get_claims(user)
    roles = await svc.get_roles(user)
    return issue_token(user.id, user.email, claims, roles)


@router.post(
    "/register",
    response_model=TokenResponse,
    name="RegisterUser",
    responses={400: {"description": "Validation or identity error"}},
)
async def register(body: RegisterUser, svc: IdentityService = Depends(_svc)):
    """Create a user account and return an access token for it."""
    user = await svc.create_identity(body.email, body.password)
    return await _token_for(svc, user)


@router.post(
    "/login",
    response_model=TokenResponse,
    name="LoginUser",
    responses={400: {"description": "Validation error or invalid credentials"}},
)
async def login(body: LoginUser, svc: IdentityService = Depends(_svc)):
    """Login with email and password → access token."""
    user = await svc.verify_credentials(body.email, body.password)
    return await _token_for(svc, user)
