"""Identity service — users, passwords, claims and roles.

Registration, login and token issuing all go through this class; the
routes never touch the identity tables directly. The CLI uses the
claim/role helpers to grant permissions such as supplier deletion.
"""

import re
from typing import Optional

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fornecedores.auth.password import hash_password, verify_password
from fornecedores.db.models import Role, User, UserClaim, UserRole
from fornecedores.errors import AuthenticationError, IdentityCreationError, NotFoundError

logger = structlog.get_logger()

INVALID_CREDENTIALS = "Invalid user name or password"


def password_policy_errors(password: str) -> list[dict[str, str]]:
    """Check a password against the default identity policy.

    Returns every violated rule, so a client sees all problems at once.
    """
    errors = []
    if len(password) < 6:
        errors.append({
            "code": "PasswordTooShort",
            "description": "Passwords must be at least 6 characters.",
        })
    if not re.search(r"[^a-zA-Z0-9]", password):
        errors.append({
            "code": "PasswordRequiresNonAlphanumeric",
            "description": "Passwords must have at least one non alphanumeric character.",
        })
    if not re.search(r"[0-9]", password):
        errors.append({
            "code": "PasswordRequiresDigit",
            "description": "Passwords must have at least one digit ('0'-'9').",
        })
    if not re.search(r"[a-z]", password):
        errors.append({
            "code": "PasswordRequiresLower",
            "description": "Passwords must have at least one lowercase ('a'-'z').",
        })
    if not re.search(r"[A-Z]", password):
        errors.append({
            "code": "PasswordRequiresUpper",
            "description": "Passwords must have at least one uppercase ('A'-'Z').",
        })
    return errors


def _duplicate_email_error(email: str) -> dict[str, str]:
    return {
        "code": "DuplicateEmail",
        "description": f"Email '{email}' is already taken.",
    }


class IdentityService:
    """Business logic for the identity store."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.email == email.strip().lower())
        )
        return result.scalars().first()

    async def _require_user(self, email: str) -> User:
        user = await self.find_by_email(email)
        if not user:
            raise NotFoundError(f"User '{email}' not found")
        return user

    # ─── Registration / login ───────────────────────────

    async def create_identity(self, email: str, password: str) -> User:
        """Create a confirmed user, or raise IdentityCreationError."""
        email = email.strip().lower()
        errors = []
        if await self.find_by_email(email):
            errors.append(_duplicate_email_error(email))
        errors.extend(password_policy_errors(password))
        if errors:
            logger.info(
                "identity.create_rejected",
                email=email,
                codes=[e["code"] for e in errors],
            )
            raise IdentityCreationError(errors)

        user = User(
            user_name=email,
            email=email,
            password_hash=hash_password(password),
            email_confirmed=True,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email.
            await self.db.rollback()
            raise IdentityCreationError([_duplicate_email_error(email)])

        logger.info("identity.registered", user_id=str(user.id))
        return user

    async def verify_credentials(self, email: str, password: str) -> User:
        """Return the user for valid credentials, else AuthenticationError.

        Unknown email and wrong password produce the same message.
        """
        user = await self.find_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            logger.info("auth.login_failed", email=email.strip().lower())
            raise AuthenticationError(INVALID_CREDENTIALS)
        return user

    # ─── Claims and roles ───────────────────────────────

    async def get_claims(self, user: User) -> list[tuple[str, str]]:
        result = await self.db.execute(
            select(UserClaim.claim_type, UserClaim.claim_value)
            .where(UserClaim.user_id == user.id)
            .order_by(UserClaim.claim_type)
        )
        return [(row.claim_type, row.claim_value) for row in result.all()]

    async def get_roles(self, user: User) -> list[str]:
        result = await self.db.execute(
            select(Role.name)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(UserRole.user_id == user.id)
            .order_by(Role.name)
        )
        return list(result.scalars().all())

    async def grant_claim(self, email: str, claim_type: str, claim_value: str = "true") -> UserClaim:
        """Grant (or overwrite the value of) a claim for a user."""
        user = await self._require_user(email)
        result = await self.db.execute(
            select(UserClaim).where(
                UserClaim.user_id == user.id, UserClaim.claim_type == claim_type
            )
        )
        claim = result.scalars().first()
        if claim:
            claim.claim_value = claim_value
        else:
            claim = UserClaim(user_id=user.id, claim_type=claim_type, claim_value=claim_value)
            self.db.add(claim)
        await self.db.commit()
        logger.info("identity.claim_granted", user_id=str(user.id), claim_type=claim_type)
        return claim

    async def revoke_claim(self, email: str, claim_type: str) -> bool:
        user = await self._require_user(email)
        result = await self.db.execute(
            delete(UserClaim).where(
                UserClaim.user_id == user.id, UserClaim.claim_type == claim_type
            )
        )
        await self.db.commit()
        revoked = result.rowcount > 0
        if revoked:
            logger.info("identity.claim_revoked", user_id=str(user.id), claim_type=claim_type)
        return revoked

    async def assign_role(self, email: str, role_name: str) -> Role:
        """Put a user in a role, creating the role on first use."""
        user = await self._require_user(email)
        result = await self.db.execute(select(Role).where(Role.name == role_name))
        role = result.scalars().first()
        if not role:
            role = Role(name=role_name)
            self.db.add(role)
            await self.db.flush()

        existing = await self.db.get(UserRole, (user.id, role.id))
        if not existing:
            self.db.add(UserRole(user_id=user.id, role_id=role.id))
        await self.db.commit()
        logger.info("identity.role_assigned", user_id=str(user.id), role=role_name)
        return role
