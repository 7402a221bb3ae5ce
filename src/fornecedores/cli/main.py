"""Fornecedores admin CLI — run the server and manage user permissions.

Usage:
    fornecedores serve                                   # Run the API with uvicorn
    fornecedores grant-claim ana@example.com ExcluirFornecedor
    fornecedores revoke-claim ana@example.com ExcluirFornecedor
    fornecedores assign-role ana@example.com admin
    fornecedores claims ana@example.com                  # Show claims and roles

Claim management talks to the database directly; the HTTP API has no
admin endpoints.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import sys
from typing import Awaitable, Callable, TypeVar

import click

from fornecedores.config import settings
from fornecedores.db import engine as db_engine
from fornecedores.errors import NotFoundError
from fornecedores.services.identity_service import IdentityService

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous click handler.

    Offloads to a thread when a loop is already running (e.g. under an
    async test runner).
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


async def _with_identity(fn: Callable[[IdentityService], Awaitable[T]]) -> T:
    async with db_engine.async_session_factory() as session:
        return await fn(IdentityService(session))


def _call(fn: Callable[[IdentityService], Awaitable[T]]) -> T:
    try:
        return _run(_with_identity(fn))
    except NotFoundError as e:
        click.secho(f"Error: {e.detail}", fg="red", err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@click.group()
def cli():
    """Fornecedores supplier registry."""


@cli.command()
@click.option("--host", default=None, help="Bind address (default from settings)")
@click.option("--port", default=None, type=int, help="Port (default from settings)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "fornecedores.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@cli.command("grant-claim")
@click.argument("email")
@click.argument("claim_type")
@click.option("--value", default="true", show_default=True, help="Claim value")
def grant_claim(email: str, claim_type: str, value: str):
    """Grant CLAIM_TYPE to the user with EMAIL."""
    _call(lambda svc: svc.grant_claim(email, claim_type, value))
    click.secho(f"Granted {claim_type}={value} to {email}", fg="green")


@cli.command("revoke-claim")
@click.argument("email")
@click.argument("claim_type")
def revoke_claim(email: str, claim_type: str):
    """Remove CLAIM_TYPE from the user with EMAIL."""
    revoked = _call(lambda svc: svc.revoke_claim(email, claim_type))
    if revoked:
        click.secho(f"Revoked {claim_type} from {email}", fg="green")
    else:
        click.secho(f"{email} did not have {claim_type}", fg="yellow")


@cli.command("assign-role")
@click.argument("email")
@click.argument("role")
def assign_role(email: str, role: str):
    """Add the user with EMAIL to ROLE (created if missing)."""
    _call(lambda svc: svc.assign_role(email, role))
    click.secho(f"Assigned role {role} to {email}", fg="green")


@cli.command()
@click.argument("email")
def claims(email: str):
    """Show the claims and roles of the user with EMAIL."""

    async def _load(svc: IdentityService) -> dict:
        user = await svc.find_by_email(email)
        if not user:
            raise NotFoundError(f"User '{email}' not found")
        return {
            "email": user.email,
            "claims": dict(await svc.get_claims(user)),
            "roles": await svc.get_roles(user),
        }

    click.echo(json.dumps(_call(_load), indent=2))


if __name__ == "__main__":
    cli()
