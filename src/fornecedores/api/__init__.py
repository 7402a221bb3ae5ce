"""API route aggregation.

All routers registered here get mounted in main.py. Auth requirements
are declared per route inside each router, since the supplier router
mixes open reads with protected writes.
"""

from fastapi import APIRouter

from fornecedores.api.auth import router as auth_router
from fornecedores.api.health import router as health_router
from fornecedores.api.suppliers import router as suppliers_router

api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["users"])
api_router.include_router(suppliers_router, tags=["suppliers"])
