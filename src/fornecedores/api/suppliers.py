"""Supplier API routes.

Reads are open; create and update need a bearer token; delete needs a
token whose claims satisfy the delete-supplier policy.
"""

import uuid

import structlog
from fastapi import APIRouter, Body, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from fornecedores.auth.dependencies import (
    CurrentIdentity,
    get_current_user,
    require_policy,
)
from fornecedores.auth.policies import DELETE_SUPPLIER
from fornecedores.db.engine import get_db
from fornecedores.errors import NotFoundError, PersistenceError, ValidationError
from fornecedores.repositories.supplier_repository import (
    SqlSupplierRepository,
    SupplierRepository,
)
from fornecedores.schemas.supplier import SupplierRead, SupplierWrite

logger = structlog.get_logger()

router = APIRouter(prefix="/suppliers")

NO_RECORDS = "No records found"
SUPPLIER_NOT_FOUND = "Supplier not found"


def _repo(db: AsyncSession = Depends(get_db)) -> SupplierRepository:
    return SqlSupplierRepository(db)


@router.get("", response_model=list[SupplierRead], name="GetSuppliers")
async def list_suppliers(repo: SupplierRepository = Depends(_repo)):
    suppliers = await repo.get_all()
    if not suppliers:
        raise NotFoundError(NO_RECORDS)
    return suppliers


@router.get("/{supplier_id}", response_model=SupplierRead, name="GetSupplierById")
async def get_supplier(supplier_id: uuid.UUID, repo: SupplierRepository = Depends(_repo)):
    supplier = await repo.get_by_id(supplier_id)
    if not supplier:
        raise NotFoundError(NO_RECORDS)
    return supplier


@router.post("", response_model=SupplierRead, status_code=201, name="PostSupplier")
async def create_supplier(
    body: SupplierWrite,
    response: Response,
    repo: SupplierRepository = Depends(_repo),
    identity: CurrentIdentity = Depends(get_current_user),
):
    """Create a supplier. The id is generated unless the body carries one."""
    supplier = await repo.create(
        name=body.name,
        document=body.document,
        active=body.active,
        supplier_id=body.id,
    )
    response.headers["Location"] = f"/suppliers/{supplier.id}"
    logger.info("suppliers.created", supplier_id=str(supplier.id), user_id=identity.user_id)
    return supplier


async def _existing_supplier_id(
    supplier_id: uuid.UUID, repo: SupplierRepository = Depends(_repo)
) -> uuid.UUID:
    """Resolve the path id to a stored supplier, 404 otherwise.

    Declared as a dependency so it runs before FastAPI reports payload
    errors: a PUT to a missing id is 404 whatever the body holds.
    """
    if not await repo.get_by_id(supplier_id):
        raise NotFoundError(SUPPLIER_NOT_FOUND)
    return supplier_id


@router.put("/{supplier_id}", status_code=204, name="PutSupplier")
async def replace_supplier(
    identity: CurrentIdentity = Depends(get_current_user),
    supplier_id: uuid.UUID = Depends(_existing_supplier_id),
    body: SupplierWrite = Body(...),
    repo: SupplierRepository = Depends(_repo),
):
    """Replace every field of an existing supplier.

    The path id is authoritative; a body id naming another supplier is
    rejected rather than silently ignored.
    """
    if body.id is not None and body.id != supplier_id:
        raise ValidationError({"id": ["The body id does not match the path id"]})

    affected = await repo.update_replacing(
        supplier_id, name=body.name, document=body.document, active=body.active
    )
    if affected is None:
        raise NotFoundError(SUPPLIER_NOT_FOUND)
    if affected == 0:
        raise PersistenceError("Error updating the supplier")

    logger.info("suppliers.updated", supplier_id=str(supplier_id), user_id=identity.user_id)
    return Response(status_code=204)

@router.delete("/{supplier_id}", status_code=204, name="DeleteSupplier")
async def delete_supplier(
    supplier_id: uuid.UUID,
    repo: SupplierRepository = Depends(_repo),
    identity: CurrentIdentity = Depends(require_policy(DELETE_SUPPLIER)),
):
    affected = await repo.delete(supplier_id)
    if affected is None:
        raise NotFoundError(SUPPLIER_NOT_FOUND)
    if affected != 1:
        raise PersistenceError("Error deleting the supplier")

    logger.info("suppliers.deleted", supplier_id=str(supplier_id), user_id=identity.user_id)
    return Response(status_code=204)
