"""Supplier persistence gateway.

Routes depend on the SupplierRepository interface only; the SQLAlchemy
implementation below is the one wired into the app. Mutations that
target an id (update_replacing, delete) read first and return None
when the row is missing, otherwise the number of rows affected, so a
missing id is distinguishable from a write that changed nothing.
"""

import uuid
from abc import ABC, abstractmethod
from typing import Optional

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from fornecedores.db.models import Supplier
from fornecedores.errors import PersistenceError

logger = structlog.get_logger()


class SupplierRepository(ABC):
    """Storage-agnostic supplier operations."""

    @abstractmethod
    async def create(
        self,
        name: str,
        document: str,
        active: bool = True,
        supplier_id: Optional[uuid.UUID] = None,
    ) -> Supplier:
        ...

    @abstractmethod
    async def get_all(self) -> list[Supplier]:
        ...

    @abstractmethod
    async def get_by_id(self, supplier_id: uuid.UUID) -> Optional[Supplier]:
        ...

    @abstractmethod
    async def update_replacing(
        self, supplier_id: uuid.UUID, name: str, document: str, active: bool
    ) -> Optional[int]:
        ...

    @abstractmethod
    async def delete(self, supplier_id: uuid.UUID) -> Optional[int]:
        ...


class SqlSupplierRepository(SupplierRepository):
    """SQLAlchemy-backed repository. Each mutation commits on its own."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        name: str,
        document: str,
        active: bool = True,
        supplier_id: Optional[uuid.UUID] = None,
    ) -> Supplier:
        if supplier_id is not None and await self._exists(supplier_id):
            logger.warning("suppliers.duplicate_id", supplier_id=str(supplier_id))
            raise PersistenceError("Error saving the supplier")
        supplier = Supplier(
            id=supplier_id or uuid.uuid4(),
            name=name,
            document=document,
            active=active,
        )
        self.db.add(supplier)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(
                "suppliers.create_failed", supplier_id=str(supplier.id), error=str(e.orig)
            )
            raise PersistenceError("Error saving the supplier")
        return supplier

    async def get_all(self) -> list[Supplier]:
        result = await self.db.execute(select(Supplier).order_by(Supplier.name))
        return list(result.scalars().all())

    async def get_by_id(self, supplier_id: uuid.UUID) -> Optional[Supplier]:
        return await self.db.get(Supplier, supplier_id)

    async def _exists(self, supplier_id: uuid.UUID) -> bool:
        result = await self.db.execute(
            select(Supplier.id).where(Supplier.id == supplier_id)
        )
        return result.scalar_one_or_none() is not None

    async def update_replacing(
        self, supplier_id: uuid.UUID, name: str, document: str, active: bool
    ) -> Optional[int]:
        if not await self._exists(supplier_id):
            return None
        result = await self.db.execute(
            update(Supplier)
            .where(Supplier.id == supplier_id)
            .values(name=name, document=document, active=active)
        )
        await self.db.commit()
        return result.rowcount

    async def delete(self, supplier_id: uuid.UUID) -> Optional[int]:
        if not await self._exists(supplier_id):
            return None
        result = await self.db.execute(
            delete(Supplier)
            .where(Supplier.id == supplier_id)
        )
        await self.db.commit()
        return result.rowcount
