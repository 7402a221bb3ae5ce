"""SqlSupplierRepository tests — no HTTP, straight against the session."""

import uuid

import pytest

from fornecedores.errors import PersistenceError
from fornecedores.repositories.supplier_repository import SqlSupplierRepository


@pytest.mark.asyncio
async def test_create_and_get(db_session):
    repo = SqlSupplierRepository(db_session)
    supplier = await repo.create(name="Acme", document="123")
    assert isinstance(supplier.id, uuid.UUID)
    assert supplier.active is True

    fetched = await repo.get_by_id(supplier.id)
    assert fetched is not None
    assert fetched.name == "Acme"


@pytest.mark.asyncio
async def test_create_keeps_given_id(db_session):
    repo = SqlSupplierRepository(db_session)
    supplier_id = uuid.uuid4()
    supplier = await repo.create(name="Acme", document="123", supplier_id=supplier_id)
    assert supplier.id == supplier_id


@pytest.mark.asyncio
async def test_create_duplicate_id_raises(db_session):
    repo = SqlSupplierRepository(db_session)
    supplier = await repo.create(name="Acme", document="123")
    with pytest.raises(PersistenceError):
        await repo.create(name="Other", document="456", supplier_id=supplier.id)


@pytest.mark.asyncio
async def test_get_all_sorted_by_name(db_session):
    repo = SqlSupplierRepository(db_session)
    assert await repo.get_all() == []
    await repo.create(name="Zeta", document="1")
    await repo.create(name="Alfa", document="2")
    assert [s.name for s in await repo.get_all()] == ["Alfa", "Zeta"]


@pytest.mark.asyncio
async def test_update_missing_returns_none(db_session):
    repo = SqlSupplierRepository(db_session)
    assert await repo.update_replacing(uuid.uuid4(), "A", "1", True) is None
    assert await repo.get_all() == []


@pytest.mark.asyncio
async def test_update_replacing_counts_rows(db_session):
    repo = SqlSupplierRepository(db_session)
    supplier = await repo.create(name="Acme", document="123")

    affected = await repo.update_replacing(supplier.id, "Acme SA", "999", False)
    assert affected == 1

    fetched = await repo.get_by_id(supplier.id)
    assert (fetched.name, fetched.document, fetched.active) == ("Acme SA", "999", False)


@pytest.mark.asyncio
async def test_delete(db_session):
    repo = SqlSupplierRepository(db_session)
    supplier = await repo.create(name="Acme", document="123")

    assert await repo.delete(supplier.id) == 1
    assert await repo.get_by_id(supplier.id) is None
    assert await repo.delete(supplier.id) is None
