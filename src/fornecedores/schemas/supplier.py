"""Pydantic schemas for suppliers.

SupplierWrite is the payload for both create and full replacement;
SupplierRead is what the API returns.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, Field


class SupplierWrite(BaseModel):
    id: Optional[uuid.UUID] = Field(
        None, description="Client-chosen id; generated when omitted"
    )
    name: str = Field(..., min_length=1, max_length=100)
    document: str = Field(..., min_length=1, max_length=20)
    active: bool = True

    model_config = {"str_strip_whitespace": True}


class SupplierRead(BaseModel):
    id: uuid.UUID
    name: str
    document: str
    active: bool

    model_config = {"from_attributes": True}
