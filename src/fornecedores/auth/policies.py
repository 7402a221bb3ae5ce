"""Claim-based authorization policies.

A policy maps the claims carried by a token to allow/deny. It knows
nothing about HTTP; auth.dependencies wraps a policy as a FastAPI
dependency.
"""

from dataclasses import dataclass
from typing import Mapping, Optional

from fornecedores.config import settings


@dataclass(frozen=True)
class ClaimPolicy:
    """Allow when ``claim_type`` is present.

    If ``allowed_values`` is given the claim's value must also be one of
    them; otherwise any value passes.
    """

    name: str
    claim_type: str
    allowed_values: Optional[frozenset[str]] = None

    def evaluate(self, claims: Mapping[str, str]) -> bool:
        if self.claim_type not in claims:
            return False
        if self.allowed_values is None:
            return True
        return claims[self.claim_type] in self.allowed_values


DELETE_SUPPLIER = "ExcluirFornecedor"

POLICIES: dict[str, ClaimPolicy] = {
    DELETE_SUPPLIER: ClaimPolicy(
        name=DELETE_SUPPLIER, claim_type=settings.delete_supplier_claim
    ),
}


def get_policy(name: str) -> ClaimPolicy:
    try:
        return POLICIES[name]
    except KeyError:
        raise LookupError(f"Unknown authorization policy: {name}") from None
