"""Access gate: caller identity normalization and authorization decisions."""

from __future__ import annotations

import re
from typing import Mapping

from .errors import AccessDeniedError, InvalidInputError, NotAuthorizedSupplierError
from .models import Product, Role, Vote

NULL_IDENTITY = "0x" + "0" * 40

_HEX_ADDRESS_RE = re.compile(r"^0[xX][0-9a-fA-F]{40}$")
_ZERO_ADDRESS_RE = re.compile(r"^0[xX]0+$")

# Roles a non-owner manager may hand out.
MANAGER_CREATABLE_ROLES = frozenset({Role.SELLER, Role.SUPPLIER})


def normalize_identity(value: str | None) -> str:
    """Return the comparable form of an identity token.

    Hex addresses are case-insensitive (checksummed and lower-case spellings
    name the same account), so they are lower-cased. Other tokens are opaque
    and only stripped.
    """
    if value is None:
        return ""
    token = value.strip()
    if _HEX_ADDRESS_RE.match(token):
        return token.lower()
    return token


def is_null_identity(value: str | None) -> bool:
    token = normalize_identity(value)
    return not token or bool(_ZERO_ADDRESS_RE.match(token))


class AccessGate:
    """Resolves callers and answers the authorization questions the core asks."""

    def resolve(self, caller: str | None, *, field_name: str = "caller") -> str:
        if is_null_identity(caller):
            raise InvalidInputError(f"{field_name} must be a non-null identity")
        return normalize_identity(caller)

    def can_vote(self, product: Product, votes: Mapping[str, Vote], caller: str) -> bool:
        if caller not in product.suppliers:
            return False
        return votes.get(caller, Vote.NO_VOTE) == Vote.NO_VOTE

    def require_voter(self, product: Product, votes: Mapping[str, Vote], caller: str) -> None:
        # Ineligible and already-voted callers share one failure signal.
        if not self.can_vote(product, votes, caller):
            raise NotAuthorizedSupplierError(product.id, caller)

    def authorize_user_creation(self, caller_role: Role, *, is_owner: bool, target_role: Role) -> None:
        if not is_owner and caller_role != Role.MANAGER:
            raise AccessDeniedError("Only owner or manager can perform this action")
        if not is_owner and target_role not in MANAGER_CREATABLE_ROLES:
            raise AccessDeniedError("Managers can only create Sellers and Suppliers")
