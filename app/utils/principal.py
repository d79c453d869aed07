# app/utils/principal.py
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from app.models.user import Role
from app.utils.exceptions import MalformedCredential


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, built once per request from token claims"""

    id: int
    role: Role
    manager_id: Optional[int] = None

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def is_manager(self) -> bool:
        return self.role is Role.MANAGER


def _as_id(value: Any, claim: str) -> int:
    if isinstance(value, bool):
        raise MalformedCredential(f"Claim '{claim}' is not a valid identifier")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise MalformedCredential(f"Claim '{claim}' is not a valid identifier")


def resolve_principal(claims: Mapping[str, Any]) -> Principal:
    """Build a Principal from already-verified credential claims.

    Signature and expiry checks happen before this is called; this only
    checks that the claims carry an identity and a known role.
    """
    if not claims:
        raise MalformedCredential("Credential carries no claims")

    raw_id = claims.get("id")
    raw_role = claims.get("role")
    if raw_id is None or raw_id == "":
        raise MalformedCredential("Credential is missing the 'id' claim")
    if not raw_role:
        raise MalformedCredential("Credential is missing the 'role' claim")

    try:
        role = Role(str(raw_role).lower())
    except ValueError:
        raise MalformedCredential(f"Unknown role '{raw_role}'")

    raw_manager = claims.get("manager_id")
    manager_id = _as_id(raw_manager, "manager_id") if raw_manager is not None else None

    return Principal(id=_as_id(raw_id, "id"), role=role, manager_id=manager_id)
