from dataclasses import dataclass
from typing import Optional, Tuple, Union

import store
from errors import Forbidden

ROLE_AUTHORITY = "authority"
ROLE_DEPARTMENT = "department"
ROLE_CANDIDATE = "candidate"

@dataclass(frozen=True)
class InstitutionAdmin:
    user_id: int
    institution_id: int

@dataclass(frozen=True)
class DepartmentManager:
    user_id: int
    department_id: int

@dataclass(frozen=True)
class CandidateSelf:
    candidate_id: int
    department_id: int

Caller = Union[InstitutionAdmin, DepartmentManager, CandidateSelf]

@dataclass(frozen=True)
class ScopeFilter:
    # candidate_id pins one candidate, department_ids lists departments in scope
    department_ids: Optional[Tuple[int, ...]] = None
    candidate_id: Optional[int] = None

    def matches(self, candidate) -> bool:
        if self.candidate_id is not None and candidate.id != self.candidate_id:
            return False
        if self.department_ids is not None and candidate.department_id not in self.department_ids:
            return False
        return True

def _claim_id(claims: dict, key: str) -> int:
    value = claims.get(key)
    if value is None:
        raise Forbidden(f"Forbidden: missing '{key}' claim.")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise Forbidden(f"Forbidden: malformed '{key}' claim.")

def caller_from_claims(claims) -> Caller:
    if not claims:
        raise Forbidden()
    role = claims.get("role")
    if role == ROLE_AUTHORITY:
        return InstitutionAdmin(_claim_id(claims, "id"), _claim_id(claims, "institutionId"))
    if role == ROLE_DEPARTMENT:
        return DepartmentManager(_claim_id(claims, "id"), _claim_id(claims, "departmentId"))
    if role == ROLE_CANDIDATE:
        return CandidateSelf(_claim_id(claims, "id"), _claim_id(claims, "departmentId"))
    raise Forbidden(f"Forbidden: unknown role '{role}'.")

def resolve_scope(caller: Caller, department_id: Optional[int] = None) -> ScopeFilter:
    """Candidate filter for caller, optionally narrowed to one department."""
    if isinstance(caller, InstitutionAdmin):
        owned = tuple(store.department_ids_for_institution(caller.institution_id))
        if department_id is None:
            return ScopeFilter(department_ids=owned)
        if department_id not in owned:
            raise Forbidden("Forbidden: department not found under your institution.")
        return ScopeFilter(department_ids=(department_id,))

    if isinstance(caller, DepartmentManager):
        if department_id is not None and department_id != caller.department_id:
            raise Forbidden("Forbidden: cannot act outside your department.")
        return ScopeFilter(department_ids=(caller.department_id,))

    if isinstance(caller, CandidateSelf):
        if department_id is not None and department_id != caller.department_id:
            raise Forbidden("Forbidden: cannot act outside your department.")
        return ScopeFilter(candidate_id=caller.candidate_id)

    raise Forbidden("Forbidden: invalid role for this action.")

def can_mark_attendance(caller: Caller) -> bool:
    return isinstance(caller, (InstitutionAdmin, DepartmentManager))
