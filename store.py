"""Read access to departments and enrolled candidates.

Every call reads the database afresh; nothing is cached between requests.
"""
import logging
from typing import List, Optional

from errors import InvalidDescriptor, translate_storage_errors
from models import Candidate, Department, db

logger = logging.getLogger(__name__)

@translate_storage_errors
def department_ids_for_institution(institution_id: int) -> List[int]:
    rows = (Department.query.with_entities(Department.id)
            .filter_by(institution_id=institution_id)
            .order_by(Department.id.asc())
            .all())
    return [r[0] for r in rows]

@translate_storage_errors
def find_candidates_in_scope(scope) -> List[Candidate]:
    """Candidates matching ``scope``, ordered by id."""
    query = Candidate.query
    if scope.candidate_id is not None:
        query = query.filter(Candidate.id == scope.candidate_id)
    if scope.department_ids is not None:
        query = query.filter(Candidate.department_id.in_(scope.department_ids))
    return query.order_by(Candidate.id.asc()).all()

def matchable_candidates(candidates: List[Candidate]) -> List[Candidate]:
    # drop candidates whose stored descriptor is unusable
    usable = []
    for c in candidates:
        try:
            c.descriptor
        except (InvalidDescriptor, TypeError, ValueError):
            logger.warning("Skipping candidate %s: stored descriptor is malformed", c.id)
            continue
        usable.append(c)
    return usable

@translate_storage_errors
def find_candidate_by_id(candidate_id: int) -> Optional[Candidate]:
    return db.session.get(Candidate, candidate_id)
