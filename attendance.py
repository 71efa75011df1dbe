import enum
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional

from flask import current_app

import ledger
import store
from config import MAX_RECORDS
from errors import Forbidden, NotFound
from ledger import MarkStatus
from models import Candidate
from scope import CandidateSelf, ScopeFilter, can_mark_attendance, resolve_scope
from utils import match_descriptor, to_descriptor

logger = logging.getLogger(__name__)

class MarkOutcome(enum.Enum):
    MARKED = "marked"
    ALREADY_MARKED = "already_marked"
    NO_MATCH = "no_match"

@dataclass
class MarkResult:
    outcome: MarkOutcome
    message: str
    distance: float
    candidate: Optional[dict] = None
    attendance_id: Optional[int] = None

    @property
    def success(self) -> bool:
        return self.outcome is not MarkOutcome.NO_MATCH

    def to_dict(self) -> dict:
        data = {
            "success": self.success,
            "outcome": self.outcome.value,
            "message": self.message,
            # JSON has no infinity
            "distance": self.distance if math.isfinite(self.distance) else None,
        }
        if self.candidate is not None:
            data["candidate"] = self.candidate
        if self.attendance_id is not None:
            data["attendance_id"] = self.attendance_id
        return data

def _threshold(threshold: Optional[float]) -> float:
    if threshold is not None:
        return threshold
    return current_app.config.get("RECOGNITION_THRESHOLD", 0.6)

def mark_attendance(encoding, caller, now: Optional[datetime] = None,
                    threshold: Optional[float] = None) -> MarkResult:
    query = to_descriptor(encoding)

    if not can_mark_attendance(caller):
        raise Forbidden("Forbidden: attendance can only be marked by authority or department users.")
    scope = resolve_scope(caller)

    candidates = store.matchable_candidates(store.find_candidates_in_scope(scope))
    matched, distance = match_descriptor(query, candidates, _threshold(threshold))

    if matched is None:
        logger.info("No match among %d candidates (distance %.4f)", len(candidates), distance)
        return MarkResult(MarkOutcome.NO_MATCH,
                          f"Face not recognized. Distance: {distance:.4f}",
                          distance)

    outcome = ledger.mark_present(matched.id, matched.department_id, now=now)
    if outcome.status is MarkStatus.ALREADY_MARKED:
        logger.info("Candidate %s already marked today (record %s)", matched.id, outcome.record.id)
        return MarkResult(MarkOutcome.ALREADY_MARKED,
                          f"{matched.name}'s attendance was already marked today.",
                          distance, matched.summary(), outcome.record.id)

    logger.info("Marked candidate %s present (record %s, distance %.4f)",
                matched.id, outcome.record.id, distance)
    return MarkResult(MarkOutcome.MARKED,
                      f"Attendance marked successfully for {matched.name}.",
                      distance, matched.summary(), outcome.record.id)

def list_attendance_records(caller, candidate_id: Optional[int] = None,
                            department_id: Optional[int] = None,
                            start_date: Optional[date] = None,
                            end_date: Optional[date] = None,
                            limit: Optional[int] = None):
    """Attendance records visible to ``caller``, newest first."""
    scope = resolve_scope(caller, department_id)

    if candidate_id is not None:
        if isinstance(caller, CandidateSelf):
            if candidate_id != caller.candidate_id:
                raise Forbidden("Forbidden: candidates can only view their own records.")
        else:
            candidate = store.find_candidate_by_id(candidate_id)
            if candidate is None:
                raise NotFound("Candidate not found.")
            if not scope.matches(candidate):
                raise Forbidden("Forbidden: cannot view records for candidates outside your scope.")
            scope = ScopeFilter(candidate_id=candidate.id)

    if limit is None:
        limit = current_app.config.get("RECORDS_LIMIT", MAX_RECORDS)
    return ledger.list_records(scope, start_date, end_date, limit)

def list_candidates(caller) -> List[Candidate]:
    return store.find_candidates_in_scope(resolve_scope(caller))
