import enum
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Tuple

import pytz
from flask import current_app
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from config import MAX_RECORDS
from errors import StorageFailure, translate_storage_errors
from models import ATTENDANCE_STATUSES, STATUS_PRESENT, Attendance, db

logger = logging.getLogger(__name__)

class MarkStatus(enum.Enum):
    MARKED = "marked"
    ALREADY_MARKED = "already_marked"

@dataclass
class AttendanceOutcome:
    status: MarkStatus
    record: Attendance

def get_tz():
    return pytz.timezone(current_app.config["TIMEZONE"])

def local_now() -> datetime:
    return datetime.now(get_tz()).replace(tzinfo=None)

def day_window(day: date) -> Tuple[datetime, datetime]:
    # [midnight, next midnight)
    start = datetime.combine(day, time.min)
    return start, start + timedelta(days=1)

@translate_storage_errors
def find_today_record(candidate_id: int, now: Optional[datetime] = None) -> Optional[Attendance]:
    now = now or local_now()
    start, end = day_window(now.date())
    return (Attendance.query
            .filter(Attendance.candidate_id == candidate_id,
                    Attendance.timestamp >= start,
                    Attendance.timestamp < end)
            .order_by(Attendance.timestamp.asc())
            .first())

def insert_record(candidate_id: int, department_id: int, status: str,
                  timestamp: datetime) -> Attendance:
    # IntegrityError on a second record for the same (candidate, day)
    if status not in ATTENDANCE_STATUSES:
        raise ValueError(f"Unknown attendance status: {status}")
    rec = Attendance(candidate_id=candidate_id, department_id=department_id,
                     day=timestamp.date(), timestamp=timestamp, status=status)
    db.session.add(rec)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return rec

@translate_storage_errors
def mark_present(candidate_id: int, department_id: int,
                 now: Optional[datetime] = None) -> AttendanceOutcome:
    now = now or local_now()
    existing = find_today_record(candidate_id, now)
    if existing is not None:
        return AttendanceOutcome(MarkStatus.ALREADY_MARKED, existing)

    try:
        rec = insert_record(candidate_id, department_id, STATUS_PRESENT, now)
    except IntegrityError:
        # another request marked this candidate between our check and insert
        logger.warning("Concurrent mark for candidate %s on %s", candidate_id, now.date())
        existing = find_today_record(candidate_id, now)
        if existing is None:
            raise StorageFailure()
        return AttendanceOutcome(MarkStatus.ALREADY_MARKED, existing)
    return AttendanceOutcome(MarkStatus.MARKED, rec)

@translate_storage_errors
def list_records(scope, start_date: Optional[date] = None, end_date: Optional[date] = None,
                 limit: int = MAX_RECORDS) -> List[Attendance]:
    # start_date and end_date are inclusive local days
    limit = max(1, min(int(limit), MAX_RECORDS))
    query = Attendance.query.options(joinedload(Attendance.candidate))
    if scope.candidate_id is not None:
        query = query.filter(Attendance.candidate_id == scope.candidate_id)
    if scope.department_ids is not None:
        query = query.filter(Attendance.department_id.in_(scope.department_ids))
    if start_date is not None:
        query = query.filter(Attendance.timestamp >= day_window(start_date)[0])
    if end_date is not None:
        query = query.filter(Attendance.timestamp < day_window(end_date)[1])
    return (query.order_by(Attendance.timestamp.desc(), Attendance.id.desc())
            .limit(limit)
            .all())
