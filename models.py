from datetime import datetime

import numpy as np
from flask_sqlalchemy import SQLAlchemy

from utils import deserialize_descriptor, serialize_descriptor

db = SQLAlchemy()

STATUS_PRESENT = "Present"
STATUS_ABSENT = "Absent"
STATUS_LATE = "Late"
ATTENDANCE_STATUSES = (STATUS_PRESENT, STATUS_ABSENT, STATUS_LATE)

class Institution(db.Model):
    __tablename__ = "institutions"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String, nullable=False, unique=True)
    auth_username = db.Column(db.String, nullable=False, unique=True)
    auth_password_hash = db.Column(db.String, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.now)

    departments = db.relationship("Department", backref="institution")

class Department(db.Model):
    __tablename__ = "departments"
    id = db.Column(db.Integer, primary_key=True)
    institution_id = db.Column(db.Integer, db.ForeignKey("institutions.id"),
                               nullable=False, index=True)
    name = db.Column(db.String, nullable=False)
    manager_username = db.Column(db.String, nullable=False, unique=True)
    manager_password_hash = db.Column(db.String, nullable=False)

class Candidate(db.Model):
    __tablename__ = "candidates"
    id = db.Column(db.Integer, primary_key=True)
    department_id = db.Column(db.Integer, db.ForeignKey("departments.id"),
                              nullable=False, index=True)
    name = db.Column(db.String, nullable=False)
    enrollment_id = db.Column(db.String, nullable=False, unique=True)
    candidate_username = db.Column(db.String, nullable=False, unique=True)
    candidate_password_hash = db.Column(db.String, nullable=False)
    # 128-float face descriptor stored as JSON text for portability
    face_encoding = db.Column(db.Text, nullable=False)

    department = db.relationship("Department", backref="candidates")

    @property
    def descriptor(self) -> np.ndarray:
        # raises InvalidDescriptor when the stored text is not 128 floats
        return deserialize_descriptor(self.face_encoding)

    @descriptor.setter
    def descriptor(self, vec):
        self.face_encoding = serialize_descriptor(vec)

    def summary(self) -> dict:
        """Public identity of the candidate, safe to return to any caller."""
        return {"id": self.id, "name": self.name,
                "enrollment_id": self.enrollment_id}

    def to_dict(self) -> dict:
        # never expose the credential hash or the descriptor
        data = self.summary()
        data["department_id"] = self.department_id
        data["department_name"] = self.department.name if self.department else None
        data["username"] = self.candidate_username
        return data

class Attendance(db.Model):
    __tablename__ = "attendance"
    # one record per candidate per local calendar day, enforced by the database
    __table_args__ = (
        db.UniqueConstraint("candidate_id", "day", name="uq_attendance_candidate_day"),
    )
    id = db.Column(db.Integer, primary_key=True)
    candidate_id = db.Column(db.Integer, db.ForeignKey("candidates.id"),
                             nullable=False, index=True)
    # copied from the candidate at creation time for scoped queries
    department_id = db.Column(db.Integer, db.ForeignKey("departments.id"),
                              nullable=False, index=True)
    day = db.Column(db.Date, nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False, index=True)  # local wall time
    status = db.Column(db.String, nullable=False, default=STATUS_PRESENT)

    candidate = db.relationship("Candidate", backref="attendance")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "candidate": self.candidate.summary() if self.candidate else None,
            "department_id": self.department_id,
            "timestamp": self.timestamp.isoformat(),
            "status": self.status,
        }
