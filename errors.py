import logging
from functools import wraps

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

class AttendanceError(Exception):
    """Base exception for the attendance system; carries its HTTP status."""
    status_code = 500
    default_message = "Attendance error."

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

class InvalidDescriptor(AttendanceError):
    status_code = 400
    default_message = "Invalid face encoding provided."

class Forbidden(AttendanceError):
    status_code = 403
    default_message = "Forbidden."

class InvalidRequest(AttendanceError):
    status_code = 400
    default_message = "Invalid request."

class NotFound(AttendanceError):
    status_code = 404
    default_message = "Not found."

class StorageFailure(AttendanceError):
    status_code = 500
    default_message = "Server error while accessing attendance storage."

def translate_storage_errors(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except SQLAlchemyError as e:
            logger.exception("Storage failure in %s", f.__name__)
            raise StorageFailure() from e
    return decorated_function
