import os
from datetime import datetime
from functools import wraps

from dotenv import load_dotenv

load_dotenv()

from flask import Flask, jsonify, request, session, g

from attendance import MarkOutcome, list_attendance_records, list_candidates, mark_attendance
from config import Config
from errors import AttendanceError, InvalidRequest, StorageFailure
from logging_config import setup_logging
from models import db
from scope import caller_from_claims

# ------------------ Helpers ------------------

def parse_date_arg(name):
    value = request.args.get(name)
    if not value:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise InvalidRequest(f"Invalid {name}: expected YYYY-MM-DD.")

def parse_int_arg(name):
    value = request.args.get(name)
    if value in (None, ""):
        return None
    try:
        return int(value)
    except ValueError:
        raise InvalidRequest(f"Invalid {name}: expected an integer.")

# ------------------ Auth Helpers ------------------

def login_required(f):
    """Builds ``g.caller`` from the claims the auth layer put in the session."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        claims = session.get("user")
        if not claims:
            return jsonify({"success": False, "message": "Not authorized, no token"}), 401
        g.caller = caller_from_claims(claims)
        return f(*args, **kwargs)
    return decorated_function

# ------------------ App ------------------

def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    if not app.config.get("TESTING"):
        setup_logging(app, app.config.get("LOG_LEVEL", "INFO"), app.config.get("LOG_FILE"))

    db.init_app(app)
    with app.app_context():
        db.create_all()

    @app.errorhandler(AttendanceError)
    def handle_attendance_error(e):
        if isinstance(e, StorageFailure):
            app.logger.error("Storage failure while handling %s %s", request.method, request.path)
        return jsonify({"success": False, "message": e.message}), e.status_code

    # ------------------ Routes ------------------

    @app.route("/api/attendance/mark", methods=["POST"])
    @login_required
    def api_mark_attendance():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
        encoding = data.get("encoding", data.get("descriptor"))
        result = mark_attendance(encoding, g.caller)
        status = 201 if result.outcome is MarkOutcome.MARKED else 200
        return jsonify(result.to_dict()), status

    @app.route("/api/attendance/records", methods=["GET"])
    @login_required
    def api_attendance_records():
        records = list_attendance_records(
            g.caller,
            candidate_id=parse_int_arg("candidateId"),
            department_id=parse_int_arg("departmentId"),
            start_date=parse_date_arg("startDate"),
            end_date=parse_date_arg("endDate"),
            limit=parse_int_arg("limit"),
        )
        return jsonify([r.to_dict() for r in records])

    @app.route("/api/candidates", methods=["GET"])
    @login_required
    def api_candidates():
        return jsonify([c.to_dict() for c in list_candidates(g.caller)])

    @app.route("/health")
    def health():
        return {"ok": True}

    return app

if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=int(os.getenv("PORT", 8000)))
