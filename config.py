import os

DESCRIPTOR_LENGTH = 128
MAX_RECORDS = 200

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///attendance.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    TIMEZONE = os.getenv("TIMEZONE", "Asia/Kolkata")
    # Euclidean distance at or below this is the same person
    RECOGNITION_THRESHOLD = float(os.getenv("RECOGNITION_THRESHOLD", "0.6"))
    DESCRIPTOR_LENGTH = DESCRIPTOR_LENGTH
    RECORDS_LIMIT = min(int(os.getenv("RECORDS_LIMIT", str(MAX_RECORDS))), MAX_RECORDS)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("LOG_FILE")
