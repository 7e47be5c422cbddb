import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "gym_db"),
}

# Member QR codes encode "<prefix>:<user id>"
QR_TOKEN_PREFIX = os.getenv("QR_TOKEN_PREFIX", "GYM-MEMBER")

# Facility-local zone used for "today's check-ins"
TIMEZONE = os.getenv("TIMEZONE", "UTC")
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "5"))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
