# backend/app/config.py
import os
import warnings
from pathlib import Path

from dotenv import load_dotenv

# .env sits next to the backend/ folder
load_dotenv(dotenv_path=Path(__file__).resolve().parent.parent / ".env")

ASYNC_DATABASE_URL = os.getenv("ASYNC_DATABASE_URL", "sqlite+aiosqlite:///./askyourot.db")

SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    warnings.warn("SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2)
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
VERIFY_EMAIL_EXPIRE_MINUTES = int(os.getenv("VERIFY_EMAIL_EXPIRE_MINUTES", "1440"))

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:8081,http://localhost:19006").split(",")
    if o.strip()
]

STATIC_DIR = os.getenv("STATIC_DIR", str(Path(__file__).resolve().parent / "static"))
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")

# Transactional email (Resend-compatible HTTP API); unset key = log only
EMAIL_API_KEY = os.getenv("EMAIL_API_KEY")
EMAIL_API_URL = os.getenv("EMAIL_API_URL", "https://api.resend.com/emails")
EMAIL_FROM = os.getenv("EMAIL_FROM", "Ask Your OT <noreply@askyourot.app>")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# ---- Domain constants ----
MIN_PASSWORD_LENGTH = 6

SPECIALTIES = [
    "Stroke Recovery",
    "Autism Support",
    "Hand Therapy",
    "Pediatric OT",
    "Geriatric Care",
    "Mental Health",
    "Physical Rehabilitation",
    "Cognitive Therapy",
]

# Education tabs filter on the same labels as therapist specialties
EDUCATION_CATEGORIES = list(SPECIALTIES)

CONDITIONS = [
    "Stroke Recovery",
    "Autism Spectrum",
    "Hand Injury",
    "Brain Injury",
    "Spinal Cord Injury",
    "Arthritis",
    "Multiple Sclerosis",
    "Parkinson's Disease",
]

TIME_SLOTS = ["09:00", "10:00", "11:00", "12:00", "13:00", "14:00", "15:00", "16:00", "17:00"]

DURATIONS = [
    {"value": 30, "label": "30 minutes"},
    {"value": 60, "label": "1 hour"},
    {"value": 90, "label": "1.5 hours"},
]
DEFAULT_DURATION = 60

AVATAR_EXTENSIONS = {"jpg", "jpeg", "png", "webp", "gif"}
MAX_AVATAR_BYTES = 5 * 1024 * 1024
