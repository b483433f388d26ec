# summavoice/config.py
from dotenv import load_dotenv
import os

load_dotenv()


def _get_bool(value, default=False):
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./summavoice.db")

SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(5 * 24 * 60)))

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:3001").split(",")
    if origin.strip()
]

# --- Files ---
UPLOADS_DIR = os.getenv("UPLOADS_DIR", "uploads")
AUDIO_DIR = os.getenv("AUDIO_DIR", "output")
MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE", str(10 * 1024 * 1024)))

# --- Speech synthesis ---
TTS_PROVIDER = os.getenv("TTS_PROVIDER", "voicerss").lower()
VOICE_RSS_API_KEY = os.getenv("VOICE_RSS_API_KEY", "")
VOICE_RSS_API_URL = os.getenv("VOICE_RSS_API_URL", "http://api.voicerss.org/")
TTS_CHUNK_SIZE = int(os.getenv("TTS_CHUNK_SIZE", "950"))
TTS_TIMEOUT_SECONDS = float(os.getenv("TTS_TIMEOUT_SECONDS", "30"))

# --- Generative AI ---
GOOGLE_AI_API_KEY = os.getenv("GOOGLE_AI_API_KEY", "")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")

# --- Email ---
EMAIL_BACKEND = os.getenv("EMAIL_BACKEND", "console").lower()
SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASS = os.getenv("SMTP_PASS", "")
SMTP_USE_TLS = _get_bool(os.getenv("SMTP_USE_TLS"), default=True)
SMTP_FROM = os.getenv("SMTP_FROM", "noreply@summavoice.com")

# --- Background jobs ---
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# --- OCR fallback for scanned PDFs ---
OCR_ENABLED = _get_bool(os.getenv("OCR_ENABLED"), default=False)
TESSERACT_CMD = os.getenv("TESSERACT_CMD", "")


def is_development() -> bool:
    return APP_ENV.lower() == "development"


def validate_runtime_config() -> None:
    if APP_ENV.lower() == "production" and SECRET_KEY == "change-me":
        raise RuntimeError("SECRET_KEY must be set in production.")
