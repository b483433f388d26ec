# summavoice/main.py
import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from summavoice import ai, config
from summavoice.database import create_db_tables
from summavoice.errors import register_exception_handlers
from summavoice.routes import (
    ai_routes,
    analytics_routes,
    auth_routes,
    operation_routes,
    tts_routes,
    verification_routes,
)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="SummaVoice API")

# Create directories if they don't exist
os.makedirs(config.UPLOADS_DIR, exist_ok=True)
os.makedirs(config.AUDIO_DIR, exist_ok=True)

# CORS Configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth_routes.router, prefix="/api/auth")
app.include_router(verification_routes.router, prefix="/api/verification")
app.include_router(tts_routes.router, prefix="/api/tts")
app.include_router(ai_routes.router, prefix="/api/ai")
app.include_router(operation_routes.router, prefix="/api/operations")
app.include_router(analytics_routes.router, prefix="/api/analytics")

app.mount("/uploads", StaticFiles(directory=config.UPLOADS_DIR), name="uploads")
app.mount("/output", StaticFiles(directory=config.AUDIO_DIR), name="output")


@app.on_event("startup")
def on_startup():
    config.validate_runtime_config()
    create_db_tables()
    if ai.init_ai_service():
        logger.info("AI service initialized with model %s", config.GEMINI_MODEL)
    else:
        logger.warning("AI service unavailable: GOOGLE_AI_API_KEY is not set")


@app.get("/")
def read_root():
    return {
        "success": True,
        "message": "SummaVoice API is running",
        "environment": config.APP_ENV,
        "ai_available": ai.is_available(),
        "tts_provider": config.TTS_PROVIDER,
    }
