# summavoice/celery_worker.py
import asyncio
import logging

from celery import Celery

from summavoice import config, crud, documents, processing
from summavoice.database import SessionLocal
from summavoice.errors import ApiError
from summavoice.tts import SpeechOptions

logger = logging.getLogger(__name__)

# Create Celery app instance
celery = Celery(
    __name__,
    broker=config.REDIS_URL,
    backend=config.REDIS_URL,
)


@celery.task
def process_document_task(operation_id: int, upload_path: str, mimetype: str, original_name: str, options: dict):
    """
    Background document-to-speech run for an operation created by the API.
    """
    db = SessionLocal()
    try:
        operation = crud.get_operation(db, operation_id)
        if operation is None:
            logger.error("Operation %s vanished before processing", operation_id)
            documents.cleanup(upload_path)
            return {"status": "failed", "error": "Operation not found"}

        logger.info("Operation %s: converting %s in the background", operation_id, original_name)
        audio_file = asyncio.run(
            processing.document_to_speech(
                db, operation, upload_path, mimetype, original_name, SpeechOptions(**options)
            )
        )
        return {"status": "completed", "audio_file_id": audio_file.id}
    except ApiError as exc:
        logger.error("Operation %s failed: %s", operation_id, exc.message)
        return {"status": "failed", "error": exc.message}
    finally:
        db.close()
