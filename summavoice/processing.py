# summavoice/processing.py
"""
Operation lifecycles shared by the HTTP handlers and the Celery worker.

Every run follows the same shape: an Operation row exists in the pending
state, the work is done, and the row ends up either completed (with its
output and, for speech, its AudioFile) or failed with the error message.
"""
import asyncio
import json
import logging
import os

from sqlalchemy.orm import Session

from summavoice import crud, documents, models, storage, tts
from summavoice.errors import ApiError
from summavoice.models import OperationType

logger = logging.getLogger(__name__)


def _fail(db: Session, operation: models.Operation, exc: Exception, fallback: str):
    """Mark the operation failed and raise the error the client should see."""
    if isinstance(exc, ApiError):
        crud.fail_operation(db, operation, exc.message)
        raise exc
    logger.exception("Operation %s crashed", operation.id)
    crud.fail_operation(db, operation, str(exc) or fallback)
    raise ApiError(500, fallback) from exc


async def text_to_speech(db: Session, user: models.User, options: tts.SpeechOptions, text: str):
    """Returns (operation, audio_file, audio_bytes)."""
    operation = crud.create_operation(
        db,
        user.id,
        OperationType.TEXT_TO_SPEECH,
        input_text=text,
        metadata={
            "voice": options.voice,
            "language": options.language,
            "speed": options.speed,
            "format": options.format,
            "codec": options.codec,
        },
    )

    audio_path = None
    try:
        result = await tts.synthesize(text, options)
        audio = storage.save_audio(result.audio, options.codec, prefix="tts")
        audio_path = audio["path"]
        audio_file = crud.attach_audio_file(
            db,
            operation,
            audio,
            {"language": result.language, "voice": result.voice, "chunks": result.chunks, "text_length": len(text)},
        )
    except Exception as exc:
        storage.remove_file(audio_path)
        _fail(db, operation, exc, "Failed to convert text to speech")
    return operation, audio_file, result.audio


async def document_to_speech(
    db: Session,
    operation: models.Operation,
    upload_path: str,
    mimetype: str,
    original_name: str,
    options: tts.SpeechOptions,
):
    """Read a stored upload aloud; the upload is removed whatever happens."""
    audio_path = None
    try:
        text, page_count = await asyncio.to_thread(documents.extract_text, upload_path, mimetype)
        if not text or not text.strip():
            raise ApiError(400, "No text could be extracted from the document")

        result = await tts.synthesize(text, options)
        stem = os.path.splitext(original_name or "document")[0]
        ext, _ = storage.CODEC_FILES.get(options.codec, storage.CODEC_FILES["MP3"])
        audio = storage.save_audio(result.audio, options.codec, prefix="pdf", original_name=f"{stem}.{ext}")
        audio_path = audio["path"]
        return crud.attach_audio_file(
            db,
            operation,
            audio,
            {
                "page_count": page_count,
                "text_length": len(text),
                "chunks": result.chunks,
                "language": result.language,
                "voice": result.voice,
            },
        )
    except Exception as exc:
        storage.remove_file(audio_path)
        _fail(db, operation, exc, "Failed to convert PDF to speech")
    finally:
        documents.cleanup(upload_path)


async def read_document(upload_path: str, mimetype: str) -> str:
    """Extract a stored upload's text and remove the upload."""
    try:
        text, _ = await asyncio.to_thread(documents.extract_text, upload_path, mimetype)
    finally:
        documents.cleanup(upload_path)
    if not text or not text.strip():
        raise ApiError(400, "No text could be extracted from the document")
    return text


async def run_ai_operation(db: Session, user: models.User, op_type: OperationType, text: str, action, metadata=None):
    """
    Record an AI operation around `action`, a zero-argument callable returning
    an awaitable. String results complete the operation as-is; lists (key
    points) are stored as a JSON array. Returns (operation, result).
    """
    operation = crud.create_operation(db, user.id, op_type, input_text=text, metadata=metadata)
    try:
        result = await action()
    except Exception as exc:
        _fail(db, operation, exc, "Failed to process text with AI")

    if isinstance(result, list):
        output, extra = json.dumps(result), {"points_extracted": len(result)}
    else:
        output, extra = result, {"output_length": len(result)}
    crud.complete_operation(db, operation, output, extra)
    return operation, result
