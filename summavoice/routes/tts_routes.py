# summavoice/routes/tts_routes.py
import base64
import dataclasses
import logging
import os

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import FileResponse, JSONResponse
from kombu.exceptions import OperationalError
from sqlalchemy.orm import Session

from summavoice import auth, crud, documents, models, processing, schemas, voices
from summavoice.celery_worker import process_document_task
from summavoice.database import get_db
from summavoice.errors import ApiError
from summavoice.models import OperationType
from summavoice.tts import SpeechOptions

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tts"])


def _speech_response(operation, audio_file, audio=None) -> schemas.SpeechResponse:
    return schemas.SpeechResponse(
        operation_id=operation.id,
        audio_file=schemas.AudioFileSummary(id=audio_file.id, url=audio_file.url, duration=audio_file.duration),
        audio_content=base64.b64encode(audio).decode("ascii") if audio is not None else None,
    )


@router.get("/options")
def get_tts_options():
    return {"success": True, "data": voices.tts_options()}


@router.get("/voices")
def get_voices(language: str | None = None):
    data = voices.list_voices(language)
    return {"success": True, "count": len(data), "data": data}


@router.post("/text-to-speech", response_model=schemas.SpeechResponse, response_model_exclude_none=True)
async def text_to_speech(
    request: schemas.TextToSpeechRequest,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    options = SpeechOptions(
        voice=request.voice,
        language=request.language,
        speed=request.speed,
        format=request.format,
        codec=request.codec,
    )
    operation, audio_file, audio = await processing.text_to_speech(db, current_user, options, request.text)
    return _speech_response(operation, audio_file, audio if request.base64 else None)


# Document Processing Endpoint
@router.post("/pdf-to-speech", response_model=schemas.SpeechResponse, response_model_exclude_none=True)
async def pdf_to_speech(
    file: UploadFile = File(...),
    voice: str | None = Form(None),
    language: str | None = Form(None),
    speed: int = Form(0, ge=-10, le=10),
    background: bool = Form(False),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    upload_path = documents.save_upload(file)
    options = SpeechOptions(voice=voice, language=language, speed=speed)
    try:
        operation = crud.create_operation(
            db,
            current_user.id,
            OperationType.PDF_TO_SPEECH,
            input_text=file.filename,
            metadata={
                "original_name": file.filename,
                "size": os.path.getsize(upload_path),
                "mimetype": file.content_type,
                "voice": voice,
                "language": language,
                "speed": speed,
                "background": background,
            },
        )
    except Exception:
        documents.cleanup(upload_path)
        raise

    if background:
        try:
            process_document_task.delay(
                operation.id, upload_path, file.content_type, file.filename, dataclasses.asdict(options)
            )
        except (OperationalError, OSError) as exc:
            logger.error("Could not queue operation %s: %s", operation.id, exc)
            documents.cleanup(upload_path)
            crud.fail_operation(db, operation, "Background queue is unavailable")
            raise ApiError(503, "Background processing is currently unavailable") from exc
        logger.info("Operation %s queued for background processing", operation.id)
        queued = schemas.QueuedResponse(operation_id=operation.id)
        return JSONResponse(status_code=status.HTTP_202_ACCEPTED, content=queued.model_dump(mode="json"))

    audio_file = await processing.document_to_speech(
        db, operation, upload_path, file.content_type, file.filename, options
    )
    return _speech_response(operation, audio_file)


@router.get("/history", response_model=schemas.OperationPage)
def tts_history(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    total, operations = crud.list_user_operations(
        db, current_user.id, page=page, limit=limit, types=models.TTS_OPERATION_TYPES
    )
    return schemas.OperationPage(
        data=[schemas.Operation.model_validate(op) for op in operations],
        pagination=schemas.Pagination.build(total, page, limit),
    )


# Audio File Download Endpoint
@router.get("/audio/{audio_file_id}")
def get_audio_file(
    audio_file_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    audio_file = crud.get_user_audio_file(db, audio_file_id, current_user.id)
    if audio_file is None:
        raise HTTPException(status_code=404, detail="Audio file not found")
    if not os.path.exists(audio_file.path):
        raise HTTPException(status_code=404, detail="Audio file not found on server")
    return FileResponse(
        audio_file.path,
        media_type=audio_file.mimetype,
        filename=audio_file.original_name,
        content_disposition_type="inline",
    )
