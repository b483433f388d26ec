# summavoice/routes/ai_routes.py
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from summavoice import ai, auth, crud, documents, models, processing, schemas
from summavoice.database import get_db
from summavoice.models import OperationType

router = APIRouter(tags=["ai"])


def _result(operation, result, echo_text=False) -> schemas.AIResult:
    return schemas.AIResult(operation_id=operation.id, result=result, text=result if echo_text else None)


async def _read_upload(file: UploadFile) -> tuple[str, dict]:
    upload_path = documents.save_upload(file)
    metadata = {"original_name": file.filename, "mimetype": file.content_type}
    text = await processing.read_document(upload_path, file.content_type)
    return text, metadata


@router.post("/paraphrase", response_model=schemas.AIResult, response_model_exclude_none=True)
async def paraphrase(
    request: schemas.ParaphraseRequest,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    operation, result = await processing.run_ai_operation(
        db, current_user, OperationType.PARAPHRASE, request.text,
        lambda: ai.paraphrase_text(request.text, request.tone, request.complexity),
        metadata={"tone": request.tone, "complexity": request.complexity},
    )
    return _result(operation, result)


@router.post("/summarize", response_model=schemas.AIResult, response_model_exclude_none=True)
async def summarize(
    request: schemas.SummarizeRequest,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    operation, result = await processing.run_ai_operation(
        db, current_user, OperationType.SUMMARIZE, request.text,
        lambda: ai.summarize_text(request.text, request.format, request.length),
        metadata={"format": request.format, "length": request.length},
    )
    return _result(operation, result)


@router.post("/key-points", response_model=schemas.KeyPointsResult)
async def key_points(
    request: schemas.KeyPointsRequest,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    operation, points = await processing.run_ai_operation(
        db, current_user, OperationType.KEY_POINTS, request.text,
        lambda: ai.extract_key_points(request.text, request.count),
        metadata={"count": request.count},
    )
    return schemas.KeyPointsResult(operation_id=operation.id, key_points=points)


@router.post("/change-tone", response_model=schemas.AIResult, response_model_exclude_none=True)
async def change_tone(
    request: schemas.ChangeToneRequest,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    operation, result = await processing.run_ai_operation(
        db, current_user, OperationType.CHANGE_TONE, request.text,
        lambda: ai.change_tone(request.text, request.tone),
        metadata={"tone": request.tone},
    )
    return _result(operation, result)


# --- Document variants ---

@router.post("/doc/paraphrase", response_model=schemas.AIResult, response_model_exclude_none=True)
async def paraphrase_document(
    file: UploadFile = File(...),
    tone: str = Form("neutral"),
    complexity: str = Form("maintain", pattern="^(simplify|maintain|enhance)$"),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    text, metadata = await _read_upload(file)
    operation, result = await processing.run_ai_operation(
        db, current_user, OperationType.DOCUMENT_PARAPHRASE, text,
        lambda: ai.paraphrase_text(text, tone, complexity),
        metadata={**metadata, "tone": tone, "complexity": complexity},
    )
    return _result(operation, result, echo_text=True)


@router.post("/doc/summarize", response_model=schemas.AIResult, response_model_exclude_none=True)
async def summarize_document(
    file: UploadFile = File(...),
    format: str = Form("paragraph", pattern="^(paragraph|bullet|concise)$"),
    length: int = Form(3, ge=1, le=5),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    text, metadata = await _read_upload(file)
    operation, result = await processing.run_ai_operation(
        db, current_user, OperationType.DOCUMENT_SUMMARIZE, text,
        lambda: ai.summarize_text(text, format, length),
        metadata={**metadata, "format": format, "length": length},
    )
    return _result(operation, result, echo_text=True)


@router.post("/doc/key-points", response_model=schemas.KeyPointsResult)
async def key_points_document(
    file: UploadFile = File(...),
    count: int = Form(5, ge=1, le=20),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    text, metadata = await _read_upload(file)
    operation, points = await processing.run_ai_operation(
        db, current_user, OperationType.DOCUMENT_KEY_POINTS, text,
        lambda: ai.extract_key_points(text, count),
        metadata={**metadata, "count": count},
    )
    return schemas.KeyPointsResult(operation_id=operation.id, key_points=points)


@router.post("/doc/change-tone", response_model=schemas.AIResult, response_model_exclude_none=True)
async def change_tone_document(
    file: UploadFile = File(...),
    tone: str = Form(..., min_length=1),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    text, metadata = await _read_upload(file)
    operation, result = await processing.run_ai_operation(
        db, current_user, OperationType.DOCUMENT_CHANGE_TONE, text,
        lambda: ai.change_tone(text, tone),
        metadata={**metadata, "tone": tone},
    )
    return _result(operation, result, echo_text=True)


@router.get("/history", response_model=schemas.OperationPage)
def ai_history(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    type: OperationType | None = None,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    types = [type] if type in models.AI_OPERATION_TYPES else models.AI_OPERATION_TYPES
    total, operations = crud.list_user_operations(db, current_user.id, page=page, limit=limit, types=types)
    return schemas.OperationPage(
        data=[schemas.Operation.model_validate(op) for op in operations],
        pagination=schemas.Pagination.build(total, page, limit),
    )
