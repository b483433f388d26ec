# summavoice/routes/operation_routes.py
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from summavoice import auth, crud, models, schemas
from summavoice.database import get_db
from summavoice.models import OperationStatus, OperationType, as_naive_utc

router = APIRouter(tags=["operations"])


@router.get("/", response_model=schemas.OperationPage)
def list_operations(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    type: OperationType | None = None,
    status_filter: OperationStatus | None = Query(None, alias="status"),
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    total, operations = crud.list_user_operations(
        db,
        current_user.id,
        page=page,
        limit=limit,
        types=[type] if type else None,
        status=status_filter,
        start_date=as_naive_utc(start_date),
        end_date=as_naive_utc(end_date),
    )
    return schemas.OperationPage(
        data=[schemas.Operation.model_validate(op) for op in operations],
        pagination=schemas.Pagination.build(total, page, limit),
    )


@router.post("/", response_model=schemas.OperationEnvelope, status_code=status.HTTP_201_CREATED)
def create_operation(
    operation: schemas.OperationCreate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    db_operation = crud.create_operation(
        db, current_user.id, operation.type, input_text=operation.input, metadata=operation.metadata
    )
    return schemas.OperationEnvelope(data=schemas.Operation.model_validate(db_operation))


def _get_owned(db: Session, operation_id: int, user: models.User) -> models.Operation:
    db_operation = crud.get_user_operation(db, operation_id, user.id)
    if db_operation is None:
        raise HTTPException(status_code=404, detail="Operation not found")
    return db_operation


@router.get("/{operation_id}", response_model=schemas.OperationEnvelope)
def read_operation(
    operation_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    return schemas.OperationEnvelope(data=schemas.Operation.model_validate(_get_owned(db, operation_id, current_user)))


@router.patch("/{operation_id}", response_model=schemas.OperationEnvelope)
def update_operation(
    operation_id: int,
    update: schemas.OperationUpdate,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    db_operation = _get_owned(db, operation_id, current_user)
    db_operation = crud.update_operation(
        db, db_operation, status=update.status, output=update.output, metadata=update.metadata
    )
    return schemas.OperationEnvelope(data=schemas.Operation.model_validate(db_operation))


# Delete Operation Endpoint
@router.delete("/{operation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_operation(
    operation_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    if not crud.delete_user_operation(db, operation_id=operation_id, user_id=current_user.id):
        raise HTTPException(status_code=404, detail="Operation not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
