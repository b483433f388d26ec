# summavoice/crud.py
import json
import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session, selectinload

from summavoice import models, schemas
from summavoice.models import OperationStatus, utcnow

logger = logging.getLogger(__name__)

VERIFICATION_CODE_TTL = timedelta(hours=1)
RESET_TOKEN_TTL = timedelta(minutes=30)


# --- Users ---

def get_user(db: Session, user_id: int):
    return db.get(models.User, user_id)


def get_user_by_email(db: Session, email: str):
    """Fetches a user from the database by their email."""
    return db.query(models.User).filter(models.User.email == email).first()


def get_user_by_username(db: Session, username: str):
    return db.query(models.User).filter(models.User.username == username).first()


def list_users(db: Session):
    return db.query(models.User).order_by(models.User.id).all()


def create_user(db: Session, user: schemas.UserCreate, hashed_password: str):
    """Creates a new, unverified user."""
    db_user = models.User(
        username=user.username,
        email=user.email,
        hashed_password=hashed_password,
        email_verified=False,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    logger.info("Created user %s", db_user.id)
    return db_user


# --- Verification codes ---

def create_verification_code(db: Session, user: models.User, code: str):
    """Stores a fresh code, invalidating any unused ones the user still holds."""
    db.query(models.VerificationCode).filter(
        models.VerificationCode.user_id == user.id,
        models.VerificationCode.used.is_(False),
    ).update({"used": True}, synchronize_session=False)
    db_code = models.VerificationCode(
        email=user.email,
        code=code,
        expires_at=utcnow() + VERIFICATION_CODE_TTL,
        user_id=user.id,
        used=False,
    )
    db.add(db_code)
    db.commit()
    db.refresh(db_code)
    return db_code


def find_valid_verification_code(db: Session, email: str, code: str):
    return db.query(models.VerificationCode).filter(
        models.VerificationCode.email == email,
        models.VerificationCode.code == code,
        models.VerificationCode.used.is_(False),
        models.VerificationCode.expires_at > utcnow(),
    ).first()


def find_verification_code(db: Session, email: str, code: str):
    return db.query(models.VerificationCode).filter(
        models.VerificationCode.email == email,
        models.VerificationCode.code == code,
    ).order_by(models.VerificationCode.id.desc()).first()


def consume_verification_code(db: Session, verification: models.VerificationCode):
    """Marks the code used and the owner verified in a single commit."""
    try:
        verification.used = True
        verification.user.email_verified = True
        db.commit()
    except Exception:
        db.rollback()
        raise
    return verification.user


# --- Password reset tokens ---

def create_reset_token(db: Session, user: models.User, token: str):
    db.query(models.PasswordResetToken).filter(
        models.PasswordResetToken.email == user.email
    ).delete(synchronize_session=False)
    db_token = models.PasswordResetToken(
        email=user.email,
        token=token,
        expires_at=utcnow() + RESET_TOKEN_TTL,
        user_id=user.id,
        used=False,
    )
    db.add(db_token)
    db.commit()
    db.refresh(db_token)
    return db_token


def reset_token_exists(db: Session, token: str) -> bool:
    return db.query(models.PasswordResetToken.id).filter(models.PasswordResetToken.token == token).first() is not None


def find_valid_reset_token(db: Session, email: str, token: str):
    return db.query(models.PasswordResetToken).filter(
        models.PasswordResetToken.email == email,
        models.PasswordResetToken.token == token,
        models.PasswordResetToken.used.is_(False),
        models.PasswordResetToken.expires_at > utcnow(),
    ).first()


def consume_reset_token(db: Session, reset_token: models.PasswordResetToken, hashed_password: str):
    """Sets the new password and burns every outstanding token of the user."""
    try:
        reset_token.user.hashed_password = hashed_password
        db.query(models.PasswordResetToken).filter(
            models.PasswordResetToken.user_id == reset_token.user_id,
            models.PasswordResetToken.used.is_(False),
        ).update({"used": True}, synchronize_session=False)
        db.commit()
    except Exception:
        db.rollback()
        raise


# --- Operations ---

def create_operation(db: Session, user_id: int, op_type: models.OperationType, input_text: str | None = None, metadata: dict | None = None):
    """Creates a new pending operation record for a user."""
    db_operation = models.Operation(
        type=op_type,
        input=input_text,
        status=OperationStatus.PENDING,
        meta=metadata or {},
        user_id=user_id,
    )
    db.add(db_operation)
    db.commit()
    db.refresh(db_operation)
    logger.info("Operation %s (%s) created for user %s", db_operation.id, op_type.value, user_id)
    return db_operation


def get_operation(db: Session, operation_id: int):
    return db.get(models.Operation, operation_id)


def get_user_operation(db: Session, operation_id: int, user_id: int):
    """Fetches an operation only if it belongs to the given user."""
    return db.query(models.Operation).options(
        selectinload(models.Operation.audio_file)
    ).filter(
        models.Operation.id == operation_id,
        models.Operation.user_id == user_id,
    ).first()


def list_user_operations(
    db: Session,
    user_id: int,
    page: int = 1,
    limit: int = 10,
    types: list | None = None,
    status: OperationStatus | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
):
    """Returns (total, operations) for one page of a user's history, newest first."""
    query = db.query(models.Operation).filter(models.Operation.user_id == user_id)
    if types:
        query = query.filter(models.Operation.type.in_(types))
    if status is not None:
        query = query.filter(models.Operation.status == status)
    if start_date is not None:
        query = query.filter(models.Operation.created_at >= start_date)
    if end_date is not None:
        query = query.filter(models.Operation.created_at <= end_date)

    total = query.count()
    operations = (
        query.options(selectinload(models.Operation.audio_file))
        .order_by(models.Operation.created_at.desc(), models.Operation.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return total, operations


def update_operation(db: Session, operation: models.Operation, status=None, output=None, metadata=None):
    """Updates only the fields that were supplied."""
    if status is not None:
        operation.status = status
    if output is not None:
        operation.output = output
    if metadata is not None:
        operation.meta = metadata
    db.commit()
    db.refresh(operation)
    return operation


def complete_operation(db: Session, operation: models.Operation, output: str, metadata: dict | None = None):
    operation.status = OperationStatus.COMPLETED
    operation.output = output
    if metadata:
        operation.meta = {**(operation.meta or {}), **metadata}
    db.commit()
    db.refresh(operation)
    logger.info("Operation %s completed", operation.id)
    return operation


def fail_operation(db: Session, operation: models.Operation, error_message: str):
    # a failed flush may have left the session unusable
    db.rollback()
    operation.status = OperationStatus.FAILED
    operation.output = error_message
    db.commit()
    db.refresh(operation)
    logger.warning("Operation %s failed: %s", operation.id, error_message)
    return operation


def delete_user_operation(db: Session, operation_id: int, user_id: int) -> bool:
    """Deletes an operation (and, by cascade, its audio file) if it belongs to the user."""
    db_operation = get_user_operation(db, operation_id, user_id)
    if db_operation is None:
        logger.info("Operation %s not found or user %s not authorized to delete", operation_id, user_id)
        return False
    db.delete(db_operation)
    db.commit()
    logger.info("Deleted operation %s for user %s", operation_id, user_id)
    return True


def operations_in_range(db: Session, user_id: int, start_date: datetime | None = None, end_date: datetime | None = None):
    query = db.query(
        models.Operation.type, models.Operation.status, models.Operation.created_at
    ).filter(models.Operation.user_id == user_id)
    if start_date is not None:
        query = query.filter(models.Operation.created_at >= start_date)
    if end_date is not None:
        query = query.filter(models.Operation.created_at <= end_date)
    return query.order_by(models.Operation.created_at.desc()).all()


# --- Audio files ---

def attach_audio_file(db: Session, operation: models.Operation, audio: dict, output_metadata: dict | None = None):
    """Records the audio file and completes its operation in one transaction."""
    try:
        db_audio = models.AudioFile(user_id=operation.user_id, operation_id=operation.id, **audio)
        db.add(db_audio)
        db.flush()
        operation.status = OperationStatus.COMPLETED
        operation.output = json.dumps({"audio_file_id": db_audio.id})
        operation.meta = {**(operation.meta or {}), **(output_metadata or {}), "duration": db_audio.duration}
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_audio)
    db.refresh(operation)
    logger.info("Operation %s completed with audio file %s", operation.id, db_audio.id)
    return db_audio


def get_user_audio_file(db: Session, audio_file_id: int, user_id: int):
    return db.query(models.AudioFile).filter(
        models.AudioFile.id == audio_file_id,
        models.AudioFile.user_id == user_id,
    ).first()
