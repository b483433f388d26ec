# summavoice/models.py
import enum
import logging
import os
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, JSON, String, Text, event
from sqlalchemy.orm import declarative_base, relationship

logger = logging.getLogger(__name__)

# This is the base class our models will inherit from
Base = declarative_base()


def utcnow():
    """Naive UTC timestamp; SQLite drops tzinfo so everything is stored naive."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value):
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class OperationType(str, enum.Enum):
    TEXT_TO_SPEECH = "text-to-speech"
    PDF_TO_SPEECH = "pdf-to-speech"
    PARAPHRASE = "paraphrase"
    SUMMARIZE = "summarize"
    KEY_POINTS = "key-points"
    CHANGE_TONE = "change-tone"
    DOCUMENT_PARAPHRASE = "document-paraphrase"
    DOCUMENT_SUMMARIZE = "document-summarize"
    DOCUMENT_KEY_POINTS = "document-key-points"
    DOCUMENT_CHANGE_TONE = "document-change-tone"


class OperationStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


TTS_OPERATION_TYPES = [OperationType.TEXT_TO_SPEECH, OperationType.PDF_TO_SPEECH]
AI_OPERATION_TYPES = [
    OperationType.PARAPHRASE,
    OperationType.SUMMARIZE,
    OperationType.KEY_POINTS,
    OperationType.CHANGE_TONE,
    OperationType.DOCUMENT_PARAPHRASE,
    OperationType.DOCUMENT_SUMMARIZE,
    OperationType.DOCUMENT_KEY_POINTS,
    OperationType.DOCUMENT_CHANGE_TONE,
]


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)
    email_verified = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    operations = relationship("Operation", back_populates="owner", cascade="all, delete-orphan")
    audio_files = relationship("AudioFile", back_populates="owner", cascade="all, delete-orphan")


class Operation(Base):
    __tablename__ = "operations"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(
        Enum(OperationType, name="operation_type", values_callable=_enum_values),
        nullable=False,
        index=True,
    )
    input = Column(Text, nullable=True)
    output = Column(Text, nullable=True)
    status = Column(
        Enum(OperationStatus, name="operation_status", values_callable=_enum_values),
        default=OperationStatus.PENDING,
        nullable=False,
    )
    # "metadata" is reserved on declarative classes, so the attribute is named meta
    meta = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    owner = relationship("User", back_populates="operations")
    audio_file = relationship(
        "AudioFile",
        back_populates="operation",
        uselist=False,
        cascade="all, delete-orphan",
    )


class AudioFile(Base):
    __tablename__ = "audio_files"

    id = Column(Integer, primary_key=True, index=True)
    filename = Column(String, nullable=False)
    original_name = Column(String, nullable=False)
    mimetype = Column(String, nullable=False)
    size = Column(Integer, nullable=False)
    path = Column(String, nullable=False)
    url = Column(String, nullable=True)
    duration = Column(Integer, nullable=True)  # seconds
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    operation_id = Column(Integer, ForeignKey("operations.id", ondelete="CASCADE"), nullable=True, index=True)
    owner = relationship("User", back_populates="audio_files")
    operation = relationship("Operation", back_populates="audio_file")


@event.listens_for(AudioFile, "after_delete")
def _remove_audio_file(mapper, connection, target):
    """Delete the physical file once its row is gone."""
    try:
        if target.path and os.path.exists(target.path):
            os.remove(target.path)
            logger.info("Deleted audio file %s", target.path)
    except OSError:
        logger.exception("Error deleting audio file %s", target.path)


class VerificationCode(Base):
    __tablename__ = "verification_codes"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=False, index=True)
    code = Column(String(6), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
    used = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    user = relationship("User")


class PasswordResetToken(Base):
    __tablename__ = "password_reset_tokens"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=False, index=True)
    token = Column(String, nullable=False, unique=True)
    expires_at = Column(DateTime, nullable=False)
    used = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    user = relationship("User")
