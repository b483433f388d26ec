# summavoice/schemas.py
from datetime import datetime
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator

from summavoice.models import OperationStatus, OperationType
from summavoice.voices import AUDIO_FORMAT_CODES, CODECS


# --- Users & auth ---

class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=100)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("Username must be at least 3 characters")
        return v


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


# Schema for returning user data in the response (without the password)
class User(BaseModel):
    id: int
    username: str
    email: EmailStr
    is_admin: bool
    email_verified: bool
    created_at: datetime

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    success: bool = True
    message: str | None = None
    token: str
    user: User


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class EmailRequest(BaseModel):
    email: EmailStr


class OtpValidateRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., min_length=1)


class PasswordResetRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6, max_length=100)


class VerifyEmailRequest(BaseModel):
    email: EmailStr
    code: str = Field(..., min_length=1)


class VerificationStatus(BaseModel):
    success: bool = True
    email: EmailStr
    email_verified: bool


# --- Operations ---

class AudioFile(BaseModel):
    id: int
    filename: str
    original_name: str
    mimetype: str
    size: int
    url: str | None = None
    duration: int | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class Operation(BaseModel):
    id: int
    type: OperationType
    input: str | None = None
    output: str | None = None
    status: OperationStatus
    # read from the ORM "meta" attribute, rendered as "metadata"
    metadata: dict[str, Any] | None = Field(default=None, validation_alias=AliasChoices("meta", "metadata"))
    user_id: int
    created_at: datetime
    updated_at: datetime
    audio_file: AudioFile | None = None

    class Config:
        from_attributes = True


class OperationCreate(BaseModel):
    type: OperationType
    input: str | None = Field(default=None, max_length=10000)
    metadata: dict[str, Any] | None = None


class OperationUpdate(BaseModel):
    status: OperationStatus | None = None
    output: str | None = Field(default=None, max_length=50000)
    metadata: dict[str, Any] | None = None


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "Pagination":
        total_pages = (total + limit - 1) // limit if limit else 0
        return cls(
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages,
            has_next_page=page < total_pages,
            has_previous_page=page > 1,
        )


class OperationPage(BaseModel):
    success: bool = True
    data: list[Operation]
    pagination: Pagination


class OperationEnvelope(BaseModel):
    success: bool = True
    data: Operation


# --- Speech ---

class TextToSpeechRequest(BaseModel):
    text: str = Field(..., min_length=1)
    voice: str | None = None
    language: str | None = None
    speed: int = Field(default=0, ge=-10, le=10)
    format: str = "16khz_16bit_stereo"
    codec: str = "MP3"
    base64: bool = False

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Text is required")
        return v

    @field_validator("format")
    @classmethod
    def known_format(cls, v: str) -> str:
        if v not in AUDIO_FORMAT_CODES:
            raise ValueError("Invalid format")
        return v

    @field_validator("codec")
    @classmethod
    def known_codec(cls, v: str) -> str:
        v = v.upper()
        if v not in CODECS:
            raise ValueError("Invalid codec")
        return v


class AudioFileSummary(BaseModel):
    id: int
    url: str | None = None
    duration: int | None = None


class SpeechResponse(BaseModel):
    success: bool = True
    operation_id: int
    audio_file: AudioFileSummary
    audio_content: str | None = None


class QueuedResponse(BaseModel):
    success: bool = True
    operation_id: int
    status: OperationStatus = OperationStatus.PENDING


# --- AI ---

class ParaphraseRequest(BaseModel):
    text: str = Field(..., min_length=1)
    tone: str = "neutral"
    complexity: Literal["simplify", "maintain", "enhance"] = "maintain"


class SummarizeRequest(BaseModel):
    text: str = Field(..., min_length=1)
    format: Literal["paragraph", "bullet", "concise"] = "paragraph"
    length: int = Field(default=3, ge=1, le=5)


class KeyPointsRequest(BaseModel):
    text: str = Field(..., min_length=1)
    count: int = Field(default=5, ge=1, le=20)


class ChangeToneRequest(BaseModel):
    text: str = Field(..., min_length=1)
    tone: str = Field(..., min_length=1)


class AIResult(BaseModel):
    success: bool = True
    operation_id: int
    result: str
    # document endpoints echo the result as "text" as well
    text: str | None = None


class KeyPointsResult(BaseModel):
    success: bool = True
    operation_id: int
    key_points: list[str]
