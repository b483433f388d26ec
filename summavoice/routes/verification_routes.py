# summavoice/routes/verification_routes.py
import logging
import smtplib

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from summavoice import auth, crud, mailer, models, schemas
from summavoice.database import get_db
from summavoice.models import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(tags=["verification"])


@router.post("/send", response_model=schemas.MessageResponse)
def send_verification_code(
    request: schemas.EmailRequest,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    user = crud.get_user_by_email(db, email=request.email)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    if user.email_verified:
        raise HTTPException(status_code=400, detail="Email is already verified")

    code = mailer.generate_code()
    crud.create_verification_code(db, user, code)
    try:
        mailer.send_verification_email(user.email, code)
    except (smtplib.SMTPException, OSError):
        logger.exception("Failed to send verification email to user %s", user.id)
        raise HTTPException(status_code=500, detail="Failed to send verification email")
    return schemas.MessageResponse(message="Verification code sent successfully")


@router.post("/verify")
def verify_email(request: schemas.VerifyEmailRequest, db: Session = Depends(get_db)):
    verification = crud.find_valid_verification_code(db, request.email, request.code)
    if verification is None:
        stale = crud.find_verification_code(db, request.email, request.code)
        if stale is not None and stale.used:
            raise HTTPException(status_code=400, detail="This verification code has already been used")
        if stale is not None and stale.expires_at <= utcnow():
            raise HTTPException(status_code=400, detail="Verification code has expired. Please request a new one.")
        raise HTTPException(status_code=400, detail="Invalid or expired verification code")

    user = crud.consume_verification_code(db, verification)
    logger.info("Email verified for user %s", user.id)
    return {
        "success": True,
        "message": "Email verified successfully",
        "user": schemas.User.model_validate(user),
    }


@router.get("/status/{user_id}", response_model=schemas.VerificationStatus)
def verification_status(
    user_id: int,
    db: Session = Depends(get_db),
    current_user: models.User = Depends(auth.get_current_user),
):
    if current_user.id != user_id and not current_user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to view this user")
    user = crud.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return schemas.VerificationStatus(email=user.email, email_verified=user.email_verified)
