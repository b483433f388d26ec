# summavoice/routes/auth_routes.py
import logging
import smtplib

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from summavoice import auth, crud, mailer, models, schemas
from summavoice.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

RESET_MESSAGE = "If your email is registered, you will receive a password reset code"


def _send_verification(db: Session, user: models.User):
    code = mailer.generate_code()
    crud.create_verification_code(db, user, code)
    try:
        mailer.send_verification_email(user.email, code)
    except (smtplib.SMTPException, OSError):
        logger.exception("Failed to send verification email to user %s", user.id)


# User Registration Endpoint
@router.post("/register", response_model=schemas.AuthResponse, status_code=status.HTTP_201_CREATED)
def register_user(user: schemas.UserCreate, db: Session = Depends(get_db)):
    if crud.get_user_by_email(db, email=user.email):
        raise HTTPException(status_code=400, detail="A user with this email already exists. Please use a different email or login.")
    if crud.get_user_by_username(db, username=user.username):
        raise HTTPException(status_code=400, detail="Username is already taken")

    db_user = crud.create_user(db, user=user, hashed_password=auth.hash_password(user.password))
    _send_verification(db, db_user)
    return schemas.AuthResponse(
        message="User registered successfully. Please check your email to verify your account.",
        token=auth.create_access_token(db_user),
        user=schemas.User.model_validate(db_user),
    )


@router.post("/login", response_model=schemas.AuthResponse)
def login(credentials: schemas.UserLogin, db: Session = Depends(get_db)):
    user = crud.get_user_by_email(db, email=credentials.email)
    if not user or not auth.verify_password(credentials.password, user.hashed_password):
        raise HTTPException(status_code=400, detail="Invalid credentials")
    return schemas.AuthResponse(
        token=auth.create_access_token(user),
        user=schemas.User.model_validate(user),
    )


# OAuth2 password flow for the interactive docs; "username" carries the email
@router.post("/token", response_model=schemas.TokenResponse)
def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    user = crud.get_user_by_email(db, email=form_data.username)
    if not user or not auth.verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return schemas.TokenResponse(access_token=auth.create_access_token(user))


@router.get("/me")
def read_current_user(current_user: models.User = Depends(auth.get_current_user)):
    return {"success": True, "user": schemas.User.model_validate(current_user)}


@router.api_route("/logout", methods=["GET", "POST"], response_model=schemas.MessageResponse)
def logout():
    # tokens are stateless; the client simply discards its copy
    return schemas.MessageResponse(message="User logged out successfully")


@router.get("/users")
def list_users(db: Session = Depends(get_db), admin: models.User = Depends(auth.require_admin)):
    users = [schemas.User.model_validate(user) for user in crud.list_users(db)]
    return {"success": True, "count": len(users), "data": users}


@router.post("/forgot-password", response_model=schemas.MessageResponse)
def forgot_password(request: schemas.EmailRequest, db: Session = Depends(get_db)):
    user = crud.get_user_by_email(db, email=request.email)
    if user is None:
        # same answer either way so registered addresses stay hidden
        return schemas.MessageResponse(message=RESET_MESSAGE)

    otp = mailer.generate_code()
    while crud.reset_token_exists(db, otp):
        otp = mailer.generate_code()
    crud.create_reset_token(db, user, otp)

    try:
        mailer.send_password_reset_email(user.email, otp)
    except (smtplib.SMTPException, OSError):
        logger.exception("Failed to send password reset email to user %s", user.id)
        raise HTTPException(status_code=500, detail="Email could not be sent")
    return schemas.MessageResponse(message=RESET_MESSAGE)


@router.post("/validate-reset-otp")
def validate_reset_otp(request: schemas.OtpValidateRequest, db: Session = Depends(get_db)):
    if crud.find_valid_reset_token(db, request.email, request.otp) is None:
        raise HTTPException(status_code=400, detail="Invalid or expired OTP")
    return {"success": True, "message": "OTP is valid", "valid": True}


@router.post("/reset-password", response_model=schemas.MessageResponse)
def reset_password(request: schemas.PasswordResetRequest, db: Session = Depends(get_db)):
    reset_token = crud.find_valid_reset_token(db, request.email, request.otp)
    if reset_token is None:
        raise HTTPException(status_code=400, detail="Invalid or expired OTP")
    crud.consume_reset_token(db, reset_token, auth.hash_password(request.password))
    logger.info("Password reset for user %s", reset_token.user_id)
    return schemas.MessageResponse(message="Password has been reset successfully")
