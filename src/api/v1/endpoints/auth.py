from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Header
from sqlalchemy.orm import Session

from ...dependencies import get_db, get_current_user_optional_conditional
from ..constants import FORGOT_PASSWORD_MESSAGE
from ..schemas import (
    SignupRequest,
    SignupResponse,
    SignupUser,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    VerifyTokenResponse,
    UserResponse,
)
from ....core.firebase import verify_firebase_token, create_firebase_account, request_password_reset
from ....exceptions import ServiceNotConfiguredError, ValidationError
from ....models.user import User
from ....repositories.user_repository import UserRepository

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/verify-token", response_model=VerifyTokenResponse)
async def verify_token(authorization: str = Header(...)):
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header")

    token = authorization.split(" ", 1)[1]
    firebase_data = verify_firebase_token(token)
    if not firebase_data:
        raise HTTPException(status_code=401, detail="Invalid token")

    firebase_uid = firebase_data.get("uid")
    email = firebase_data.get("email")

    if not firebase_uid or not email:
        raise HTTPException(status_code=401, detail="Invalid token data")

    return VerifyTokenResponse(
        valid=True,
        firebase_uid=firebase_uid,
        email=email,
        name=firebase_data.get("name")
    )


@router.post("/signup", response_model=SignupResponse)
async def signup(request: SignupRequest, db: Session = Depends(get_db)):
    repo = UserRepository(db)
    email = request.email.lower()
    if repo.get_by_email(email):
        raise HTTPException(status_code=400, detail="Email already registered")

    display_name = request.display_name or email.split("@")[0]

    try:
        firebase_uid = create_firebase_account(email, request.password, display_name)
        user = repo.create(email=email, display_name=display_name, firebase_uid=firebase_uid)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ServiceNotConfiguredError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.error("signup_failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to create account")

    logger.info("user_signed_up", user_id=user.user_id)
    return SignupResponse(
        user=SignupUser(user_id=user.user_id, email=user.email, display_name=user.display_name)
    )


@router.post("/forgot-password", response_model=ForgotPasswordResponse)
async def forgot_password(request: ForgotPasswordRequest):
    # Same answer whether or not the account exists
    try:
        request_password_reset(request.email)
    except Exception as e:
        logger.warning("password_reset_request_failed", error=str(e))
    return ForgotPasswordResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.get("/me", response_model=Optional[UserResponse])
async def get_current_user(
    current_user: Optional[User] = Depends(get_current_user_optional_conditional)
):
    if not current_user:
        return None
    return UserResponse.model_validate(current_user)
