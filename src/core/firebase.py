import os
from typing import Optional, Dict, Any

import firebase_admin
import structlog
from firebase_admin import auth, credentials
from sqlalchemy.orm import Session

from ..config import get_settings
from ..exceptions import ServiceNotConfiguredError, ValidationError
from ..models.user import User
from ..repositories.user_repository import UserRepository

logger = structlog.get_logger(__name__)
settings = get_settings()

_firebase_app = None


def initialize_firebase():
    global _firebase_app
    if _firebase_app is None:
        try:
            if os.path.exists(settings.firebase_service_account_path):
                cred = credentials.Certificate(settings.firebase_service_account_path)
            else:
                # GOOGLE_APPLICATION_CREDENTIALS / metadata server
                cred = credentials.ApplicationDefault()

            options = {'projectId': settings.firebase_project_id} if settings.firebase_project_id else None
            _firebase_app = firebase_admin.initialize_app(cred, options)
            logger.info("firebase_initialized", project_id=settings.firebase_project_id)
        except Exception as e:
            logger.error("firebase_initialization_failed", error=str(e))
            return None
    return _firebase_app


def verify_firebase_token(token: str) -> Optional[Dict[str, Any]]:
    app = initialize_firebase()
    if not app:
        logger.warning("firebase_not_initialized")
        return None

    try:
        return auth.verify_id_token(token)
    except (auth.InvalidIdTokenError, auth.ExpiredIdTokenError, auth.RevokedIdTokenError) as e:
        logger.info("token_rejected", reason=type(e).__name__)
        return None
    except ValueError as e:
        logger.info("token_malformed", error=str(e))
        return None


def create_firebase_account(email: str, password: str, display_name: str) -> str:
    """Create the Firebase login for a new user and return its uid."""
    if not initialize_firebase():
        raise ServiceNotConfiguredError("Authentication service is not configured")

    try:
        record = auth.create_user(email=email, password=password, display_name=display_name)
    except auth.EmailAlreadyExistsError:
        raise ValidationError("Email already registered")

    logger.info("firebase_account_created", uid=record.uid)
    return record.uid


def request_password_reset(email: str) -> Optional[str]:
    """Generate a reset link for an existing account. Returns None for unknown emails."""
    if not initialize_firebase():
        raise ServiceNotConfiguredError("Authentication service is not configured")

    try:
        link = auth.generate_password_reset_link(email)
    except auth.UserNotFoundError:
        return None

    logger.info("password_reset_link_generated")
    return link


async def get_or_create_user(db: Session, firebase_uid: str, email: str, display_name: str) -> User:
    repo = UserRepository(db)
    user = repo.get_by_firebase_uid(firebase_uid)
    if user:
        return user

    # Account created locally first (signup) and now seen with its token
    existing = repo.get_by_email(email)
    if existing:
        existing.firebase_uid = firebase_uid
        db.commit()
        db.refresh(existing)
        return existing

    user = repo.create(email=email, display_name=display_name, firebase_uid=firebase_uid)
    logger.info("user_created", user_id=user.user_id)
    return user
