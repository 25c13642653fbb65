import structlog
from fastapi import APIRouter, Depends

from ...dependencies import get_current_user_conditional, get_user_repository
from ..schemas import UserSettingsResponse, UserSettingsUpdate, LastReadResponse
from ....models.user import User
from ....repositories.user_repository import UserRepository

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/me/settings", response_model=UserSettingsResponse)
async def get_settings(current_user: User = Depends(get_current_user_conditional)):
    return current_user


@router.patch("/me/settings", response_model=UserSettingsResponse)
async def update_settings(
    request: UserSettingsUpdate,
    current_user: User = Depends(get_current_user_conditional),
    repo: UserRepository = Depends(get_user_repository)
):
    fields = request.model_dump(exclude_unset=True)
    user = repo.update_settings(current_user, **fields)
    logger.info("user_settings_updated", user_id=user.user_id, fields=sorted(fields))
    return user


@router.get("/me/last-read", response_model=LastReadResponse)
async def get_last_read(current_user: User = Depends(get_current_user_conditional)):
    return LastReadResponse(last_read_at=current_user.last_read_at)


@router.post("/me/last-read", response_model=LastReadResponse)
async def mark_all_read(
    current_user: User = Depends(get_current_user_conditional),
    repo: UserRepository = Depends(get_user_repository)
):
    return LastReadResponse(last_read_at=repo.update_last_read_at(current_user))
