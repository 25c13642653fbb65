from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ...dependencies import get_current_user_conditional, get_style_template_repository
from ..schemas import StyleTemplateCreate, StyleTemplateUpdate, StyleTemplateResponse, SuccessResponse
from ....models.enums import Platform
from ....models.style_template import StyleTemplate
from ....models.user import User
from ....repositories.style_template_repository import StyleTemplateRepository

router = APIRouter()


def get_owned_template(template_id: str, user: User, repo: StyleTemplateRepository) -> StyleTemplate:
    template = repo.get_by_id(template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Template not found")
    if template.user_id != user.user_id:
        raise HTTPException(status_code=403, detail="Access denied")
    return template


@router.get("", response_model=List[StyleTemplateResponse])
async def list_templates(
    platform: Optional[Platform] = Query(None),
    current_user: User = Depends(get_current_user_conditional),
    repo: StyleTemplateRepository = Depends(get_style_template_repository)
):
    return repo.get_all_by_user(current_user.user_id, platform=platform.value if platform else None)


@router.post("", response_model=StyleTemplateResponse, status_code=201)
async def create_template(
    request: StyleTemplateCreate,
    current_user: User = Depends(get_current_user_conditional),
    repo: StyleTemplateRepository = Depends(get_style_template_repository)
):
    return repo.create(current_user.user_id, **request.model_dump())


@router.get("/{template_id}", response_model=StyleTemplateResponse)
async def get_template(
    template_id: str,
    current_user: User = Depends(get_current_user_conditional),
    repo: StyleTemplateRepository = Depends(get_style_template_repository)
):
    return get_owned_template(template_id, current_user, repo)


@router.patch("/{template_id}", response_model=StyleTemplateResponse)
async def update_template(
    template_id: str,
    request: StyleTemplateUpdate,
    current_user: User = Depends(get_current_user_conditional),
    repo: StyleTemplateRepository = Depends(get_style_template_repository)
):
    template = get_owned_template(template_id, current_user, repo)
    return repo.update(template, **request.model_dump(exclude_unset=True))


@router.delete("/{template_id}", response_model=SuccessResponse)
async def delete_template(
    template_id: str,
    current_user: User = Depends(get_current_user_conditional),
    repo: StyleTemplateRepository = Depends(get_style_template_repository)
):
    get_owned_template(template_id, current_user, repo)
    repo.delete(template_id)
    return SuccessResponse()
