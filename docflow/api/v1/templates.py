"""Template endpoints."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from docflow.api.deps import get_current_user, require_template_manager
from docflow.db.postgres import get_db
from docflow.models.sql.template import Template
from docflow.models.sql.user import User
from docflow.schemas.template import TemplateCreate, TemplateResponse, TemplateUpdate

router = APIRouter()


async def _get_template(db: AsyncSession, template_id: UUID, include_inactive: bool = False) -> Template:
    template = await db.get(Template, template_id)
    if template is None or not (template.is_active or include_inactive):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Template not found",
        )
    return template


async def _ensure_unique_name(db: AsyncSession, name: str, exclude_id: Optional[UUID] = None) -> None:
    query = select(Template.id).where(Template.name == name)
    if exclude_id is not None:
        query = query.where(Template.id != exclude_id)
    if (await db.execute(query)).scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Template name already exists",
        )


@router.get(
    "",
    response_model=list[TemplateResponse],
    summary="List active templates",
)
async def list_templates(
    category: Optional[str] = None,
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[Template]:
    query = select(Template).where(Template.is_active.is_(True))
    if category:
        query = query.where(Template.category == category)
    result = await db.execute(query.order_by(Template.name))
    return list(result.scalars().all())


@router.get(
    "/categories",
    response_model=list[str],
    summary="List template categories",
)
async def list_categories(
    _: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> list[str]:
    """Distinct categories of active templates."""
    result = await db.execute(
        select(Template.category)
        .where(Template.is_active.is_(True))
        .distinct()
        .order_by(Template.category)
    )
    return list(result.scalars().all())


@router.get(
    "/{template_id}",
    response_model=TemplateResponse,
    summary="Get a template",
)
async def get_template(
    template_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Template:
    """Administrators can also see deactivated templates."""
    return await _get_template(db, template_id, include_inactive=current_user.is_admin)


@router.post(
    "",
    response_model=TemplateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a template",
)
async def create_template(
    template_data: TemplateCreate,
    current_user: User = Depends(require_template_manager),
    db: AsyncSession = Depends(get_db),
) -> Template:
    await _ensure_unique_name(db, template_data.name)

    template = Template(
        name=template_data.name,
        description=template_data.description,
        category=template_data.category,
        fields=[f.model_dump(by_alias=True) for f in template_data.fields],
        header=template_data.header.model_dump(by_alias=True),
        footer=template_data.footer.model_dump(by_alias=True),
        styling=template_data.styling.model_dump(by_alias=True),
        created_by=current_user.id,
    )
    db.add(template)
    await db.flush()
    await db.refresh(template)
    return template


@router.put(
    "/{template_id}",
    response_model=TemplateResponse,
    summary="Update a template",
)
async def update_template(
    template_id: UUID,
    update_data: TemplateUpdate,
    _: User = Depends(require_template_manager),
    db: AsyncSession = Depends(get_db),
) -> Template:
    template = await _get_template(db, template_id, include_inactive=True)

    if update_data.name is not None and update_data.name != template.name:
        await _ensure_unique_name(db, update_data.name, exclude_id=template.id)
        template.name = update_data.name
    if update_data.description is not None:
        template.description = update_data.description
    if update_data.category is not None:
        template.category = update_data.category
    if update_data.fields is not None:
        template.fields = [f.model_dump(by_alias=True) for f in update_data.fields]
    if update_data.header is not None:
        template.header = update_data.header.model_dump(by_alias=True)
    if update_data.footer is not None:
        template.footer = update_data.footer.model_dump(by_alias=True)
    if update_data.styling is not None:
        template.styling = update_data.styling.model_dump(by_alias=True)
    if update_data.is_active is not None:
        template.is_active = update_data.is_active

    await db.flush()
    await db.refresh(template)
    return template


@router.delete(
    "/{template_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Deactivate a template",
)
async def delete_template(
    template_id: UUID,
    _: User = Depends(require_template_manager),
    db: AsyncSession = Depends(get_db),
) -> None:
    """Soft delete: existing documents keep their template reference."""
    template = await _get_template(db, template_id)
    template.is_active = False
    await db.flush()
