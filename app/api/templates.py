"""Template management API routes.

Handles CURL parsing, template import from the rendering service,
browsing, administrator edits and the editor's categorized variables.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.api.deps import (
    get_categorizer,
    get_curl_parser,
    get_db,
    get_importer,
    get_normalizer,
)
from app.api.schemas import (
    ParseCurlRequest,
    ParseCurlResponse,
    TemplateImportRequest,
    TemplateUpdate,
    TemplateVariablesResponse,
)
from app.db.models import Template, TemplateListResponse, TemplateRead
from app.interfaces.variables import TemplateIdNotFoundError, TemplateImportError
from app.strategies.template_engine import (
    CurlCommandParser,
    TemplateImporter,
    VariableCategorizer,
    VariableNormalizer,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/templates", tags=["templates"])


# =============================================================================
# Helper Functions
# =============================================================================


async def _get_template_or_404(session: AsyncSession, template_id: uuid.UUID) -> Template:
    template = await session.get(Template, template_id)
    if template is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Template not found",
        )
    return template


# =============================================================================
# Import Endpoints
# =============================================================================


@router.post(
    "/parse-curl",
    response_model=ParseCurlResponse,
    status_code=status.HTTP_200_OK,
)
async def parse_curl(
    request: ParseCurlRequest,
    parser: CurlCommandParser = Depends(get_curl_parser),
) -> ParseCurlResponse:
    """Extract the template ID and modifications from a CURL command.

    A command that yields neither is not an error; the flags in the
    response tell the caller what was found.
    """
    parsed = parser.parse(request.curl_command)
    if parsed.is_empty:
        logger.info("CURL command contained no template ID or modifications")
    return ParseCurlResponse(
        template_id=parsed.template_id,
        modifications=parsed.modifications,
    )


@router.post(
    "/import",
    response_model=TemplateRead,
    status_code=status.HTTP_201_CREATED,
)
async def import_template(
    request: TemplateImportRequest,
    session: AsyncSession = Depends(get_db),
    importer: TemplateImporter = Depends(get_importer),
) -> Template:
    """Import a template from the rendering service.

    The template ID comes from ``template_id`` or is parsed from
    ``curl_command``; modifications in the command take priority over
    variables discovered on the template itself.

    Raises:
        HTTPException: 400 if no template ID could be resolved, 404 if the
            rendering service does not know the template, 502 if fetching
            it failed for any other reason.
    """
    try:
        return await importer.import_template(
            session,
            template_id=request.template_id,
            curl_command=request.curl_command,
            category=request.category,
        )

    except TemplateIdNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    except TemplateImportError as e:
        if e.status_code == status.HTTP_404_NOT_FOUND:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Template {e.template_id} not found on the rendering service",
            ) from e
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to fetch template {e.template_id}: {e}",
        ) from e
    except Exception as e:
        logger.error(f"Template import failed: {e}", exc_info=True)
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Template import failed: {str(e)}",
        ) from e


# =============================================================================
# Template Storage Endpoints
# =============================================================================


@router.get(
    "",
    response_model=TemplateListResponse,
    status_code=status.HTTP_200_OK,
)
async def list_templates(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    category: str | None = Query(default=None, description="Only templates in this category"),
    active_only: bool = Query(default=True, description="Hide deactivated templates"),
    session: AsyncSession = Depends(get_db),
) -> TemplateListResponse:
    """List imported templates, newest first."""
    try:
        statement = select(Template)
        if category:
            statement = statement.where(Template.category == category)
        if active_only:
            statement = statement.where(Template.is_active == True)  # noqa: E712

        count_result = await session.execute(
            select(func.count()).select_from(statement.subquery())
        )
        total = count_result.scalar_one()

        result = await session.execute(
            statement.order_by(Template.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        templates = result.scalars().all()

        logger.info(f"Retrieved {len(templates)} of {total} templates")

        return TemplateListResponse(
            templates=[TemplateRead.model_validate(t, from_attributes=True) for t in templates],
            total=total,
            page=page,
            page_size=page_size,
        )

    except Exception as e:
        logger.error(f"Template list failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Template list failed: {str(e)}",
        ) from e


@router.get(
    "/{template_id}",
    response_model=TemplateRead,
    status_code=status.HTTP_200_OK,
)
async def get_template(
    template_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
) -> Template:
    """Retrieve a single template."""
    return await _get_template_or_404(session, template_id)


@router.get(
    "/{template_id}/variables",
    response_model=TemplateVariablesResponse,
    status_code=status.HTTP_200_OK,
)
async def get_template_variables(
    template_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
    categorizer: VariableCategorizer = Depends(get_categorizer),
) -> TemplateVariablesResponse:
    """Return a template's variables split into text, media and color sections."""
    template = await _get_template_or_404(session, template_id)
    return TemplateVariablesResponse(
        template_id=template.id,
        variables=categorizer.categorize(template.variables),
    )


@router.patch(
    "/{template_id}",
    response_model=TemplateRead,
    status_code=status.HTTP_200_OK,
)
async def update_template(
    template_id: uuid.UUID,
    update: TemplateUpdate,
    session: AsyncSession = Depends(get_db),
    normalizer: VariableNormalizer = Depends(get_normalizer),
) -> Template:
    """Apply an administrator edit; replacement variables are normalized."""
    template = await _get_template_or_404(session, template_id)

    try:
        changes = update.model_dump(exclude_unset=True)
        if changes.get("variables") is not None:
            changes["variables"] = normalizer.normalize(changes["variables"])

        for field, value in changes.items():
            setattr(template, field, value)

        session.add(template)
        await session.commit()
        await session.refresh(template)

        logger.info(f"Template updated: {template_id} fields={sorted(changes)}")
        return template

    except Exception as e:
        logger.error(f"Template update failed: {e}", exc_info=True)
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Template update failed: {str(e)}",
        ) from e


@router.delete(
    "/{template_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_template(
    template_id: uuid.UUID,
    session: AsyncSession = Depends(get_db),
) -> Response:
    """Delete a template and, by cascade, its render jobs."""
    template = await _get_template_or_404(session, template_id)

    try:
        await session.delete(template)
        await session.commit()
        logger.info(f"Template deleted: {template_id}")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except Exception as e:
        logger.error(f"Template delete failed: {e}", exc_info=True)
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Template delete failed: {str(e)}",
        ) from e
