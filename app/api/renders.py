"""Render job API routes.

Submits customized templates to the rendering service, reports job
progress and receives the service's completion webhooks.
"""

import logging
import uuid
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.api.deps import get_db, get_render_client
from app.api.schemas import RenderJobCreate, RenderWebhookPayload
from app.core.config import Settings, get_settings
from app.db.models import RenderJob, RenderJobRead, RenderStatus, Template
from app.interfaces.render_client import BaseRenderClient, ExternalFetchError
from app.strategies.render_clients.metadata import (
    aggregate_job_status,
    encode_render_metadata,
    map_render_status,
    parse_render_metadata,
)
from app.strategies.template_engine import cleanup_variables

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/renders", tags=["renders"])


# =============================================================================
# Helper Functions
# =============================================================================


def _select_platforms(template: Template, platform_ids: list[str] | None) -> list[dict[str, Any]]:
    if not platform_ids:
        return list(template.platforms)
    wanted = set(platform_ids)
    return [platform for platform in template.platforms if platform.get("id") in wanted]


def _apply_render_update(job: RenderJob, render_id: str, status_value: str, url: str | None) -> None:
    """Record one render's status on its job and recompute the job status."""
    statuses = dict(job.render_statuses)
    statuses[render_id] = status_value
    job.render_statuses = statuses

    if status_value == RenderStatus.COMPLETED.value and url:
        output_urls = dict(job.output_urls)
        output_urls[render_id] = url
        job.output_urls = output_urls

    render_ids = list(job.creatomate_render_ids)
    if render_id not in render_ids:
        render_ids.append(render_id)
        job.creatomate_render_ids = render_ids

    job.status = RenderStatus(
        aggregate_job_status(job.render_statuses.get(rid, "pending") for rid in job.creatomate_render_ids)
    )
    job.updated_at = datetime.utcnow()


async def _get_job_or_404(session: AsyncSession, job_id: uuid.UUID) -> RenderJob:
    job = await session.get(RenderJob, job_id)
    if job is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Render job not found",
        )
    return job


# =============================================================================
# Endpoints
# =============================================================================


@router.post(
    "",
    response_model=RenderJobRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_render_job(
    request: RenderJobCreate,
    session: AsyncSession = Depends(get_db),
    client: BaseRenderClient = Depends(get_render_client),
    settings: Settings = Depends(get_settings),
) -> RenderJob:
    """Render a template for each selected platform.

    Variables are cleaned before submission: None values are dropped
    and keys are reduced to their ``Element.property`` form.
    """
    template = await session.get(Template, request.template_id)
    if template is None or not template.is_active:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Template not found",
        )

    platforms = _select_platforms(template, request.platform_ids)
    if not platforms:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No matching platforms to render",
        )

    variables = cleanup_variables(
        request.variables if request.variables is not None else template.variables
    )
    job = RenderJob(
        template_id=template.id,
        name=request.name or template.name,
        variables=variables,
        platforms=platforms,
        status=RenderStatus.PENDING,
    )

    renders = []
    for platform in platforms:
        render: dict[str, Any] = {
            "template_id": template.creatomate_template_id,
            "output_format": settings.default_output_format,
            "width": platform.get("width"),
            "height": platform.get("height"),
            "modifications": variables,
            "metadata": encode_render_metadata({"job_id": job.id, "platform_id": platform.get("id")}),
        }
        if settings.creatomate_webhook_url:
            render["webhook_url"] = settings.creatomate_webhook_url
        renders.append(render)

    try:
        created = await client.start_renders(renders)
    except ExternalFetchError as e:
        logger.error(f"Render submission failed for template {template.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Rendering service rejected the request: {e.message}",
        ) from e

    for render in created:
        if render.get("id"):
            _apply_render_update(job, str(render["id"]), map_render_status(render.get("status")), render.get("url"))

    try:
        session.add(job)
        await session.commit()
        await session.refresh(job)
    except Exception as e:
        logger.error(f"Failed to save render job: {e}", exc_info=True)
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save render job: {str(e)}",
        ) from e

    logger.info(f"Render job {job.id} submitted {len(job.creatomate_render_ids)} render(s)")
    return job


@router.get(
    "/{job_id}",
    response_model=RenderJobRead,
    status_code=status.HTTP_200_OK,
)
async def get_render_job(
    job_id: uuid.UUID,
    refresh: bool = Query(default=False, description="Poll the rendering service for unfinished renders"),
    session: AsyncSession = Depends(get_db),
    client: BaseRenderClient = Depends(get_render_client),
) -> RenderJob:
    """Return a render job, optionally refreshing unfinished renders first."""
    job = await _get_job_or_404(session, job_id)

    if not refresh or job.status in (RenderStatus.COMPLETED, RenderStatus.FAILED):
        return job

    for render_id in job.creatomate_render_ids:
        if job.render_statuses.get(render_id) in ("completed", "failed"):
            continue
        try:
            render = await client.get_render(render_id)
        except ExternalFetchError as e:
            logger.warning(f"Could not refresh render {render_id}: {e}")
            continue
        _apply_render_update(job, render_id, map_render_status(render.get("status")), render.get("url"))

    session.add(job)
    await session.commit()
    await session.refresh(job)
    return job


@router.post(
    "/webhook",
    status_code=status.HTTP_200_OK,
)
async def render_webhook(
    payload: RenderWebhookPayload,
    session: AsyncSession = Depends(get_db),
) -> dict[str, Any]:
    """Receive a render status callback from the rendering service.

    The job is looked up by render ID first, then by the ``job_id``
    carried in the render metadata.
    """
    mapped_status = map_render_status(payload.status)
    logger.info(f"Webhook for render {payload.id}: '{payload.status}' -> '{mapped_status}'")

    result = await session.execute(
        select(RenderJob).where(RenderJob.creatomate_render_ids.contains([payload.id]))
    )
    job = result.scalars().first()

    if job is None:
        job_id = parse_render_metadata(payload.metadata).get("job_id")
        try:
            job = await session.get(RenderJob, uuid.UUID(job_id)) if job_id else None
        except ValueError:
            logger.warning(f"Webhook metadata carries an invalid job_id: {job_id!r}")
            job = None

    if job is None:
        logger.error(f"No render job found for render {payload.id} (metadata={payload.metadata!r})")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Render job not found",
        )

    try:
        _apply_render_update(job, payload.id, mapped_status, payload.url)
        if mapped_status == RenderStatus.FAILED.value and payload.error_message:
            job.error_message = payload.error_message[:2048]

        session.add(job)
        await session.commit()

    except Exception as e:
        logger.error(f"Failed to update render job {job.id}: {e}", exc_info=True)
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update render job",
        ) from e

    return {"success": True, "job_id": str(job.id), "status": job.status.value}
