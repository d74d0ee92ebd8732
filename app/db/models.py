"""Database models using SQLModel.

Defines the persisted data of the template customizer:
- Template: a rendering-service template imported by an administrator
- RenderJob: a user's render request across one or more platforms
"""

import datetime
import enum
import uuid
from typing import Any

from sqlalchemy import Column, DateTime, ForeignKey, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlmodel import Field, Relationship, SQLModel


class RenderStatus(str, enum.Enum):
    """Status of a render job.

    PENDING -> PROCESSING -> COMPLETED
                   |
                   v
                FAILED
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


# =============================================================================
# Shared Models (for API responses, not database tables)
# =============================================================================


class TemplateBase(SQLModel):
    """Base template fields."""

    name: str = Field(min_length=1, max_length=255)
    description: str = Field(default="", max_length=4096)
    preview_image_url: str = Field(default="", max_length=2048)
    creatomate_template_id: str = Field(max_length=64, index=True)
    category: str = Field(default="Imported", max_length=100, index=True)
    is_active: bool = Field(default=True)


class RenderJobBase(SQLModel):
    """Base render job fields."""

    name: str | None = Field(default=None, max_length=255)
    status: RenderStatus = Field(default=RenderStatus.PENDING)
    error_message: str | None = Field(default=None, max_length=2048)


# =============================================================================
# Database Models
# =============================================================================


class Template(TemplateBase, table=True):
    """Imported template with its normalized variables.

    ``variables`` is a flat map of ``Element.property`` keys to default
    values; ``platforms`` lists the output sizes the template supports.
    """

    __tablename__ = "templates"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(UUID(as_uuid=True), primary_key=True),
    )
    variables: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSONB, nullable=False, server_default=text("'{}'::jsonb")),
    )
    platforms: list[dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSONB, nullable=False, server_default=text("'[]'::jsonb")),
    )
    created_at: datetime.datetime = Field(
        default_factory=datetime.datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=text("NOW()")),
    )
    updated_at: datetime.datetime = Field(
        default_factory=datetime.datetime.utcnow,
        sa_column=Column(
            DateTime(timezone=True),
            server_default=text("NOW()"),
            onupdate=text("NOW()"),
        ),
    )

    # Relationships
    render_jobs: list["RenderJob"] = Relationship(back_populates="template")


class RenderJob(RenderJobBase, table=True):
    """Render job tracking the renders submitted for one customization.

    One render is created per selected platform; ``output_urls`` maps
    each finished render ID to its output URL.
    """

    __tablename__ = "render_jobs"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(UUID(as_uuid=True), primary_key=True),
    )
    template_id: uuid.UUID = Field(
        sa_column=Column(
            UUID(as_uuid=True),
            ForeignKey("templates.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    variables: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSONB, nullable=False, server_default=text("'{}'::jsonb")),
    )
    platforms: list[dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSONB, nullable=False, server_default=text("'[]'::jsonb")),
    )
    creatomate_render_ids: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSONB, nullable=False, server_default=text("'[]'::jsonb")),
    )
    render_statuses: dict[str, str] = Field(
        default_factory=dict,
        sa_column=Column(JSONB, nullable=False, server_default=text("'{}'::jsonb")),
    )
    output_urls: dict[str, str] = Field(
        default_factory=dict,
        sa_column=Column(JSONB, nullable=False, server_default=text("'{}'::jsonb")),
    )
    created_at: datetime.datetime = Field(
        default_factory=datetime.datetime.utcnow,
        sa_column=Column(DateTime(timezone=True), server_default=text("NOW()")),
    )
    updated_at: datetime.datetime = Field(
        default_factory=datetime.datetime.utcnow,
        sa_column=Column(
            DateTime(timezone=True),
            server_default=text("NOW()"),
            onupdate=text("NOW()"),
        ),
    )

    # Relationships
    template: Template = Relationship(back_populates="render_jobs")


# =============================================================================
# Response Models
# =============================================================================


class TemplateRead(TemplateBase):
    """Template response model."""

    id: uuid.UUID
    variables: dict[str, Any]
    platforms: list[dict[str, Any]]
    created_at: datetime.datetime
    updated_at: datetime.datetime


class TemplateListResponse(SQLModel):
    """Paginated template list."""

    templates: list[TemplateRead]
    total: int
    page: int = 1
    page_size: int = 20


class RenderJobRead(RenderJobBase):
    """Render job response model."""

    id: uuid.UUID
    template_id: uuid.UUID
    variables: dict[str, Any]
    platforms: list[dict[str, Any]]
    creatomate_render_ids: list[str]
    render_statuses: dict[str, str]
    output_urls: dict[str, str]
    created_at: datetime.datetime
    updated_at: datetime.datetime
