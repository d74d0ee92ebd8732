"""API request and response schemas.

Pydantic v2 models for API serialization/deserialization.
"""

import uuid
from typing import Any

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

# Re-export template engine models used in responses
from app.strategies.template_engine import CategorizedVariables


# =============================================================================
# Error Schemas
# =============================================================================


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str = Field(description="Error message")
    error_code: str | None = Field(default=None, description="Application-specific error code")
    extra: dict[str, Any] | None = Field(default=None, description="Additional error context")


# =============================================================================
# Template Schemas
# =============================================================================


class ParseCurlRequest(BaseModel):
    """Request to parse a pasted CURL command."""

    curl_command: str = Field(min_length=1, description="CURL command copied from the rendering service")


class ParseCurlResponse(BaseModel):
    """What could be extracted from a CURL command."""

    template_id: str | None = None
    modifications: dict[str, Any] | None = None

    @computed_field
    @property
    def template_id_found(self) -> bool:
        return self.template_id is not None

    @computed_field
    @property
    def modifications_found(self) -> bool:
        return self.modifications is not None


class TemplateImportRequest(BaseModel):
    """Request to import a template from the rendering service."""

    template_id: str | None = Field(default=None, description="Rendering service template ID")
    curl_command: str | None = Field(default=None, description="CURL command to parse for ID and modifications")
    category: str | None = Field(default=None, max_length=100, description="Category for the imported template")

    @model_validator(mode="after")
    def require_source(self) -> "TemplateImportRequest":
        """Either a template ID or a CURL command must be supplied."""
        if not (self.template_id or self.curl_command):
            raise ValueError("Provide template_id or curl_command")
        return self


class TemplateUpdate(BaseModel):
    """Administrator edit of an imported template."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=4096)
    preview_image_url: str | None = Field(default=None, max_length=2048)
    category: str | None = Field(default=None, max_length=100)
    is_active: bool | None = None
    variables: dict[str, Any] | None = Field(
        default=None,
        description="Replacement variable map; keys use 'Element.property' form",
    )

    @field_validator("variables")
    @classmethod
    def validate_variable_keys(cls, v: dict[str, Any] | None) -> dict[str, Any] | None:
        """Variable keys must name an element property, e.g. 'Heading.text'."""
        if v is None:
            return v
        invalid = [key for key in v if "." not in key or not key.split(".")[0]]
        if invalid:
            raise ValueError(
                f"Invalid variable keys {invalid}: use 'Element.property' (e.g. 'Heading.text')"
            )
        return v


class TemplateVariablesResponse(BaseModel):
    """Editor sections for a template."""

    template_id: uuid.UUID
    variables: CategorizedVariables


# =============================================================================
# Render Schemas
# =============================================================================


class RenderJobCreate(BaseModel):
    """Request to render a customized template."""

    template_id: uuid.UUID
    name: str | None = Field(default=None, max_length=255)
    variables: dict[str, Any] | None = Field(
        default=None,
        description="Customized variables; defaults to the template's own variables",
    )
    platform_ids: list[str] | None = Field(
        default=None,
        description="Platforms to render; defaults to every platform of the template",
    )


class RenderWebhookPayload(BaseModel):
    """Render callback sent by the rendering service."""

    id: str = Field(min_length=1)
    status: str | None = None
    url: str | None = None
    error_message: str | None = None
    metadata: str | None = None

    model_config = {"extra": "allow"}
