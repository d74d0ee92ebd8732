"""Template engine domain models.

Pydantic models specific to variable extraction and categorization.
These models live here to avoid circular imports with the API layer.
"""

import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field

from app.interfaces.variables import PropertyType


class TemplateElement(BaseModel):
    """A node in the rendering service's template composition tree.

    Unknown fields (x, y, font_size, ...) are kept so the model can
    round-trip whatever the service sends.
    """

    model_config = ConfigDict(extra="allow")

    name: str | None = None
    type: str | None = None
    text: Any = None
    source: Any = None
    fill_color: Any = None
    dynamic: bool | None = None
    properties: dict[str, Any] | None = None
    elements: list["TemplateElement"] | None = None


class Platform(BaseModel):
    """One output size of a template."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    width: int = 0
    height: int = 0
    aspect_ratio: str = "1:1"

    @classmethod
    def from_output(cls, output: dict[str, Any]) -> "Platform":
        """Build a platform from a template ``outputs[]`` entry."""
        width = int(output.get("width") or 0)
        height = int(output.get("height") or 0)
        return cls(
            id=output.get("id") or str(uuid.uuid4()),
            name=output.get("name") or f"{width}x{height}",
            width=width,
            height=height,
            aspect_ratio=f"{width}:{height}",
        )


class CategorizedVariable(BaseModel):
    """A single editable variable as shown in the editor."""

    key: str = Field(description="Variable key as stored, e.g. 'Heading.text'")
    element_name: str = Field(description="Element the variable belongs to")
    value: Any = Field(description="Current value (text, media URL or color)")
    property_type: PropertyType


class CategorizedVariables(BaseModel):
    """Variables split into the three editor sections."""

    text_variables: list[CategorizedVariable] = Field(default_factory=list)
    media_variables: list[CategorizedVariable] = Field(default_factory=list)
    color_variables: list[CategorizedVariable] = Field(default_factory=list)
    formatted_variables: dict[str, Any] = Field(
        default_factory=dict,
        description="Variables as the preview player expects them",
    )

    @computed_field
    @property
    def has_variables(self) -> bool:
        return bool(self.text_variables or self.media_variables or self.color_variables)

    def to_variables(self) -> dict[str, Any]:
        """Flatten the three sections back into a variable map."""
        return {
            variable.key: variable.value
            for section in (self.text_variables, self.media_variables, self.color_variables)
            for variable in section
        }
