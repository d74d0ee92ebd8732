"""Abstract base class for rendering service clients.

The Strategy Pattern keeps the import pipeline and render routes
independent of the concrete rendering SaaS.
"""

from abc import ABC, abstractmethod
from typing import Any


class BaseRenderClient(ABC):
    """Abstract base class for rendering service clients.

    Example:
        ```python
        class CreatomateClient(BaseRenderClient):
            async def get_template(self, template_id: str) -> dict[str, Any]:
                # Implementation here
                pass
        ```
    """

    @abstractmethod
    async def get_template(self, template_id: str) -> dict[str, Any]:
        """Fetch a template definition.

        Args:
            template_id: The rendering service template ID.

        Returns:
            The template JSON (name, description, preview_url, outputs, elements).

        Raises:
            ExternalFetchError: If the call fails or returns a non-success status.
        """
        ...

    @abstractmethod
    async def get_sample_render(self, template_id: str) -> dict[str, Any] | None:
        """Fetch the most recent render made from a template.

        Args:
            template_id: The rendering service template ID.

        Returns:
            The render JSON, or None if the template has never been rendered.

        Raises:
            ExternalFetchError: If the call fails or returns a non-success status.
        """
        ...

    @abstractmethod
    async def start_renders(self, renders: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Submit one or more render requests.

        Args:
            renders: Render request bodies, one per output.

        Returns:
            The created renders, each with at least an ``id`` and ``status``.

        Raises:
            ExternalFetchError: If the call fails or returns a non-success status.
        """
        ...

    @abstractmethod
    async def get_render(self, render_id: str) -> dict[str, Any]:
        """Fetch the current state of a render.

        Args:
            render_id: The rendering service render ID.

        Returns:
            The render JSON (status, progress, url).

        Raises:
            ExternalFetchError: If the call fails or returns a non-success status.
        """
        ...


class ExternalFetchError(Exception):
    """Exception raised when a rendering service call fails.

    Attributes:
        endpoint: The endpoint that was called.
        status_code: HTTP status returned, or None for transport errors.
    """

    def __init__(self, endpoint: str, message: str, status_code: int | None = None) -> None:
        self.endpoint = endpoint
        self.status_code = status_code
        self.message = message
        super().__init__(f"{endpoint} failed ({status_code or 'no response'}): {message}")

    @property
    def is_not_found(self) -> bool:
        """True when the service reported the resource as missing."""
        return self.status_code == 404
