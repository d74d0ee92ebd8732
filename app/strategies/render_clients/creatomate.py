"""Creatomate render client.

Talks to the Creatomate REST API over httpx to fetch templates and
sample renders, submit renders and poll their status.
"""

import logging
from typing import Any

import httpx

from app.interfaces.render_client import BaseRenderClient, ExternalFetchError

logger = logging.getLogger(__name__)


class CreatomateClient(BaseRenderClient):
    """Render client backed by the Creatomate v1 API.

    Attributes:
        base_url: API root, e.g. ``https://api.creatomate.com/v1``.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.creatomate.com/v1",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Creatomate API key, sent as a bearer token.
            base_url: API root URL.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        if not api_key:
            logger.warning("CreatomateClient created without an API key; calls will be rejected")

        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def timeout(self) -> float:
        return self._timeout

    async def get_template(self, template_id: str) -> dict[str, Any]:
        data = await self._request("GET", f"templates/{template_id}")
        if not isinstance(data, dict):
            raise ExternalFetchError(f"templates/{template_id}", "Unexpected template payload")
        return data

    async def get_sample_render(self, template_id: str) -> dict[str, Any] | None:
        data = await self._request(
            "GET", "renders", params={"template_id": template_id, "limit": 1}
        )
        renders = _render_list(data)
        return renders[0] if renders else None

    async def start_renders(self, renders: list[dict[str, Any]]) -> list[dict[str, Any]]:
        data = await self._request("POST", "renders", json={"renders": renders})
        created = _render_list(data)
        logger.info(f"Creatomate accepted {len(created)} render(s)")
        return created

    async def get_render(self, render_id: str) -> dict[str, Any]:
        data = await self._request("GET", f"renders/{render_id}")
        if not isinstance(data, dict):
            raise ExternalFetchError(f"renders/{render_id}", "Unexpected render payload")
        return data

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Raises:
            ExternalFetchError: On transport errors, non-2xx responses or
                bodies that are not JSON.
        """
        url = f"{self._base_url}/{endpoint}"
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        logger.debug(f"Creatomate {method} {endpoint}")

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.request(method, url, headers=headers, params=params, json=json)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            message = _error_message(e.response)
            logger.error(f"Creatomate API error on {method} {endpoint}: {e.response.status_code} {message}")
            raise ExternalFetchError(endpoint, message, status_code=e.response.status_code) from e
        except httpx.RequestError as e:
            logger.error(f"Creatomate request failed on {method} {endpoint}: {e}")
            raise ExternalFetchError(endpoint, str(e) or type(e).__name__) from e
        except ValueError as e:
            logger.error(f"Creatomate returned invalid JSON on {method} {endpoint}: {e}")
            raise ExternalFetchError(endpoint, "Response body is not valid JSON") from e


def _render_list(data: Any) -> list[dict[str, Any]]:
    """Accept both a bare list of renders and ``{"renders": [...]}``."""
    if isinstance(data, dict):
        data = data.get("renders")
    if not isinstance(data, list):
        return []
    return [render for render in data if isinstance(render, dict)]


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or response.text[:200]

    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
        if body.get("message"):
            return str(body["message"])
    return response.reason_phrase or "Unknown error from Creatomate API"
