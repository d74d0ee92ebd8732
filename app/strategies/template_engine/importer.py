"""Template import orchestrator.

Turns a template ID and/or a pasted CURL command into a template record
with a canonical variable map. Variable sources, highest priority first:

1. modifications from the CURL command
2. variables extracted from the template's element tree
3. modifications of the most recent render made from the template
4. a modifications block embedded in the template description,
   used only when the three sources above yield nothing
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Template
from app.interfaces.render_client import BaseRenderClient, ExternalFetchError
from app.interfaces.variables import TemplateIdNotFoundError, TemplateImportError
from app.strategies.template_engine.curl_parser import CurlCommandParser
from app.strategies.template_engine.extractor import ElementVariableExtractor, template_elements
from app.strategies.template_engine.models import Platform
from app.strategies.template_engine.normalizer import VariableNormalizer, merge_sources

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Everything needed to persist an imported template.

    Attributes:
        creatomate_template_id: Template ID on the rendering service.
        name: Template name.
        description: Template description (or a generated one).
        preview_image_url: Preview image URL, empty if the service has none.
        variables: Canonical variable map.
        platforms: Output sizes derived from the template's outputs.
        source_counts: Number of variables each source contributed before merging.
    """

    creatomate_template_id: str
    name: str
    description: str
    preview_image_url: str
    variables: dict[str, Any]
    platforms: list[Platform] = field(default_factory=list)
    source_counts: dict[str, int] = field(default_factory=dict)


def sample_render_variables(render: dict[str, Any] | None) -> dict[str, Any]:
    """Keep the string and number modifications of a prior render."""
    if not render:
        return {}
    modifications = render.get("modifications")
    if not isinstance(modifications, dict):
        return {}
    return {
        key: value
        for key, value in modifications.items()
        if isinstance(value, (str, int, float)) and not isinstance(value, bool)
    }


class TemplateImporter:
    """Runs the template import pipeline.

    Only fetching the template itself is mandatory; every other stage
    degrades to "no variables from this source" on failure.
    """

    def __init__(
        self,
        render_client: BaseRenderClient,
        curl_parser: CurlCommandParser | None = None,
        extractor: ElementVariableExtractor | None = None,
        normalizer: VariableNormalizer | None = None,
        default_category: str = "Imported",
    ) -> None:
        self._client = render_client
        self._curl_parser = curl_parser or CurlCommandParser()
        self._extractor = extractor or ElementVariableExtractor()
        self._normalizer = normalizer or VariableNormalizer()
        self._default_category = default_category

    async def build(
        self,
        template_id: str | None = None,
        curl_command: str | None = None,
    ) -> ImportResult:
        """Fetch a template and compute its canonical variables.

        Args:
            template_id: Rendering service template ID. Takes precedence over
                an ID parsed from ``curl_command``.
            curl_command: Optional CURL command pasted by the administrator.

        Returns:
            ImportResult ready to be persisted.

        Raises:
            TemplateIdNotFoundError: If no template ID was given or parsed.
            TemplateImportError: If the template could not be fetched.
        """
        # ParseCurl
        curl_variables: dict[str, Any] = {}
        if curl_command:
            parsed = self._curl_parser.parse(curl_command)
            template_id = template_id or parsed.template_id
            curl_variables = parsed.modifications or {}

        if not template_id:
            raise TemplateIdNotFoundError("No template ID provided or found in the CURL command")

        logger.info(f"Importing template {template_id}")

        # FetchTemplate
        try:
            template = await self._client.get_template(template_id)
        except ExternalFetchError as e:
            logger.error(f"Could not fetch template {template_id}: {e}")
            raise TemplateImportError(
                stage="fetch_template",
                template_id=template_id,
                message=e.message,
                status_code=e.status_code,
            ) from e

        # ExtractElements
        element_variables = self._extractor.extract(template_elements(template))

        # FetchSampleRender
        sample_variables: dict[str, Any] = {}
        try:
            sample_variables = sample_render_variables(
                await self._client.get_sample_render(template_id)
            )
        except ExternalFetchError as e:
            logger.warning(f"Skipping sample render for {template_id}: {e}")

        # FetchFromDescription
        description = template.get("description") or ""
        description_variables: dict[str, Any] = {}
        if not (curl_variables or element_variables or sample_variables):
            description_variables = self._curl_parser.extract_modifications(description) or {}

        # Merge
        merged = merge_sources(curl_variables, element_variables, sample_variables)
        if not merged:
            merged = description_variables
        variables = self._normalizer.normalize(merged)

        platforms = [
            Platform.from_output(output)
            for output in template.get("outputs") or []
            if isinstance(output, dict)
        ]
        if not description:
            description = f"Template for {', '.join(p.name for p in platforms) or 'various sizes'}"

        source_counts = {
            "curl": len(curl_variables),
            "elements": len(element_variables),
            "sample_render": len(sample_variables),
            "description": len(description_variables),
        }
        logger.info(
            f"Template {template_id} resolved {len(variables)} variables from sources {source_counts}"
        )

        return ImportResult(
            creatomate_template_id=str(template.get("id") or template_id),
            name=template.get("name") or f"Template {template_id}",
            description=description,
            preview_image_url=template.get("preview_url") or "",
            variables=variables,
            platforms=platforms,
            source_counts=source_counts,
        )

    async def import_template(
        self,
        session: AsyncSession,
        template_id: str | None = None,
        curl_command: str | None = None,
        category: str | None = None,
    ) -> Template:
        """Run the pipeline and persist the resulting template.

        Args:
            session: Database session used for the insert.
            template_id: Rendering service template ID.
            curl_command: Optional CURL command pasted by the administrator.
            category: Category for the new template; defaults to the configured one.

        Returns:
            The persisted Template.

        Raises:
            TemplateIdNotFoundError: If no template ID was given or parsed.
            TemplateImportError: If the template could not be fetched.
        """
        result = await self.build(template_id=template_id, curl_command=curl_command)

        template = Template(
            name=result.name,
            description=result.description,
            preview_image_url=result.preview_image_url,
            creatomate_template_id=result.creatomate_template_id,
            variables=result.variables,
            platforms=[platform.model_dump() for platform in result.platforms],
            category=category or self._default_category,
            is_active=True,
        )
        session.add(template)
        await session.commit()
        await session.refresh(template)

        logger.info(f"Template saved: {template.id} ({result.creatomate_template_id})")
        return template
