"""Component Factory for strategy instantiation.

The Factory Pattern lets the API build the variable pipeline and the
render client from configuration, and lets tests swap either out.
"""

import logging

from app.core.config import Settings, get_settings
from app.interfaces.render_client import BaseRenderClient
from app.strategies.render_clients import CreatomateClient
from app.strategies.template_engine import (
    CurlCommandParser,
    ElementVariableExtractor,
    JsonRepairer,
    TemplateImporter,
    VariableCategorizer,
    VariableNormalizer,
)

logger = logging.getLogger(__name__)


class ComponentFactory:
    """Factory for creating component instances based on configuration.

    Example:
        ```python
        factory = ComponentFactory(get_settings())

        parser = factory.get_curl_parser()
        importer = factory.get_importer()
        sections = factory.get_categorizer().categorize(template.variables)
        ```
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the factory with optional settings.

        Args:
            settings: Application settings. If None, uses global settings.
        """
        self._settings = settings or get_settings()
        self._json_repairer_cache: JsonRepairer | None = None
        self._curl_parser_cache: CurlCommandParser | None = None
        self._extractor_cache: ElementVariableExtractor | None = None
        self._normalizer_cache: VariableNormalizer | None = None
        self._categorizer_cache: VariableCategorizer | None = None
        self._render_client_cache: BaseRenderClient | None = None
        self._importer_cache: TemplateImporter | None = None

    def get_json_repairer(self) -> JsonRepairer:
        if self._json_repairer_cache is None:
            self._json_repairer_cache = JsonRepairer()
        return self._json_repairer_cache

    def get_curl_parser(self) -> CurlCommandParser:
        if self._curl_parser_cache is None:
            self._curl_parser_cache = CurlCommandParser(repairer=self.get_json_repairer())
        return self._curl_parser_cache

    def get_extractor(self) -> ElementVariableExtractor:
        if self._extractor_cache is None:
            self._extractor_cache = ElementVariableExtractor()
        return self._extractor_cache

    def get_normalizer(self) -> VariableNormalizer:
        if self._normalizer_cache is None:
            self._normalizer_cache = VariableNormalizer()
        return self._normalizer_cache

    def get_categorizer(self) -> VariableCategorizer:
        if self._categorizer_cache is None:
            self._categorizer_cache = VariableCategorizer()
        return self._categorizer_cache

    def get_render_client(self, render_client_type: str | None = None) -> BaseRenderClient:
        """Get a render client instance based on the specified type.

        Args:
            render_client_type: The client type to instantiate. If None, uses settings.

        Returns:
            A BaseRenderClient implementation instance.

        Raises:
            ValueError: If the client type is unknown.
        """
        if self._render_client_cache is None or render_client_type is not None:
            render_client_type = render_client_type or self._settings.render_client_type

            logger.info(f"Instantiating render client: {render_client_type}")

            match render_client_type:
                case "creatomate":
                    self._render_client_cache = CreatomateClient(
                        api_key=self._settings.creatomate_api_key,
                        base_url=self._settings.creatomate_base_url,
                        timeout=self._settings.creatomate_timeout,
                    )
                case _:
                    raise ValueError(
                        f"Unknown render client type: {render_client_type}. "
                        f"Valid options: 'creatomate'"
                    )

        return self._render_client_cache

    def get_importer(self) -> TemplateImporter:
        """Get the template import pipeline wired to the configured render client."""
        if self._importer_cache is None:
            logger.info("Instantiating template importer")

            self._importer_cache = TemplateImporter(
                render_client=self.get_render_client(),
                curl_parser=self.get_curl_parser(),
                extractor=self.get_extractor(),
                normalizer=self.get_normalizer(),
                default_category=self._settings.default_template_category,
            )

        return self._importer_cache

    def clear_cache(self) -> None:
        """Clear all cached component instances.

        This forces new instances to be created on next access.
        Useful for testing or when settings change.
        """
        self._json_repairer_cache = None
        self._curl_parser_cache = None
        self._extractor_cache = None
        self._normalizer_cache = None
        self._categorizer_cache = None
        self._render_client_cache = None
        self._importer_cache = None
        logger.debug("Component factory cache cleared")


# Global factory instance
_factory: ComponentFactory | None = None


def get_factory() -> ComponentFactory:
    """Get or create the global ComponentFactory instance.

    Returns:
        The singleton ComponentFactory instance.
    """
    global _factory
    if _factory is None:
        _factory = ComponentFactory()
    return _factory
