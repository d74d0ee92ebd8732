"""Unit tests for the template import orchestrator."""

import asyncio
from typing import Any

import pytest

from app.interfaces.render_client import BaseRenderClient, ExternalFetchError
from app.interfaces.variables import TemplateIdNotFoundError, TemplateImportError
from app.strategies.template_engine.importer import TemplateImporter, sample_render_variables

TEMPLATE_ID = "36481fd5-8dfe-4359-9544-76d8857acf3d"


class FakeRenderClient(BaseRenderClient):
    """In-memory render client returning canned payloads."""

    def __init__(
        self,
        template: dict[str, Any] | None = None,
        sample_render: dict[str, Any] | None = None,
        template_error: ExternalFetchError | None = None,
        sample_error: ExternalFetchError | None = None,
    ):
        self.template = template or {"id": TEMPLATE_ID, "name": "Promo"}
        self.sample_render = sample_render
        self.template_error = template_error
        self.sample_error = sample_error
        self.fetched: list[str] = []

    async def get_template(self, template_id: str) -> dict[str, Any]:
        self.fetched.append(template_id)
        if self.template_error:
            raise self.template_error
        return self.template

    async def get_sample_render(self, template_id: str) -> dict[str, Any] | None:
        if self.sample_error:
            raise self.sample_error
        return self.sample_render

    async def start_renders(self, renders: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return []

    async def get_render(self, render_id: str) -> dict[str, Any]:
        return {}


class FakeSession:
    """Records what the importer persists."""

    def __init__(self):
        self.added = []
        self.committed = False
        self.refreshed = []

    def add(self, obj):
        self.added.append(obj)

    async def commit(self):
        self.committed = True

    async def refresh(self, obj):
        self.refreshed.append(obj)


def build(client: FakeRenderClient, **kwargs):
    return asyncio.run(TemplateImporter(client).build(**kwargs))


# =============================================================================
# sample_render_variables Tests
# =============================================================================


class TestSampleRenderVariables:
    def test_keeps_strings_and_numbers(self):
        render = {"modifications": {"a.text": "x", "b.text": 3, "c.text": 1.5, "d.text": True, "e": {"x": 1}}}

        assert sample_render_variables(render) == {"a.text": "x", "b.text": 3, "c.text": 1.5}

    def test_missing(self):
        assert sample_render_variables(None) == {}
        assert sample_render_variables({"modifications": "nope"}) == {}


# =============================================================================
# TemplateImporter Tests
# =============================================================================


class TestTemplateImporter:
    """Test suite for TemplateImporter."""

    @pytest.fixture
    def template(self):
        """A template as returned by the rendering service."""
        return {
            "id": TEMPLATE_ID,
            "name": "Promo",
            "description": "Summer promo",
            "preview_url": "https://x/preview.jpg",
            "outputs": [
                {"id": "story", "name": "Story", "width": 1080, "height": 1920},
                {"width": 1080, "height": 1080},
            ],
            "source": {
                "elements": [
                    {"name": "Heading", "type": "text", "text": "From element"},
                    {"name": "Panel", "type": "shape", "fill_color": "#000"},
                ]
            },
        }

    def test_build_from_template_id(self, template):
        result = build(FakeRenderClient(template=template), template_id=TEMPLATE_ID)

        assert result.creatomate_template_id == TEMPLATE_ID
        assert result.name == "Promo"
        assert result.description == "Summer promo"
        assert result.preview_image_url == "https://x/preview.jpg"
        assert result.variables == {"Heading.text": "From element", "Panel.fill": "#000"}

    def test_platforms_from_outputs(self, template):
        result = build(FakeRenderClient(template=template), template_id=TEMPLATE_ID)

        story, square = result.platforms
        assert (story.id, story.name, story.aspect_ratio) == ("story", "Story", "1080:1920")
        assert square.name == "1080x1080"
        assert square.aspect_ratio == "1080:1080"
        assert square.id

    def test_source_priority(self, template):
        client = FakeRenderClient(
            template=template,
            sample_render={"modifications": {"Heading.text": "From render", "Logo.source": "https://x/l.png"}},
        )
        curl = f'templates/{TEMPLATE_ID} "modifications": {{"Heading.text": "From curl"}}'

        result = build(client, curl_command=curl)

        assert client.fetched == [TEMPLATE_ID]
        assert result.variables == {
            "Heading.text": "From curl",
            "Panel.fill": "#000",
            "Logo.source": "https://x/l.png",
        }
        assert result.source_counts == {"curl": 1, "elements": 2, "sample_render": 2, "description": 0}

    def test_explicit_template_id_wins_over_curl(self, template):
        client = FakeRenderClient(template=template)
        other = "00000000-0000-0000-0000-000000000000"

        build(client, template_id=other, curl_command=f"templates/{TEMPLATE_ID}")

        assert client.fetched == [other]

    def test_variables_are_normalized(self):
        client = FakeRenderClient(
            sample_render={"modifications": {"Heading.text.text": "deep", "Heading.text": "shallow"}}
        )

        result = build(client, template_id=TEMPLATE_ID)

        assert result.variables == {"Heading.text": "shallow"}

    def test_sample_render_failure_is_ignored(self, template):
        client = FakeRenderClient(template=template, sample_error=ExternalFetchError("renders", "boom", 500))

        result = build(client, template_id=TEMPLATE_ID)

        assert result.variables == {"Heading.text": "From element", "Panel.fill": "#000"}

    def test_description_fallback(self):
        client = FakeRenderClient(
            template={"id": TEMPLATE_ID, "description": "modifications: {Heading.text: Sale}"}
        )

        result = build(client, template_id=TEMPLATE_ID)

        assert result.variables == {"Heading.text": "Sale"}
        assert result.source_counts["description"] == 1

    def test_description_ignored_when_other_sources_exist(self, template):
        template["description"] = 'modifications: {"Other.text": "x"}'

        result = build(FakeRenderClient(template=template), template_id=TEMPLATE_ID)

        assert "Other.text" not in result.variables
        assert result.source_counts["description"] == 0

    def test_defaults_for_missing_fields(self):
        client = FakeRenderClient(template={"outputs": [{"name": "Feed", "width": 1080, "height": 1350}]})

        result = build(client, template_id=TEMPLATE_ID)

        assert result.creatomate_template_id == TEMPLATE_ID
        assert result.name == f"Template {TEMPLATE_ID}"
        assert result.description == "Template for Feed"
        assert result.preview_image_url == ""
        assert result.variables == {}

    def test_description_without_outputs(self):
        result = build(FakeRenderClient(template={}), template_id=TEMPLATE_ID)

        assert result.description == "Template for various sizes"

    def test_no_template_id(self):
        with pytest.raises(TemplateIdNotFoundError):
            build(FakeRenderClient(), curl_command='"modifications": {"Heading.text": "Hi"}')

        with pytest.raises(TemplateIdNotFoundError):
            build(FakeRenderClient())

    def test_fetch_failure(self):
        client = FakeRenderClient(template_error=ExternalFetchError(f"templates/{TEMPLATE_ID}", "Not found", 404))

        with pytest.raises(TemplateImportError) as exc_info:
            build(client, template_id=TEMPLATE_ID)

        error = exc_info.value
        assert error.stage == "fetch_template"
        assert error.template_id == TEMPLATE_ID
        assert error.status_code == 404

    def test_import_template_persists(self, template):
        session = FakeSession()
        importer = TemplateImporter(FakeRenderClient(template=template), default_category="Imported")

        saved = asyncio.run(importer.import_template(session, template_id=TEMPLATE_ID, category="Promos"))

        assert session.added == [saved]
        assert session.committed
        assert session.refreshed == [saved]
        assert saved.category == "Promos"
        assert saved.is_active is True
        assert saved.creatomate_template_id == TEMPLATE_ID
        assert saved.variables == {"Heading.text": "From element", "Panel.fill": "#000"}
        assert [platform["name"] for platform in saved.platforms] == ["Story", "1080x1080"]

    def test_import_template_default_category(self, template):
        importer = TemplateImporter(FakeRenderClient(template=template), default_category="Imported")

        saved = asyncio.run(importer.import_template(FakeSession(), template_id=TEMPLATE_ID))

        assert saved.category == "Imported"

    def test_deep_curl_keys_are_canonical(self, template):
        curl = f'templates/{TEMPLATE_ID} "modifications": {{"Logo.source.source": "https://x/l.png"}}'

        result = build(FakeRenderClient(template=template), curl_command=curl)

        assert result.variables["Logo.source"] == "https://x/l.png"
        assert "Logo.source.source" not in result.variables
