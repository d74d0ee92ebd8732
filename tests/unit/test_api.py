"""Unit tests for the HTTP API.

Routes run against in-memory fakes: the database session, the importer
and the render client are swapped in through dependency overrides.
"""

import uuid
from typing import Any

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_db, get_importer, get_render_client
from app.core.config import Settings, get_settings
from app.db.models import RenderJob, RenderStatus, Template
from app.interfaces.render_client import BaseRenderClient, ExternalFetchError
from app.interfaces.variables import TemplateIdNotFoundError, TemplateImportError
from app.main import create_app

TEMPLATE_ID = "36481fd5-8dfe-4359-9544-76d8857acf3d"


# =============================================================================
# Fakes
# =============================================================================


class FakeResult:
    def __init__(self, items: list[Any]):
        self._items = items

    def scalars(self):
        return self

    def first(self):
        return self._items[0] if self._items else None


class FakeSession:
    """Async session stand-in keyed by (model, primary key)."""

    def __init__(self, objects: list[Any] | None = None, execute_results: list[Any] | None = None):
        self.objects = {(type(obj), obj.id): obj for obj in objects or []}
        self.execute_results = execute_results or []
        self.added: list[Any] = []
        self.deleted: list[Any] = []
        self.commits = 0
        self.rollbacks = 0

    async def get(self, model, key):
        return self.objects.get((model, key))

    async def execute(self, statement):
        return FakeResult(self.execute_results)

    def add(self, obj):
        self.added.append(obj)

    async def delete(self, obj):
        self.deleted.append(obj)

    async def commit(self):
        self.commits += 1

    async def refresh(self, obj):
        pass

    async def rollback(self):
        self.rollbacks += 1


class FakeImporter:
    def __init__(self, result: Template | None = None, error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def import_template(self, session, template_id=None, curl_command=None, category=None):
        self.calls.append({"template_id": template_id, "curl_command": curl_command, "category": category})
        if self.error:
            raise self.error
        return self.result


class FakeRenderClient(BaseRenderClient):
    def __init__(self, error: ExternalFetchError | None = None):
        self.error = error
        self.submitted: list[dict[str, Any]] = []

    async def get_template(self, template_id):
        return {}

    async def get_sample_render(self, template_id):
        return None

    async def start_renders(self, renders):
        if self.error:
            raise self.error
        self.submitted.extend(renders)
        return [{"id": f"render-{i}", "status": "planned"} for i, _ in enumerate(renders)]

    async def get_render(self, render_id):
        return {"id": render_id, "status": "succeeded", "url": f"https://x/{render_id}.mp4"}


def make_template(**overrides) -> Template:
    values = {
        "name": "Promo",
        "creatomate_template_id": TEMPLATE_ID,
        "variables": {
            "Heading.text": "Hello",
            "Logo.source": "https://x/l.png",
            "Panel.fill": "#ff0000",
        },
        "platforms": [
            {"id": "story", "name": "Story", "width": 1080, "height": 1920, "aspect_ratio": "1080:1920"},
            {"id": "square", "name": "Square", "width": 1080, "height": 1080, "aspect_ratio": "1080:1080"},
        ],
    }
    values.update(overrides)
    return Template(**values)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings():
    return Settings(creatomate_api_key="test-key", creatomate_webhook_url="https://hooks.test/renders")


@pytest.fixture
def app(settings):
    application = create_app(settings)
    application.dependency_overrides[get_settings] = lambda: settings
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


def use_session(app, session: FakeSession) -> None:
    async def override():
        yield session

    app.dependency_overrides[get_db] = override


# =============================================================================
# Health and CURL Parsing
# =============================================================================


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestParseCurl:
    def test_parses_command(self, client):
        command = (
            f"curl -X POST https://api.creatomate.com/v1/renders "
            f"-d '{{\"template_id\": \"{TEMPLATE_ID}\", \"modifications\": {{\"Heading.text\": \"Hi\"}}}}'"
        )

        response = client.post("/templates/parse-curl", json={"curl_command": command})

        assert response.status_code == 200
        assert response.json() == {
            "template_id": TEMPLATE_ID,
            "modifications": {"Heading.text": "Hi"},
            "template_id_found": True,
            "modifications_found": True,
        }

    def test_nothing_found_is_not_an_error(self, client):
        response = client.post("/templates/parse-curl", json={"curl_command": "curl https://example.com"})

        assert response.status_code == 200
        assert response.json()["template_id_found"] is False
        assert response.json()["modifications_found"] is False

    def test_empty_command_rejected(self, client):
        response = client.post("/templates/parse-curl", json={"curl_command": ""})

        assert response.status_code == 422
        assert response.json()["detail"] == "Validation error"


# =============================================================================
# Template Import
# =============================================================================


class TestImportTemplate:
    @pytest.fixture(autouse=True)
    def session(self, app):
        session = FakeSession()
        use_session(app, session)
        return session

    def use_importer(self, app, importer: FakeImporter) -> FakeImporter:
        app.dependency_overrides[get_importer] = lambda: importer
        return importer

    def test_import(self, app, client):
        importer = self.use_importer(app, FakeImporter(result=make_template(category="Promos")))

        response = client.post("/templates/import", json={"template_id": TEMPLATE_ID, "category": "Promos"})

        assert response.status_code == 201
        body = response.json()
        assert body["creatomate_template_id"] == TEMPLATE_ID
        assert body["category"] == "Promos"
        assert importer.calls == [{"template_id": TEMPLATE_ID, "curl_command": None, "category": "Promos"}]

    def test_requires_id_or_command(self, client):
        response = client.post("/templates/import", json={"category": "Promos"})

        assert response.status_code == 422

    def test_missing_template_id(self, app, client):
        self.use_importer(app, FakeImporter(error=TemplateIdNotFoundError("No template ID")))

        response = client.post("/templates/import", json={"curl_command": "curl https://example.com"})

        assert response.status_code == 400

    def test_unknown_template(self, app, client):
        error = TemplateImportError("fetch_template", TEMPLATE_ID, "Not found", status_code=404)
        self.use_importer(app, FakeImporter(error=error))

        response = client.post("/templates/import", json={"template_id": TEMPLATE_ID})

        assert response.status_code == 404

    def test_upstream_failure(self, app, client):
        error = TemplateImportError("fetch_template", TEMPLATE_ID, "Server error", status_code=500)
        self.use_importer(app, FakeImporter(error=error))

        response = client.post("/templates/import", json={"template_id": TEMPLATE_ID})

        assert response.status_code == 502

    def test_unexpected_failure_rolls_back(self, app, client, session):
        self.use_importer(app, FakeImporter(error=RuntimeError("db down")))

        response = client.post("/templates/import", json={"template_id": TEMPLATE_ID})

        assert response.status_code == 500
        assert session.rollbacks == 1


# =============================================================================
# Template Storage
# =============================================================================


class TestTemplates:
    def test_get_variables(self, app, client):
        template = make_template()
        use_session(app, FakeSession(objects=[template]))

        response = client.get(f"/templates/{template.id}/variables")

        assert response.status_code == 200
        variables = response.json()["variables"]
        assert [v["key"] for v in variables["text_variables"]] == ["Heading.text"]
        assert [v["key"] for v in variables["media_variables"]] == ["Logo.source"]
        assert [v["key"] for v in variables["color_variables"]] == ["Panel.fill"]
        assert variables["has_variables"] is True

    def test_get_missing(self, app, client):
        use_session(app, FakeSession())

        response = client.get(f"/templates/{uuid.uuid4()}")

        assert response.status_code == 404

    def test_update_normalizes_variables(self, app, client):
        template = make_template()
        session = FakeSession(objects=[template])
        use_session(app, session)

        response = client.patch(
            f"/templates/{template.id}",
            json={"name": "Renamed", "variables": {"Heading.text.text": "deep", "Heading.text": "Hi"}},
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Renamed"
        assert response.json()["variables"] == {"Heading.text": "Hi"}
        assert session.commits == 1

    def test_update_rejects_bad_keys(self, app, client):
        template = make_template()
        use_session(app, FakeSession(objects=[template]))

        response = client.patch(f"/templates/{template.id}", json={"variables": {"Heading": "x"}})

        assert response.status_code == 422

    def test_delete(self, app, client):
        template = make_template()
        session = FakeSession(objects=[template])
        use_session(app, session)

        response = client.delete(f"/templates/{template.id}")

        assert response.status_code == 204
        assert session.deleted == [template]


# =============================================================================
# Renders
# =============================================================================


class TestRenders:
    def use_render_client(self, app, render_client: FakeRenderClient) -> FakeRenderClient:
        app.dependency_overrides[get_render_client] = lambda: render_client
        return render_client

    def test_create_render_job(self, app, client):
        template = make_template()
        session = FakeSession(objects=[template])
        use_session(app, session)
        render_client = self.use_render_client(app, FakeRenderClient())

        response = client.post(
            "/renders",
            json={
                "template_id": str(template.id),
                "variables": {"Heading.text.text": "Sale", "Logo.source": None},
                "platform_ids": ["story"],
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["creatomate_render_ids"] == ["render-0"]
        assert body["variables"] == {"Heading.text": "Sale"}

        (render,) = render_client.submitted
        assert render["template_id"] == TEMPLATE_ID
        assert (render["width"], render["height"]) == (1080, 1920)
        assert render["modifications"] == {"Heading.text": "Sale"}
        assert render["webhook_url"] == "https://hooks.test/renders"
        assert render["metadata"] == f"job_id:{body['id']}|platform_id:story"

    def test_defaults_to_all_platforms_and_template_variables(self, app, client):
        template = make_template()
        use_session(app, FakeSession(objects=[template]))
        render_client = self.use_render_client(app, FakeRenderClient())

        response = client.post("/renders", json={"template_id": str(template.id)})

        assert response.status_code == 201
        assert len(render_client.submitted) == 2
        assert render_client.submitted[0]["modifications"] == template.variables

    def test_inactive_template(self, app, client):
        template = make_template(is_active=False)
        use_session(app, FakeSession(objects=[template]))
        self.use_render_client(app, FakeRenderClient())

        response = client.post("/renders", json={"template_id": str(template.id)})

        assert response.status_code == 404

    def test_unknown_platform(self, app, client):
        template = make_template()
        use_session(app, FakeSession(objects=[template]))
        self.use_render_client(app, FakeRenderClient())

        response = client.post("/renders", json={"template_id": str(template.id), "platform_ids": ["nope"]})

        assert response.status_code == 400

    def test_rendering_service_rejects(self, app, client):
        template = make_template()
        use_session(app, FakeSession(objects=[template]))
        self.use_render_client(app, FakeRenderClient(error=ExternalFetchError("renders", "Bad request", 400)))

        response = client.post("/renders", json={"template_id": str(template.id)})

        assert response.status_code == 502

    def test_refresh_render_job(self, app, client):
        job = RenderJob(
            template_id=uuid.uuid4(),
            creatomate_render_ids=["r1"],
            render_statuses={"r1": "processing"},
            status=RenderStatus.PROCESSING,
        )
        use_session(app, FakeSession(objects=[job]))
        self.use_render_client(app, FakeRenderClient())

        response = client.get(f"/renders/{job.id}", params={"refresh": "true"})

        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        assert response.json()["output_urls"] == {"r1": "https://x/r1.mp4"}

    def test_webhook_by_render_id(self, app, client):
        job = RenderJob(
            template_id=uuid.uuid4(),
            creatomate_render_ids=["r1", "r2"],
            render_statuses={"r1": "pending", "r2": "completed"},
        )
        use_session(app, FakeSession(execute_results=[job]))

        response = client.post(
            "/renders/webhook",
            json={"id": "r1", "status": "succeeded", "url": "https://x/r1.mp4"},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "job_id": str(job.id), "status": "completed"}
        assert job.output_urls == {"r1": "https://x/r1.mp4"}

    def test_webhook_by_metadata(self, app, client):
        job = RenderJob(template_id=uuid.uuid4())
        use_session(app, FakeSession(objects=[job]))

        response = client.post(
            "/renders/webhook",
            json={
                "id": "r9",
                "status": "failed",
                "error_message": "Source file missing",
                "metadata": f"job_id:{job.id}|platform_id:story",
            },
        )

        assert response.status_code == 200
        assert response.json()["status"] == "failed"
        assert job.creatomate_render_ids == ["r9"]
        assert job.error_message == "Source file missing"

    def test_webhook_unknown_job(self, app, client):
        use_session(app, FakeSession())

        response = client.post("/renders/webhook", json={"id": "r1", "status": "succeeded", "metadata": "junk"})

        assert response.status_code == 404
