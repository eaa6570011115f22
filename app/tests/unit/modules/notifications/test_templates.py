"""Unit tests for MailTemplateRepository over in-memory stores."""

import base64

import pytest

from modules.notifications.errors import InvalidArgumentError, RecordDecodeError
from modules.notifications.models import MailTemplate
from modules.notifications.stores import InMemoryTableStore
from modules.notifications.templates import MailTemplateRepository, template_blob_name

pytestmark = pytest.mark.unit


@pytest.fixture
def template_table():
    return InMemoryTableStore("mail-templates")


@pytest.fixture
def template_repository(template_table, blob_store):
    return MailTemplateRepository(template_table, blob_store)


def _template(template_id="welcome", application="Contoso", **fields):
    fields.setdefault("content", "<p>Hello {{name}}</p>")
    return MailTemplate(template_id=template_id, application=application, **fields)


class TestUpsert:
    """Tests for upsert."""

    @pytest.mark.asyncio
    async def test_content_goes_to_blob_store(
        self, template_repository, template_table, blob_store
    ):
        """The row keeps the locator; the body is stored as a blob."""
        stored = await template_repository.upsert(
            _template(description="Welcome mail", template_type="HTML")
        )

        assert stored.content is None
        assert stored.blob_locator == "memory://Contoso/EmailTemplates/welcome"
        row = await template_table.get_entity("Contoso", "welcome")
        assert "content" not in row
        assert row["description"] == "Welcome mail"
        assert row["template_type"] == "HTML"
        blob = await blob_store.download("Contoso/EmailTemplates/welcome")
        assert base64.b64decode(blob).decode("utf-8") == "<p>Hello {{name}}</p>"

    @pytest.mark.asyncio
    async def test_upsert_replaces_existing(self, template_repository):
        await template_repository.upsert(_template(description="old"))
        await template_repository.upsert(_template(content="<p>Bye</p>"))

        template = await template_repository.get("Contoso", "welcome")

        assert template.description is None
        assert template.content == "<p>Bye</p>"

    @pytest.mark.asyncio
    async def test_requires_keys(self, template_repository):
        with pytest.raises(InvalidArgumentError):
            await template_repository.upsert(_template(application=""))
        with pytest.raises(InvalidArgumentError):
            await template_repository.upsert(_template(template_id=""))


class TestGet:
    """Tests for get and get_all."""

    @pytest.mark.asyncio
    async def test_get_returns_content(self, template_repository):
        await template_repository.upsert(_template(content="Grüße"))

        template = await template_repository.get("Contoso", "welcome")

        assert template.template_id == "welcome"
        assert template.application == "Contoso"
        assert template.content == "Grüße"

    @pytest.mark.asyncio
    async def test_missing_template_is_none(self, template_repository):
        assert await template_repository.get("Contoso", "missing") is None

    @pytest.mark.asyncio
    async def test_missing_blob_returns_metadata(self, template_repository, blob_store):
        """A row whose blob is gone comes back without content."""
        await template_repository.upsert(_template())
        await blob_store.delete(template_blob_name("Contoso", "welcome"))

        template = await template_repository.get("Contoso", "welcome")

        assert template is not None
        assert template.content is None

    @pytest.mark.asyncio
    async def test_bad_row_raises(self, template_repository, template_table):
        await template_repository.upsert(_template())
        row = await template_table.get_entity("Contoso", "welcome")
        row["template_type"] = 42
        template_table._rows[("Contoso", "welcome")] = row

        with pytest.raises(RecordDecodeError):
            await template_repository.get("Contoso", "welcome")

    @pytest.mark.asyncio
    async def test_get_all_ignores_application_case(self, template_repository):
        """Listing matches the application ignoring case and omits content."""
        await template_repository.upsert(_template("welcome"))
        await template_repository.upsert(_template("reminder", application="contoso"))
        await template_repository.upsert(_template("welcome", application="Fabrikam"))

        templates = await template_repository.get_all("CONTOSO")

        assert sorted(t.template_id for t in templates) == ["reminder", "welcome"]
        assert all(t.content is None for t in templates)

    @pytest.mark.asyncio
    async def test_get_all_without_templates(self, template_repository):
        assert await template_repository.get_all("Contoso") == []

    @pytest.mark.asyncio
    async def test_requires_keys(self, template_repository):
        with pytest.raises(InvalidArgumentError):
            await template_repository.get("Contoso", "")
        with pytest.raises(InvalidArgumentError):
            await template_repository.get_all("")


class TestDelete:
    """Tests for delete."""

    @pytest.mark.asyncio
    async def test_delete_removes_row_and_blob(
        self, template_repository, template_table, blob_store
    ):
        await template_repository.upsert(_template())

        assert await template_repository.delete("Contoso", "welcome") is True

        assert await template_table.get_entity("Contoso", "welcome") is None
        assert await blob_store.download("Contoso/EmailTemplates/welcome") is None
        assert await template_repository.get("Contoso", "welcome") is None

    @pytest.mark.asyncio
    async def test_delete_missing_returns_false(
        self, template_repository, template_table
    ):
        assert await template_repository.delete("Contoso", "missing") is False
        assert template_table.transaction_log == []

    @pytest.mark.asyncio
    async def test_requires_keys(self, template_repository):
        with pytest.raises(InvalidArgumentError):
            await template_repository.delete("", "welcome")
