"""Mail template storage.

Templates belong to an application. The metadata is a table-store row keyed
by ``(application, template_id)``; the template body is a blob at
``{application}/EmailTemplates/{template_id}``.
"""

import asyncio
import base64
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from infrastructure.logging import get_module_logger
from modules.notifications.batch_writer import write_batch
from modules.notifications.blobs import BlobStore
from modules.notifications.errors import InvalidArgumentError, RecordDecodeError
from modules.notifications.models import MailTemplate
from modules.notifications.predicates import ALWAYS
from modules.notifications.stores import TableStore, TransactionAction, collect_rows

logger = get_module_logger()

_ROW_FIELDS = (
    "template_id",
    "application",
    "description",
    "template_type",
    "blob_locator",
)


def template_blob_name(application: str, template_id: str) -> str:
    return f"{application}/EmailTemplates/{template_id}"


def _require(application: Optional[str], template_id: Optional[str]) -> None:
    if not application:
        raise InvalidArgumentError("application is required")
    if not template_id:
        raise InvalidArgumentError("template_id is required")


def _to_row(template: MailTemplate) -> Dict[str, Any]:
    row = template.model_dump(exclude={"content"}, exclude_none=True)
    row["partition_key"] = template.partition_key
    row["row_key"] = template.row_key
    return row


def _from_row(row: Dict[str, Any]) -> MailTemplate:
    data = {field: row[field] for field in _ROW_FIELDS if field in row}
    data.setdefault("template_id", row.get("row_key"))
    data.setdefault("application", row.get("partition_key"))
    try:
        return MailTemplate.model_validate(data)
    except ValidationError as exc:
        raise RecordDecodeError(str(exc), row_key=row.get("row_key")) from exc


class MailTemplateRepository:
    """Read, save and delete mail templates.

    Args:
        table: Table store holding one row per template.
        blob_store: Blob store holding the template bodies.
    """

    def __init__(self, table: TableStore, blob_store: BlobStore) -> None:
        self.table = table
        self.blob_store = blob_store

    async def get(self, application: str, template_id: str) -> Optional[MailTemplate]:
        """Return the template with its content, or None when it does not exist."""
        _require(application, template_id)

        row, content = await asyncio.gather(
            self.table.get_entity(application, template_id),
            self.blob_store.download(template_blob_name(application, template_id)),
        )
        if row is None:
            logger.info(
                "mail_template_not_found",
                application=application,
                template_id=template_id,
            )
            return None

        template = _from_row(row)
        if content is None:
            logger.warning(
                "mail_template_content_missing",
                application=application,
                template_id=template_id,
            )
            return template
        return template.model_copy(
            update={"content": base64.b64decode(content).decode("utf-8")}
        )

    async def get_all(self, application: str) -> List[MailTemplate]:
        """Return the templates of ``application`` without their content.

        The application name is matched ignoring case.
        """
        if not application:
            raise InvalidArgumentError("application is required")

        wanted = application.casefold()
        rows = await collect_rows(self.table.query(ALWAYS))
        templates = [
            _from_row(row)
            for row in rows
            if str(row.get("partition_key", "")).casefold() == wanted
        ]
        logger.debug(
            "mail_templates_listed", application=application, count=len(templates)
        )
        return templates

    async def upsert(self, template: MailTemplate) -> MailTemplate:
        """Save a template, replacing any template with the same id.

        The content goes to the blob store; the row keeps only the locator.

        Returns:
            The template as stored, without content.
        """
        _require(template.application, template.template_id)

        encoded = base64.b64encode((template.content or "").encode("utf-8"))
        locator = await self.blob_store.upload(
            template_blob_name(template.application, template.template_id),
            encoded.decode("ascii"),
        )
        stored = template.model_copy(update={"content": None, "blob_locator": locator})
        await write_batch(
            self.table,
            [_to_row(stored)],
            chunk_size=1,
            action=TransactionAction.UPSERT_REPLACE,
        )
        logger.info(
            "mail_template_saved",
            application=template.application,
            template_id=template.template_id,
        )
        return stored

    async def delete(self, application: str, template_id: str) -> bool:
        """Delete a template.

        The row is removed only once its content blob is gone.

        Returns:
            False when no content blob existed for the template.
        """
        _require(application, template_id)

        deleted = await self.blob_store.delete(
            template_blob_name(application, template_id)
        )
        if not deleted:
            logger.info(
                "mail_template_not_found",
                application=application,
                template_id=template_id,
            )
            return False

        await write_batch(
            self.table,
            [{"partition_key": application, "row_key": template_id}],
            chunk_size=1,
            action=TransactionAction.DELETE,
        )
        logger.info(
            "mail_template_deleted", application=application, template_id=template_id
        )
        return True
