"""Helpers shared by the resource services."""

import logging
from typing import Any, Iterable, List

from classconnect.schemas.common import AttachmentOut


notification_logger = logging.getLogger("classconnect.notifications")


def attachments_out(rows: Iterable[Any]) -> List[AttachmentOut]:
    return [
        AttachmentOut(
            id=row.id,
            file_name=row.file_name,
            file_size=row.file_size,
            file_type=row.file_type,
            file_url=row.file_url,
        )
        for row in rows
    ]


def notify(event: str, **fields: Any) -> None:
    """Console notification. There is no delivery channel."""

    details = ", ".join(f"{key}={value}" for key, value in fields.items())
    notification_logger.info("[notification] %s: %s", event, details)
