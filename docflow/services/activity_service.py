"""Best-effort recording of document lifecycle events in MongoDB."""

import logging
from typing import Any
from uuid import UUID

from docflow.db import mongodb
from docflow.models.nosql.activity import ActivityType, DocumentActivity

logger = logging.getLogger(__name__)


async def record_activity(
    event_type: ActivityType,
    document_id: UUID,
    actor_id: UUID,
    from_status: str | None = None,
    to_status: str | None = None,
    version: int | None = None,
    **details: Any,
) -> None:
    """Append an event to the activity trail; failures are logged, never raised."""
    event = DocumentActivity(
        document_id=str(document_id),
        actor_id=str(actor_id),
        event_type=event_type,
        from_status=from_status,
        to_status=to_status,
        version=version,
        details=details,
    )
    try:
        await mongodb.get_activities_collection().insert_one(event.to_mongo())
    except Exception as e:
        logger.warning("Could not record %s for document %s: %s", event.event_type, document_id, e)


async def list_activity(document_id: UUID, limit: int = 100) -> list[DocumentActivity]:
    """Most recent events first."""
    collection = mongodb.get_activities_collection()
    cursor = collection.find({"document_id": str(document_id)}).sort("timestamp", -1).limit(limit)
    return [DocumentActivity.from_mongo(doc) async for doc in cursor]
