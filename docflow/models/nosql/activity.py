"""Document activity events stored in MongoDB."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ActivityType(str, Enum):
    """Lifecycle actions recorded for a document."""

    CREATED = "document.created"
    UPDATED = "document.updated"
    SUBMITTED = "document.submitted"
    APPROVED = "document.approved"
    REJECTED = "document.rejected"
    PDF_GENERATED = "document.pdf_generated"
    DELETED = "document.deleted"


class DocumentActivity(BaseModel):
    """One lifecycle event for a document."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    id: str | None = Field(None, alias="_id")
    document_id: str
    actor_id: str
    event_type: ActivityType
    from_status: str | None = None
    to_status: str | None = None
    version: int | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def to_mongo(self) -> dict[str, Any]:
        """Convert to MongoDB document format."""
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def from_mongo(cls, data: dict[str, Any]) -> "DocumentActivity":
        """Create from MongoDB document."""
        if data.get("_id"):
            data["_id"] = str(data["_id"])
        return cls(**data)
