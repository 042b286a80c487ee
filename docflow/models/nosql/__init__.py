"""MongoDB models package."""

from docflow.models.nosql.activity import ActivityType, DocumentActivity

__all__ = ["ActivityType", "DocumentActivity"]
