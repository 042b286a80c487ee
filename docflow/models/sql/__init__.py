"""SQLAlchemy models package."""

from docflow.models.sql.document import Document
from docflow.models.sql.template import Template
from docflow.models.sql.user import User

__all__ = ["User", "Template", "Document"]
