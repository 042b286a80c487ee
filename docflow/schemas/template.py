"""Template schemas."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import Field

from docflow.schemas.base import CamelModel

FieldType = Literal["text", "textarea", "date", "select", "image", "signature", "ai-text"]


class TemplateField(CamelModel):
    """One input of a template form."""

    name: str = Field(..., min_length=1)
    label: str = Field(..., min_length=1)
    type: FieldType
    required: bool = False
    default_value: str = ""
    position: int
    section: str = "default"
    placeholder: str | None = None
    options: list[str] | None = None
    ai_prompt: str = ""
    max_length: int | None = None


class TemplateHeader(CamelModel):
    logo: str | None = None
    title: str = ""
    subtitle: str = ""


class TemplateFooter(CamelModel):
    text: str = ""
    include_page_numbers: bool = True


class Margins(CamelModel):
    top: float = 72
    right: float = 72
    bottom: float = 72
    left: float = 72


class TemplateStyling(CamelModel):
    font_family: str = "Times New Roman"
    font_size: float = Field(12, gt=0, le=72)
    margins: Margins = Field(default_factory=Margins)
    primary_color: str = Field("#000000", pattern=r"^#[0-9a-fA-F]{6}$")
    secondary_color: str = Field("#666666", pattern=r"^#[0-9a-fA-F]{6}$")


class TemplateCreate(CamelModel):
    """Schema for creating a template."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    category: str = Field(..., min_length=1, max_length=255)
    fields: list[TemplateField]
    header: TemplateHeader = Field(default_factory=TemplateHeader)
    footer: TemplateFooter = Field(default_factory=TemplateFooter)
    styling: TemplateStyling = Field(default_factory=TemplateStyling)


class TemplateUpdate(CamelModel):
    """Schema for updating a template; omitted sections are left as they are."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    category: str | None = Field(None, min_length=1, max_length=255)
    fields: list[TemplateField] | None = None
    header: TemplateHeader | None = None
    footer: TemplateFooter | None = None
    styling: TemplateStyling | None = None
    is_active: bool | None = None


class TemplateResponse(CamelModel):
    """Schema for template response."""

    id: UUID
    name: str
    description: str | None = None
    category: str
    fields: list[dict[str, Any]]
    header: dict[str, Any]
    footer: dict[str, Any]
    styling: dict[str, Any]
    created_by: UUID | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
