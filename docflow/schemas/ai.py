"""Text generation and classification schemas."""

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

from docflow.schemas.base import CamelModel

GenerationType = Literal["generate", "paraphrase", "summarize", "formal", "expand"]


class GenerateRequest(CamelModel):
    """Schema for a text generation request."""

    prompt: str = Field(..., min_length=1, max_length=10000)
    type: GenerationType = "generate"
    max_length: int = Field(500, ge=1, le=4096)
    temperature: float = Field(0.7, ge=0.0, le=1.0)


class GeneratedText(BaseModel):
    generated_text: str
    source: str


class GenerateResponse(BaseModel):
    success: bool = True
    data: GeneratedText


class ClassifyRequest(CamelModel):
    """Either raw ``text`` or a document ``content`` payload."""

    text: str | None = None
    content: Any = None

    @model_validator(mode="after")
    def require_input(self) -> "ClassifyRequest":
        if not (self.text and self.text.strip()) and not self.content:
            raise ValueError("Provide text or content to classify")
        return self


class ClassifyResponse(CamelModel):
    category: str
    confidence: float


class ModelInfo(CamelModel):
    id: str
    name: str
    type: str
    provider: str


class ModelsResponse(CamelModel):
    success: bool = True
    data: list[ModelInfo]
