"""Text generation and classification endpoints."""

import logging

from fastapi import APIRouter, Depends

from docflow.api.deps import get_current_user, get_generation_service
from docflow.core.metrics import record_generation_source
from docflow.models.sql.user import User
from docflow.schemas.ai import (
    ClassifyRequest,
    ClassifyResponse,
    GeneratedText,
    GenerateRequest,
    GenerateResponse,
    ModelsResponse,
)
from docflow.services.classifier import classify_text, content_to_text
from docflow.services.generation import GenerationService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/generate",
    response_model=GenerateResponse,
    summary="Generate document text",
)
async def generate_text(
    request: GenerateRequest,
    current_user: User = Depends(get_current_user),
    service: GenerationService = Depends(get_generation_service),
) -> GenerateResponse:
    """Generate text with the configured provider.

    Provider failures fall back to the local rule-based synthesizer, so this
    answers 200 unless the provider rejects our credentials and that is
    configured to surface.
    """
    result = await service.generate(
        request.prompt,
        generation_type=request.type,
        max_length=request.max_length,
        temperature=request.temperature,
    )
    logger.info("Generated %s text for user %s via %s", request.type, current_user.id, result.source)
    await record_generation_source(result.source)
    return GenerateResponse(data=GeneratedText(generated_text=result.text, source=result.source))


@router.post(
    "/classify",
    response_model=ClassifyResponse,
    summary="Classify document text",
)
async def classify(
    request: ClassifyRequest,
    _: User = Depends(get_current_user),
) -> ClassifyResponse:
    text = request.text if request.text and request.text.strip() else content_to_text(request.content)
    category, confidence = classify_text(text)
    return ClassifyResponse(category=category, confidence=confidence)


@router.get(
    "/models",
    response_model=ModelsResponse,
    summary="List generation backends",
)
async def list_models(
    _: User = Depends(get_current_user),
    service: GenerationService = Depends(get_generation_service),
) -> ModelsResponse:
    return ModelsResponse(data=service.available_models())
