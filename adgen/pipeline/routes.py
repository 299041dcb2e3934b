"""
FastAPI routes for prompt composition and generation.

Prompt Endpoints:
  GET  /catalog               — Selectable facet ids
  POST /prompts/compose       — Compose one scene
  POST /prompts/storyboard    — Compose HOOK, BENEFIT, DEMO, CTA

Generation Endpoints:
  POST /generate/image         — Free-form image request
  POST /generate/master-image  — Product master shot from facets
  POST /generate/scene         — One storyboard scene as video
  POST /generate/project       — Every scene of a storyboard
  POST /operations/status      — One status check for a PENDING result
  POST /products/describe      — Describe a product reference image
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from .. import facets
from ..exceptions import AuthenticationError, CompositionError, ProviderError, TransientProviderError
from ..provider_factory import UnknownProviderError
from .models import (
    ComposeRequest,
    DescribeProductRequest,
    DescribeProductResponse,
    GenerateImageRequest,
    GenerationRequest,
    GenerationResult,
    MasterImageRequest,
    MediaKind,
    OperationStatusRequest,
    ProjectRequest,
    ProjectResponse,
    SceneDescriptor,
    SceneGenerateRequest,
    StoryboardFacets,
    StoryboardRequest,
)
from .service import AdGenerationService

logger = logging.getLogger(__name__)

_service: AdGenerationService | None = None


def get_service() -> AdGenerationService:
    """Process-wide service, created on first use."""
    global _service
    if _service is None:
        _service = AdGenerationService()
    return _service


def _composition_error(e: CompositionError) -> HTTPException:
    return HTTPException(status_code=422, detail=str(e))


# ═════════════════════════════════════════════════════════════════════════════
# Prompt Router
# ═════════════════════════════════════════════════════════════════════════════

prompt_router = APIRouter(tags=["prompts"])


@prompt_router.get("/catalog")
async def get_catalog():
    """All persona, background, niche, scene and style ids."""
    return facets.list_catalog()


@prompt_router.post("/prompts/compose", response_model=SceneDescriptor)
async def compose_scene(request: ComposeRequest, service: AdGenerationService = Depends(get_service)):
    try:
        return service.compose(request)
    except CompositionError as e:
        raise _composition_error(e)


@prompt_router.post("/prompts/storyboard", response_model=list[SceneDescriptor])
async def compose_storyboard(request: StoryboardRequest, service: AdGenerationService = Depends(get_service)):
    try:
        return list(service.storyboard(request))
    except CompositionError as e:
        raise _composition_error(e)


# ═════════════════════════════════════════════════════════════════════════════
# Generation Router
# ═════════════════════════════════════════════════════════════════════════════

generation_router = APIRouter(tags=["generation"])


@generation_router.post("/generate/image", response_model=GenerationResult)
async def generate_image(request: GenerateImageRequest, service: AdGenerationService = Depends(get_service)):
    """Run an image prompt through the image provider chain."""
    generation_request = GenerationRequest(
        prompt=request.prompt,
        negative_prompt=request.negative_prompt,
        media_kind=MediaKind.IMAGE,
        aspect_ratio=request.aspect_ratio,
        width=request.width,
        height=request.height,
        seed=request.seed,
    )
    return await service.generate_image(generation_request, request.credentials)


@generation_router.post("/generate/master-image", response_model=GenerationResult)
async def generate_master_image(request: MasterImageRequest, service: AdGenerationService = Depends(get_service)):
    try:
        return await service.generate_master_image(
            product_name=request.product_name,
            background=request.background,
            style=request.style,
            seed=request.seed,
            credentials=request.credentials,
        )
    except CompositionError as e:
        raise _composition_error(e)


@generation_router.post("/generate/scene", response_model=GenerationResult)
async def generate_scene(request: SceneGenerateRequest, service: AdGenerationService = Depends(get_service)):
    """Submit one scene. Async providers answer PENDING with an operation handle."""
    return await service.generate_scene(request.scene, request.credentials)


@generation_router.post("/generate/project", response_model=ProjectResponse)
async def generate_project(request: ProjectRequest, service: AdGenerationService = Depends(get_service)):
    facet_values = StoryboardFacets(
        persona=request.persona,
        background=request.background,
        niche=request.niche,
        style=request.style,
        product_name=request.product_name,
    )
    try:
        return await service.generate_project(
            facet_values,
            credentials=request.credentials,
            reference_image=request.reference_image,
        )
    except CompositionError as e:
        raise _composition_error(e)


@generation_router.post("/operations/status", response_model=GenerationResult)
async def operation_status(request: OperationStatusRequest, service: AdGenerationService = Depends(get_service)):
    """
    Check a PENDING operation once. Clients poll this endpoint on their own
    interval (10 s is plenty; back off to 15 s after a 503).

    Errors:
      - 404: Unknown provider
      - 401: Missing or rejected credential
      - 503: Provider unreachable or sent an unusable answer (retry later)
      - 400: Provider does not support status checks
    """
    try:
        return await service.check_status(
            request.provider, request.media_kind, request.handle, request.credentials
        )
    except UnknownProviderError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except ProviderError as e:
        status_code = 503 if isinstance(e, TransientProviderError) else 400
        logger.warning(f"Status check failed: {e}")
        raise HTTPException(status_code=status_code, detail=str(e))


@generation_router.post("/products/describe", response_model=DescribeProductResponse)
async def describe_product(request: DescribeProductRequest, service: AdGenerationService = Depends(get_service)):
    try:
        description = await service.describe_product(request.image, request.credentials)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))
    except ProviderError as e:
        logger.error(f"Product description failed: {e}", exc_info=True)
        raise HTTPException(status_code=502, detail=str(e))
    return DescribeProductResponse(description=description)
