"""
Hugging Face Inference API — FLUX.1-dev text-to-image.

Synchronous: the response body is the image itself (image/jpeg or image/png),
which we normalize to an inline data URI.
"""

import logging

from .base import ProviderAdapter
from .exceptions import TransientProviderError
from .pipeline.models import GenerationRequest, GenerationResult, MediaKind, MediaRef

logger = logging.getLogger(__name__)

HF_API_BASE = "https://api-inference.huggingface.co/models"
DEFAULT_MODEL = "black-forest-labs/FLUX.1-dev"


class HuggingFaceImageAdapter(ProviderAdapter):
    name = "huggingface"
    label = "HuggingFace"
    media_kind = MediaKind.IMAGE
    asynchronous = False

    def __init__(self, credential, client=None, timeout=None, model: str = DEFAULT_MODEL):
        super().__init__(credential, client=client, timeout=timeout)
        self.model = model

    async def submit(self, request: GenerationRequest) -> GenerationResult:
        parameters = {
            "width": request.width,
            "height": request.height,
        }
        if request.negative_prompt:
            parameters["negative_prompt"] = request.negative_prompt
        if request.seed is not None:
            parameters["seed"] = request.seed

        headers = {
            "Authorization": f"Bearer {self._secret()}",
            "Content-Type": "application/json",
            "Accept": "image/png",
        }

        logger.info(f"{self.tag} Generating image with {self.model}: {request.prompt[:80]}...")
        response = await self._send(
            "POST",
            f"{HF_API_BASE}/{self.model}",
            headers=headers,
            json={"inputs": request.prompt, "parameters": parameters},
        )

        mime_type = response.headers.get("content-type", "").split(";")[0].strip()
        if not response.content:
            raise TransientProviderError(self.name, "empty response body")
        if not mime_type.startswith("image/"):
            raise TransientProviderError(
                self.name, f"malformed response: expected image, got {mime_type or 'unknown'}"
            )

        logger.info(f"{self.tag} Image received ({len(response.content)} bytes, {mime_type})")
        return self.completed(
            MediaRef.from_bytes(response.content, mime_type),
            payload={"model": self.model, "content_type": mime_type, "bytes": len(response.content)},
        )
