"""
Google Gemini API integration.

- Image: Imagen 3 via :predict — synchronous, returns base64 bytes
- Video: Veo via :predictLongRunning — returns an operation name to poll
- Vision: Gemini Flash product description for the reference image

The API key travels in the x-goog-api-key header, never in the URL.
"""

import logging

from .base import ProviderAdapter, dig
from .exceptions import TerminalGenerationFailure, TransientProviderError
from .pipeline.models import GenerationRequest, GenerationResult, MediaKind, MediaRef

logger = logging.getLogger(__name__)

API_BASE = "https://generativelanguage.googleapis.com/v1beta"

IMAGEN_MODEL = "imagen-3.0-generate-002"
VEO_MODEL = "veo-2.0-generate-001"
VISION_MODEL = "gemini-1.5-flash"

# Veo 2 accepts 5–8 second clips
VEO_MIN_DURATION = 5
VEO_MAX_DURATION = 8

DESCRIBE_PROMPT = (
    "Describe this product image in high detail. Focus on the main product, its visual "
    "features, colors, materials, and key identifiers. Do not describe the background. "
    "Output a single paragraph description."
)


class _GeminiAdapter(ProviderAdapter):
    name = "gemini"

    def _headers(self) -> dict:
        return {
            "x-goog-api-key": self._secret(),
            "Content-Type": "application/json",
        }


class GeminiImageAdapter(_GeminiAdapter):
    label = "Gemini"
    media_kind = MediaKind.IMAGE
    asynchronous = False

    def __init__(self, credential, client=None, timeout=None, model: str = IMAGEN_MODEL):
        super().__init__(credential, client=client, timeout=timeout)
        self.model = model

    async def submit(self, request: GenerationRequest) -> GenerationResult:
        body = {
            "instances": [{"prompt": request.prompt}],
            "parameters": {
                "sampleCount": 1,
                "aspectRatio": request.aspect_ratio,
            },
        }

        logger.info(f"{self.tag} Imagen request ({self.model}): {request.prompt[:80]}...")
        response = await self._send(
            "POST",
            f"{API_BASE}/models/{self.model}:predict",
            headers=self._headers(),
            json=body,
        )
        data = self._json(response)

        prediction = dig(data, "predictions", 0)
        if not prediction:
            raise TransientProviderError(self.name, "no image generated")

        image_b64 = prediction.get("bytesBase64Encoded") or dig(prediction, "image", "bytesBase64Encoded")
        if not image_b64:
            raise TransientProviderError(self.name, "malformed response: prediction has no image bytes")

        mime_type = prediction.get("mimeType") or "image/png"
        logger.info(f"{self.tag} Imagen image received ({mime_type})")
        return self.completed(
            MediaRef.from_base64(image_b64, mime_type),
            payload={"model": self.model, "mimeType": mime_type},
        )

    async def describe(self, image: str) -> str:
        """One-paragraph description of a product photo (base64 or data: URI)."""
        mime_type, b64data = split_data_uri(image)
        body = {
            "contents": [{
                "parts": [
                    {"text": DESCRIBE_PROMPT},
                    {"inline_data": {"mime_type": mime_type, "data": b64data}},
                ]
            }]
        }
        response = await self._send(
            "POST",
            f"{API_BASE}/models/{VISION_MODEL}:generateContent",
            headers=self._headers(),
            json=body,
        )
        data = self._json(response)
        text = dig(data, "candidates", 0, "content", "parts", 0, "text")
        if not text:
            raise TransientProviderError(self.name, "malformed response: no description text")
        return text.strip()


class VeoVideoAdapter(_GeminiAdapter):
    label = "Veo"
    media_kind = MediaKind.VIDEO
    asynchronous = True

    def __init__(self, credential, client=None, timeout=None, model: str = VEO_MODEL):
        super().__init__(credential, client=client, timeout=timeout)
        self.model = model

    async def submit(self, request: GenerationRequest) -> GenerationResult:
        duration = max(VEO_MIN_DURATION, min(VEO_MAX_DURATION, request.duration_seconds))
        parameters = {
            "aspectRatio": request.aspect_ratio,
            "durationSeconds": duration,
            "sampleCount": 1,
        }
        if request.negative_prompt:
            parameters["negativePrompt"] = request.negative_prompt
        if request.seed is not None:
            parameters["seed"] = request.seed

        logger.info(f"{self.tag} Video request ({self.model}, {duration}s): {request.prompt[:80]}...")
        response = await self._send(
            "POST",
            f"{API_BASE}/models/{self.model}:predictLongRunning",
            headers=self._headers(),
            json={"instances": [{"prompt": request.prompt}], "parameters": parameters},
        )
        operation = self._json(response)

        if not isinstance(operation, dict) or not operation.get("name"):
            raise TransientProviderError(self.name, "malformed response: no operation name")
        if operation.get("done") and operation.get("error"):
            raise TerminalGenerationFailure(
                self.name, dig(operation, "error", "message", default="operation failed")
            )

        logger.info(f"{self.tag} Operation started: {operation['name']}")
        return self.pending(operation["name"], payload=operation, progress=0)

    async def check_status(self, handle: str) -> GenerationResult:
        response = await self._send("GET", f"{API_BASE}/{handle}", headers=self._headers())
        operation = self._json(response)
        if not isinstance(operation, dict):
            raise TransientProviderError(self.name, "malformed response: operation is not an object")

        if not operation.get("done"):
            return self.pending(
                handle, payload=operation, progress=dig(operation, "metadata", "progress", default=0)
            )

        if operation.get("error"):
            message = str(dig(operation, "error", "message", default="operation failed"))
            logger.warning(f"{self.tag} Operation {handle} failed: {message}")
            return self.failed(message, payload=operation, handle=handle)

        result = operation.get("response") or {}
        if not isinstance(result, dict):
            raise TransientProviderError(self.name, "malformed response: operation response is not an object")

        video_uri = (
            dig(result, "generateVideoResponse", "generatedSamples", 0, "video", "uri")
            or dig(result, "generatedVideos", 0, "video", "uri")
        )
        if video_uri and not isinstance(video_uri, str):
            raise TransientProviderError(self.name, "malformed response: video uri is not a string")
        if not video_uri:
            reasons = dig(result, "generateVideoResponse", "raiMediaFilteredReasons")
            if isinstance(reasons, list) and reasons:
                message = "; ".join(str(r) for r in reasons)
            else:
                message = "operation finished without a video"
            return self.failed(message, payload=operation, handle=handle)

        return self.completed(MediaRef.from_url(video_uri, "video/mp4"), payload=operation, handle=handle)


def split_data_uri(image: str) -> tuple[str, str]:
    """("image/jpeg", base64) from either a data: URI or bare base64."""
    if image.startswith("data:") and "," in image:
        header, b64data = image.split(",", 1)
        mime_type = header[5:].split(";")[0] or "image/jpeg"
        return mime_type, b64data
    return "image/jpeg", image


async def describe_product_image(image: str, credential, client=None) -> str:
    """Describe a product reference image with Gemini Flash vision."""
    return await GeminiImageAdapter(credential, client=client).describe(image)
