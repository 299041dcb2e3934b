"""
Replicate predictions API.

Both adapters are submit-then-poll:
  POST /models/{owner}/{model}/predictions  → { id, status, ... }
  GET  /predictions/{id}                     → { status: starting|processing|succeeded|failed|canceled, output }

Image: black-forest-labs/flux-schnell   Video: lightricks/ltx-video
"""

import logging
from typing import Any

from .base import ProviderAdapter
from .exceptions import TerminalGenerationFailure, TransientProviderError
from .pipeline.models import GenerationRequest, GenerationResult, GenerationStatus, MediaKind, MediaRef

logger = logging.getLogger(__name__)

REPLICATE_API_BASE = "https://api.replicate.com/v1"

IMAGE_MODEL = "black-forest-labs/flux-schnell"
VIDEO_MODEL = "lightricks/ltx-video"

VIDEO_FPS = 24
GUIDANCE_SCALE = 7.5
INFERENCE_STEPS = 50

FAILED_STATES = ("failed", "canceled")


class _ReplicateAdapter(ProviderAdapter):
    name = "replicate"
    label = "Replicate"
    asynchronous = True
    model: str = ""
    mime_type: str = ""

    def __init__(self, credential, client=None, timeout=None, model: str | None = None):
        super().__init__(credential, client=client, timeout=timeout)
        if model:
            self.model = model

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self._secret()}",
            "Content-Type": "application/json",
        }

    def build_input(self, request: GenerationRequest) -> dict:
        raise NotImplementedError

    async def submit(self, request: GenerationRequest) -> GenerationResult:
        logger.info(f"{self.tag} Creating prediction on {self.model}: {request.prompt[:80]}...")
        response = await self._send(
            "POST",
            f"{REPLICATE_API_BASE}/models/{self.model}/predictions",
            headers=self._headers(),
            json={"input": self.build_input(request)},
        )
        prediction = self._json(response)
        if not isinstance(prediction, dict) or not prediction.get("id"):
            raise TransientProviderError(self.name, "malformed response: no prediction id")

        result = self._interpret(prediction)
        if result.status == GenerationStatus.FAILED:
            raise TerminalGenerationFailure(self.name, result.error or "prediction failed")
        logger.info(f"{self.tag} Prediction {prediction['id']}: {prediction.get('status')}")
        return result

    async def check_status(self, handle: str) -> GenerationResult:
        response = await self._send(
            "GET", f"{REPLICATE_API_BASE}/predictions/{handle}", headers=self._headers()
        )
        prediction = self._json(response)
        if not isinstance(prediction, dict):
            raise TransientProviderError(self.name, "malformed response: prediction is not an object")
        return self._interpret(prediction, handle)

    def _interpret(self, prediction: dict, handle: str | None = None) -> GenerationResult:
        handle = str(prediction.get("id") or handle)
        status = prediction.get("status", "")

        if status == "succeeded":
            url = first_output_url(prediction.get("output"))
            if not url:
                return self.failed("prediction succeeded without output", payload=prediction, handle=handle)
            return self.completed(MediaRef.from_url(url, self.mime_type), payload=prediction, handle=handle)

        if status in FAILED_STATES:
            return self.failed(
                str(prediction.get("error") or f"prediction {status}"), payload=prediction, handle=handle
            )

        # Replicate exposes no percentage; logs mean the model is running
        progress = 50 if prediction.get("logs") else 0
        return self.pending(handle, payload=prediction, progress=progress)


class ReplicateImageAdapter(_ReplicateAdapter):
    media_kind = MediaKind.IMAGE
    model = IMAGE_MODEL
    mime_type = "image/png"

    def build_input(self, request: GenerationRequest) -> dict:
        data = {
            "prompt": request.prompt,
            "aspect_ratio": request.aspect_ratio,
            "output_format": "png",
            "go_fast": True,
        }
        if request.seed is not None:
            data["seed"] = request.seed
        return data


class ReplicateVideoAdapter(_ReplicateAdapter):
    media_kind = MediaKind.VIDEO
    model = VIDEO_MODEL
    mime_type = "video/mp4"

    def build_input(self, request: GenerationRequest) -> dict:
        data = {
            "prompt": request.prompt,
            "negative_prompt": request.negative_prompt or "blurry, distorted, low quality",
            # 4 s at 24 fps → 97 frames
            "num_frames": request.duration_seconds * VIDEO_FPS + 1,
            "fps": VIDEO_FPS,
            "width": request.width,
            "height": request.height,
            "guidance_scale": GUIDANCE_SCALE,
            "num_inference_steps": INFERENCE_STEPS,
        }
        if request.seed is not None:
            data["seed"] = request.seed
        return data


def first_output_url(output: Any) -> str | None:
    if isinstance(output, str):
        return output or None
    if isinstance(output, list) and output and isinstance(output[0], str):
        return output[0]
    return None
