"""
Kie.ai task API — hosted Veo 3.1 video generation.

  POST {base}/veo/generate               → { code, msg, data: { taskId } }
  GET  {base}/veo/record-info?taskId=... → { code, data: { successFlag, response: { resultUrls } } }

successFlag: 0 generating, 1 success, 2/3 failed.
"""

import logging

from .base import ProviderAdapter, clamp_progress, dig
from .exceptions import AuthenticationError, TransientProviderError
from .pipeline.models import GenerationRequest, GenerationResult, MediaKind, MediaRef

logger = logging.getLogger(__name__)

KIE_API_BASE = "https://api.kie.ai/api/v1"
GENERATE_PATH = "veo/generate"
STATUS_PATH = "veo/record-info"

# Kie.ai name for Veo 3.1 fast
DEFAULT_MODEL = "veo3_fast"

SUCCESS_STATES = ("SUCCESS", "success", "completed")
FAILED_STATES = ("FAILED", "failed", "error", "GENERATE_FAILED", "CREATE_TASK_FAILED")


class KieVideoAdapter(ProviderAdapter):
    name = "kie"
    label = "Kie"
    media_kind = MediaKind.VIDEO
    asynchronous = True

    def __init__(self, credential, client=None, timeout=None, model: str = DEFAULT_MODEL):
        super().__init__(credential, client=client, timeout=timeout)
        self.model = model

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self._secret()}",
            "Content-Type": "application/json",
        }

    def _check_envelope(self, body) -> dict:
        """Kie wraps errors in a 200 response with its own code field."""
        if not isinstance(body, dict):
            raise TransientProviderError(self.name, "malformed response: body is not an object")
        code = body.get("code", 200)
        if code in (401, 403):
            raise AuthenticationError(self.name, f"credential rejected (code {code})")
        if code != 200:
            raise TransientProviderError(self.name, f"code {code}: {body.get('msg', 'unknown error')}")
        data = body.get("data") or {}
        if not isinstance(data, dict):
            raise TransientProviderError(self.name, "malformed response: data is not an object")
        return data

    async def submit(self, request: GenerationRequest) -> GenerationResult:
        payload = {
            "prompt": request.prompt,
            "model": self.model,
            "aspectRatio": request.aspect_ratio,
        }
        if request.seed is not None:
            payload["seeds"] = request.seed
        if request.reference_image and request.reference_image.startswith("https://"):
            # REFERENCE_2_VIDEO mode uses the product shot as the first frame reference
            payload["mode"] = "REFERENCE_2_VIDEO"
            payload["imageUrls"] = [request.reference_image]

        logger.info(f"{self.tag} Request to {GENERATE_PATH}: model={payload['model']}")
        response = await self._send(
            "POST",
            f"{KIE_API_BASE}/{GENERATE_PATH}",
            headers=self._headers(),
            json=payload,
        )
        data = self._check_envelope(self._json(response))

        task_id = data.get("taskId") or data.get("task_id")
        if not task_id:
            raise TransientProviderError(self.name, "malformed response: no taskId")

        logger.info(f"{self.tag} Task created: {task_id}")
        return self.pending(str(task_id), payload=data, progress=0)

    async def check_status(self, handle: str) -> GenerationResult:
        response = await self._send(
            "GET",
            f"{KIE_API_BASE}/{STATUS_PATH}",
            headers=self._headers(),
            params={"taskId": handle},
        )
        record = self._check_envelope(self._json(response))

        flag = record.get("successFlag")
        status = record.get("status", "")

        if flag == 1 or status in SUCCESS_STATES:
            video_url = (
                dig(record, "response", "resultUrls", 0)
                or record.get("videoUrl")
                or record.get("resultUrl")
            )
            if video_url and not isinstance(video_url, str):
                raise TransientProviderError(self.name, "malformed response: video URL is not a string")
            if not video_url:
                return self.failed("task finished without a video URL", payload=record, handle=handle)
            return self.completed(MediaRef.from_url(video_url, "video/mp4"), payload=record, handle=handle)

        if flag in (2, 3) or status in FAILED_STATES:
            message = str(record.get("errorMessage") or record.get("message") or "Unknown Kie error")
            logger.warning(f"{self.tag} Task {handle} failed: {message}")
            return self.failed(message, payload=record, handle=handle)

        return self.pending(handle, payload=record, progress=clamp_progress(record.get("progress")))
