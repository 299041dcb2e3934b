"""
Pydantic models and enums for prompt composition and generation dispatch.
"""

import base64
import hashlib
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


# ── Enums ────────────────────────────────────────────────────────────────────

class MediaKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


class SceneType(str, Enum):
    HOOK = "HOOK"
    BENEFIT = "BENEFIT"
    DEMO = "DEMO"
    CTA = "CTA"


# Narrative order of a storyboard
SCENE_ORDER = (SceneType.HOOK, SceneType.BENEFIT, SceneType.DEMO, SceneType.CTA)


class GenerationStatus(str, Enum):
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    PENDING = "PENDING"


TERMINAL_STATUSES = (GenerationStatus.COMPLETED, GenerationStatus.FAILED)

SIMULATION_PROVIDER = "simulation"


# ── Facet selections ─────────────────────────────────────────────────────────

class StoryboardFacets(BaseModel):
    """Facets shared by every scene of a storyboard."""
    model_config = ConfigDict(frozen=True)

    persona: str
    background: str
    niche: str
    style: str
    product_name: str = ""


class FacetSelection(StoryboardFacets):
    """Facets for composing one scene."""

    scene_type: SceneType
    action_override: Optional[str] = None


# ── Requests / scenes ────────────────────────────────────────────────────────

class GenerationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    prompt: str
    negative_prompt: str = ""
    media_kind: MediaKind
    aspect_ratio: str = "9:16"
    duration_seconds: int = 4
    width: int = 768
    height: int = 1344
    seed: Optional[int] = None
    reference_image: Optional[str] = Field(
        default=None,
        description="Opaque product reference image, forwarded untouched",
    )


class SceneDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    scene_number: int = Field(..., ge=1)
    scene_type: SceneType
    request: GenerationRequest


# ── Results ──────────────────────────────────────────────────────────────────

class MediaRef(BaseModel):
    """Where the generated bytes live: an inline data URI or a remote URL."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["inline", "url"]
    value: str
    mime_type: Optional[str] = None

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: str) -> "MediaRef":
        return cls.from_base64(base64.b64encode(data).decode("ascii"), mime_type)

    @classmethod
    def from_base64(cls, b64data: str, mime_type: str) -> "MediaRef":
        return cls(kind="inline", value=f"data:{mime_type};base64,{b64data}", mime_type=mime_type)

    @classmethod
    def from_url(cls, url: str, mime_type: Optional[str] = None) -> "MediaRef":
        if url.startswith("data:"):
            mime = url[5:].split(";", 1)[0] or mime_type
            return cls(kind="inline", value=url, mime_type=mime)
        return cls(kind="url", value=url, mime_type=mime_type)


class AttemptLogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: str
    reason: str


class GenerationResult(BaseModel):
    """
    Normalized outcome of one provider call or status check.

    A new instance is produced for every poll; instances are never mutated.
    """
    model_config = ConfigDict(frozen=True)

    status: GenerationStatus
    provider_name: str
    media_kind: MediaKind
    media: Optional[MediaRef] = None
    operation_handle: Optional[str] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    error: Optional[str] = None
    raw_provider_payload: Optional[Any] = None
    attempts: tuple[AttemptLogEntry, ...] = ()

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def degraded(self) -> bool:
        return self.provider_name == SIMULATION_PROVIDER

    def failure_summary(self) -> str:
        """One line per failed provider, in the order they were tried."""
        return "\n".join(f"{a.provider}: {a.reason}" for a in self.attempts)


# ── Credentials ──────────────────────────────────────────────────────────────

class ProviderCredential(BaseModel):
    """Secret scoped to one provider. repr/str never reveal the secret."""
    model_config = ConfigDict(frozen=True)

    provider: str
    secret: SecretStr

    def fingerprint(self) -> str:
        """Stable, non-reversible id for session bookkeeping."""
        return hashlib.sha256(self.secret.get_secret_value().encode()).hexdigest()[:16]


PROVIDER_NAMES = ("gemini", "replicate", "huggingface", "kie")


class CredentialBundle(BaseModel):
    """Named provider secrets. Any subset may be populated."""
    model_config = ConfigDict(frozen=True)

    gemini: Optional[SecretStr] = None
    replicate: Optional[SecretStr] = None
    huggingface: Optional[SecretStr] = None
    kie: Optional[SecretStr] = None

    @field_validator("gemini", "replicate", "huggingface", "kie", mode="before")
    @classmethod
    def _blank_is_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def for_provider(self, provider: str) -> Optional[ProviderCredential]:
        secret = getattr(self, provider, None) if provider in PROVIDER_NAMES else None
        if secret is None:
            return None
        return ProviderCredential(provider=provider, secret=secret)

    def configured(self) -> list[str]:
        return [name for name in PROVIDER_NAMES if getattr(self, name) is not None]

    def merged(self, override: Optional["CredentialBundle"]) -> "CredentialBundle":
        """Return a bundle where every secret set in `override` wins."""
        if override is None:
            return self
        values = {name: getattr(override, name) or getattr(self, name) for name in PROVIDER_NAMES}
        return CredentialBundle(**values)


# ── API Request Models ───────────────────────────────────────────────────────

class ComposeRequest(FacetSelection):
    """Compose a single scene prompt."""


class StoryboardRequest(StoryboardFacets):
    """Compose all four scene prompts."""


class GenerateImageRequest(BaseModel):
    prompt: str
    negative_prompt: str = ""
    aspect_ratio: str = "1:1"
    width: int = 1024
    height: int = 1024
    seed: Optional[int] = None
    credentials: Optional[CredentialBundle] = None


class MasterImageRequest(BaseModel):
    product_name: str
    background: str
    style: str
    seed: Optional[int] = None
    credentials: Optional[CredentialBundle] = None


class SceneGenerateRequest(BaseModel):
    scene: SceneDescriptor
    credentials: Optional[CredentialBundle] = None


class ProjectRequest(StoryboardFacets):
    reference_image: Optional[str] = None
    credentials: Optional[CredentialBundle] = None


class OperationStatusRequest(BaseModel):
    provider: str
    media_kind: MediaKind = MediaKind.VIDEO
    handle: str
    credentials: Optional[CredentialBundle] = None


class DescribeProductRequest(BaseModel):
    image: str = Field(..., description="Base64 image data or a data: URI")
    credentials: Optional[CredentialBundle] = None


# ── API Response Models ──────────────────────────────────────────────────────

class SceneResult(BaseModel):
    scene_number: int
    scene_type: SceneType
    prompt: str
    result: GenerationResult


class ProjectResponse(BaseModel):
    storyboard: list[SceneDescriptor]
    scenes: list[SceneResult] = Field(default_factory=list)


class DescribeProductResponse(BaseModel):
    description: str
