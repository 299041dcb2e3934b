"""
Environment configuration for the worker.

Provider priority is data, not code: each media kind reads an ordered,
comma-separated chain of provider names from the environment, e.g.

    IMAGE_PROVIDER_CHAIN=huggingface,gemini,replicate
    VIDEO_PROVIDER_CHAIN=gemini,replicate,kie

Providers listed in a chain only participate when a credential is present.
"""

import os
import logging

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()

# ── Provider chains ───────────────────────────────────────────────────────────

DEFAULT_IMAGE_CHAIN = "huggingface,gemini,replicate"
DEFAULT_VIDEO_CHAIN = "gemini,replicate,kie"

IMAGE_PROVIDER_CHAIN = os.environ.get("IMAGE_PROVIDER_CHAIN", DEFAULT_IMAGE_CHAIN)
VIDEO_PROVIDER_CHAIN = os.environ.get("VIDEO_PROVIDER_CHAIN", DEFAULT_VIDEO_CHAIN)

# ── Polling / transport ───────────────────────────────────────────────────────

POLL_INTERVAL = float(os.environ.get("POLL_INTERVAL", "10"))  # seconds
POLL_ERROR_BACKOFF = float(os.environ.get("POLL_ERROR_BACKOFF", "15"))  # seconds
HTTP_TIMEOUT = float(os.environ.get("HTTP_TIMEOUT", "60"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# ── Degraded-result placeholders ──────────────────────────────────────────────

SIMULATION_IMAGE_URI = os.environ.get(
    "SIMULATION_IMAGE_URI",
    "data:image/svg+xml;base64,"
    "PHN2ZyB4bWxucz0iaHR0cDovL3d3dy53My5vcmcvMjAwMC9zdmciIHdpZHRoPSIxMDI0IiBoZWln"
    "aHQ9IjEwMjQiPjxyZWN0IHdpZHRoPSIxMDAlIiBoZWlnaHQ9IjEwJSIgZmlsbD0iIzIyMiIvPjx0"
    "ZXh0IHg9IjUwJSIgeT0iNTAlIiBmb250LWZhbWlseT0iQXJpYWwiIGZvbnQtc2l6ZT0iNDAiIGZp"
    "bGw9IiM2NjYiIHRleHQtYW5jaG9yPSJtaWRkbGUiPlNpbXVsYXRlZCBNYXN0ZXIgSW1hZ2U8L3Rl"
    "eHQ+PC9zdmc+",
)
SIMULATION_VIDEO_URL = os.environ.get(
    "SIMULATION_VIDEO_URL",
    "https://commondatastorage.googleapis.com/gtv-videos-bucket/sample/BigBuckBunny.mp4",
)


def parse_chain(text: str) -> list[str]:
    """Split a comma-separated chain into lower-cased names, dropping blanks and repeats."""
    names: list[str] = []
    for part in (text or "").split(","):
        name = part.strip().lower()
        if name and name not in names:
            names.append(name)
    return names


def provider_chains() -> dict[str, list[str]]:
    """Ordered provider names keyed by media kind value ("image", "video")."""
    return {
        "image": parse_chain(IMAGE_PROVIDER_CHAIN),
        "video": parse_chain(VIDEO_PROVIDER_CHAIN),
    }


def credentials_from_env():
    """Read provider keys from the environment into a CredentialBundle. Missing keys stay unset."""
    from .pipeline.models import CredentialBundle

    bundle = CredentialBundle(
        gemini=os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY") or None,
        replicate=os.environ.get("REPLICATE_API_TOKEN") or None,
        huggingface=os.environ.get("HUGGINGFACE_TOKEN") or os.environ.get("HF_TOKEN") or None,
        kie=os.environ.get("KIE_API_KEY") or None,
    )
    logger.info(f"Credentials configured for: {bundle.configured() or 'none'}")
    return bundle
