"""
Pytest configuration and fixtures for adgen tests.
"""
import os

import pytest

# Set test environment before importing app modules
for _key in (
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "REPLICATE_API_TOKEN",
    "HUGGINGFACE_TOKEN",
    "HF_TOKEN",
    "KIE_API_KEY",
):
    os.environ[_key] = ""
os.environ["POLL_INTERVAL"] = "10"
os.environ["POLL_ERROR_BACKOFF"] = "15"

from adgen import metrics
from adgen.base import ProviderAdapter
from adgen.pipeline.models import (
    CredentialBundle,
    FacetSelection,
    GenerationRequest,
    MediaKind,
    MediaRef,
    ProviderCredential,
    SceneType,
    StoryboardFacets,
)


class ScriptedAdapter(ProviderAdapter):
    """
    Adapter whose submit/check_status answers are scripted.

    Each outcome is either an exception instance (raised) or one of the
    strings "completed", "pending", "failed".
    """

    asynchronous = True

    def __init__(self, name, media_kind=MediaKind.IMAGE, outcomes=(), statuses=(), secret=None):
        super().__init__(ProviderCredential(provider=name, secret=secret or f"{name}-secret"))
        self.name = name
        self.label = name
        self.media_kind = media_kind
        self.outcomes = list(outcomes)
        self.statuses = list(statuses)
        self.submitted = []
        self.checked = []

    def _answer(self, outcome, handle):
        if isinstance(outcome, Exception):
            raise outcome
        if outcome == "pending":
            return self.pending(handle, progress=len(self.checked) * 10)
        if outcome == "failed":
            return self.failed("job failed upstream", handle=handle)
        return self.completed(MediaRef.from_url(f"https://cdn.test/{self.name}/{handle}.bin"), handle=handle)

    async def submit(self, request):
        self.submitted.append(request)
        outcome = self.outcomes.pop(0) if self.outcomes else "completed"
        return self._answer(outcome, f"{self.name}-op-{len(self.submitted)}")

    async def check_status(self, handle):
        self.checked.append(handle)
        outcome = self.statuses.pop(0) if self.statuses else "completed"
        return self._answer(outcome, handle)


class FakeSleep:
    """Records requested delays instead of waiting."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.fixture(autouse=True)
def clean_metrics():
    metrics.reset()
    yield
    metrics.reset()


@pytest.fixture
def make_adapter():
    """Factory for scripted provider adapters."""
    return ScriptedAdapter


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture
def storyboard_facets():
    return StoryboardFacets(
        persona="indonesian_woman_fair",
        background="modern_living_room",
        niche="herbal",
        style="vlog",
        product_name="Jamu Kunyit Asam",
    )


@pytest.fixture
def hook_selection(storyboard_facets):
    return FacetSelection(**storyboard_facets.model_dump(), scene_type=SceneType.HOOK)


@pytest.fixture
def image_request():
    return GenerationRequest(
        prompt="Professional product photography of a bottle",
        negative_prompt="blurry",
        media_kind=MediaKind.IMAGE,
        aspect_ratio="1:1",
        width=1024,
        height=1024,
    )


@pytest.fixture
def video_request():
    return GenerationRequest(
        prompt="Young woman holding a bottle",
        negative_prompt="blurry",
        media_kind=MediaKind.VIDEO,
        seed=123456,
    )


@pytest.fixture
def all_credentials():
    return CredentialBundle(
        gemini="gemini-test-key",
        replicate="r8_test_token",
        huggingface="hf_test_token",
        kie="kie-test-key",
    )
