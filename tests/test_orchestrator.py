"""
Tests for the fallback orchestrator and provider sessions.
"""
import pytest

from adgen import config, metrics
from adgen.exceptions import (
    AuthenticationError,
    CompositionError,
    TerminalGenerationFailure,
    TransientProviderError,
)
from adgen.pipeline.models import GenerationStatus, MediaKind
from adgen.pipeline.orchestrator import FallbackOrchestrator, ProviderSession


@pytest.fixture
def orchestrator():
    return FallbackOrchestrator()


class TestFallbackOrder:
    """Providers are tried in order and the first success wins."""

    @pytest.mark.asyncio
    async def test_first_provider_wins(self, orchestrator, make_adapter, image_request):
        first = make_adapter("huggingface")
        second = make_adapter("replicate")

        result = await orchestrator.generate(image_request, [first, second])

        assert result.status == GenerationStatus.COMPLETED
        assert result.provider_name == "huggingface"
        assert result.attempts == ()
        assert second.submitted == []

    @pytest.mark.asyncio
    async def test_falls_back_after_failure(self, orchestrator, make_adapter, image_request):
        first = make_adapter("huggingface", outcomes=[TransientProviderError("huggingface", "HTTP 503: loading")])
        second = make_adapter("gemini")
        third = make_adapter("replicate")

        result = await orchestrator.generate(image_request, [first, second, third])

        assert result.provider_name == "gemini"
        assert not result.degraded
        assert len(result.attempts) == 1
        assert result.attempts[0].provider == "huggingface"
        assert result.attempts[0].reason == "HTTP 503: loading"
        assert third.submitted == []

    @pytest.mark.asyncio
    async def test_pending_counts_as_accepted(self, orchestrator, make_adapter, video_request):
        veo = make_adapter("gemini", media_kind=MediaKind.VIDEO, outcomes=["pending"])
        replicate = make_adapter("replicate", media_kind=MediaKind.VIDEO)

        result = await orchestrator.generate(video_request, [veo, replicate])

        assert result.status == GenerationStatus.PENDING
        assert result.operation_handle == "gemini-op-1"
        assert replicate.submitted == []

    @pytest.mark.asyncio
    async def test_unexpected_exception_falls_back(self, orchestrator, make_adapter, image_request):
        broken = make_adapter("huggingface", outcomes=[KeyError("predictions")])
        backup = make_adapter("replicate")

        result = await orchestrator.generate(image_request, [broken, backup])

        assert result.provider_name == "replicate"
        assert result.attempts[0].reason == "unexpected error: KeyError"

    @pytest.mark.asyncio
    async def test_wrong_media_kind_is_skipped(self, orchestrator, make_adapter, video_request):
        image_only = make_adapter("huggingface", media_kind=MediaKind.IMAGE)
        video = make_adapter("kie", media_kind=MediaKind.VIDEO)

        result = await orchestrator.generate(video_request, [image_only, video])

        assert result.provider_name == "kie"
        assert image_only.submitted == []
        assert result.attempts[0].provider == "huggingface"

    @pytest.mark.asyncio
    async def test_composition_error_propagates(self, orchestrator, make_adapter, image_request):
        adapter = make_adapter("huggingface", outcomes=[CompositionError("persona", "ghost")])

        with pytest.raises(CompositionError):
            await orchestrator.generate(image_request, [adapter])


class TestDegradedResult:
    """Every provider failed: a simulated result comes back instead of an error."""

    @pytest.mark.asyncio
    async def test_all_fail(self, orchestrator, make_adapter, video_request):
        adapters = [
            make_adapter("gemini", media_kind=MediaKind.VIDEO, outcomes=[TransientProviderError("gemini", "network error: ConnectError")]),
            make_adapter("replicate", media_kind=MediaKind.VIDEO, outcomes=[AuthenticationError("replicate", "credential rejected (HTTP 401)")]),
        ]

        result = await orchestrator.generate(video_request, adapters)

        assert result.status == GenerationStatus.COMPLETED
        assert result.provider_name == "simulation"
        assert result.degraded
        assert result.media.value == config.SIMULATION_VIDEO_URL
        assert [a.provider for a in result.attempts] == ["gemini", "replicate"]
        assert result.failure_summary() == (
            "gemini: network error: ConnectError\n"
            "replicate: credential rejected (HTTP 401)"
        )
        assert result.error.startswith("All video providers failed (gemini: network error")

    @pytest.mark.asyncio
    async def test_empty_chain(self, orchestrator, image_request):
        result = await orchestrator.generate(image_request, [])

        assert result.degraded
        assert result.media.kind == "inline"
        assert result.media.mime_type == "image/svg+xml"
        assert result.attempts == ()
        assert "no providers configured" in result.error
        assert metrics.get_snapshot()["counters"]["degraded.image"] == 1

    @pytest.mark.asyncio
    async def test_custom_placeholder(self, make_adapter, image_request):
        orchestrator = FallbackOrchestrator(placeholders={"image": "https://cdn.test/placeholder.png"})

        result = await orchestrator.generate(image_request, [])

        assert result.media.kind == "url"
        assert result.media.value == "https://cdn.test/placeholder.png"

    @pytest.mark.asyncio
    async def test_attempt_logs_do_not_leak_between_calls(self, orchestrator, make_adapter, image_request):
        flaky = make_adapter("huggingface", outcomes=[TransientProviderError("huggingface", "timeout"), "completed"])
        backup = make_adapter("replicate")

        first = await orchestrator.generate(image_request, [flaky, backup])
        second = await orchestrator.generate(image_request, [flaky, backup])

        assert len(first.attempts) == 1
        assert second.attempts == ()
        assert second.provider_name == "huggingface"


class TestTerminalFailure:
    """A job the provider accepted and then failed stops the fallback."""

    @pytest.mark.asyncio
    async def test_raised_terminal_failure(self, orchestrator, make_adapter, video_request):
        first = make_adapter("replicate", media_kind=MediaKind.VIDEO, outcomes=[TerminalGenerationFailure("replicate", "NSFW content detected")])
        second = make_adapter("kie", media_kind=MediaKind.VIDEO)

        result = await orchestrator.generate(video_request, [first, second])

        assert result.status == GenerationStatus.FAILED
        assert result.provider_name == "replicate"
        assert result.error == "NSFW content detected"
        assert second.submitted == []
        assert len(result.attempts) == 1

    @pytest.mark.asyncio
    async def test_failed_result_from_submit(self, orchestrator, make_adapter, video_request):
        first = make_adapter("gemini", media_kind=MediaKind.VIDEO, outcomes=["failed"])
        second = make_adapter("kie", media_kind=MediaKind.VIDEO)

        result = await orchestrator.generate(video_request, [first, second])

        assert result.status == GenerationStatus.FAILED
        assert not result.degraded
        assert second.submitted == []


class TestProviderSession:
    """Rejected credentials are not retried within a session."""

    @pytest.mark.asyncio
    async def test_auth_failure_disables_provider(self, orchestrator, make_adapter, image_request):
        session = ProviderSession()
        rejected = make_adapter("gemini", outcomes=[AuthenticationError("gemini", "credential rejected (HTTP 403)")])
        backup = make_adapter("replicate")

        await orchestrator.generate(image_request, [rejected, backup], session)
        result = await orchestrator.generate(image_request, [rejected, backup], session)

        assert len(rejected.submitted) == 1
        assert session.is_disabled(rejected)
        assert session.disabled_providers() == ["gemini"]
        assert "disabled for this session" in result.attempts[0].reason
        assert result.provider_name == "replicate"

    @pytest.mark.asyncio
    async def test_other_credential_not_disabled(self, orchestrator, make_adapter, image_request):
        session = ProviderSession()
        old_key = make_adapter("gemini", secret="old", outcomes=[AuthenticationError("gemini", "credential rejected (HTTP 401)")])
        new_key = make_adapter("gemini", secret="new")

        await orchestrator.generate(image_request, [old_key], session)
        result = await orchestrator.generate(image_request, [new_key], session)

        assert not session.is_disabled(new_key)
        assert result.provider_name == "gemini"

    @pytest.mark.asyncio
    async def test_without_session_auth_failure_is_retried(self, orchestrator, make_adapter, image_request):
        rejected = make_adapter("gemini", outcomes=[
            AuthenticationError("gemini", "credential rejected (HTTP 401)"),
            AuthenticationError("gemini", "credential rejected (HTTP 401)"),
        ])

        await orchestrator.generate(image_request, [rejected])
        await orchestrator.generate(image_request, [rejected])

        assert len(rejected.submitted) == 2


class TestMetrics:
    """Dispatch counters."""

    @pytest.mark.asyncio
    async def test_counters(self, orchestrator, make_adapter, image_request):
        first = make_adapter("huggingface", outcomes=[TransientProviderError("huggingface", "HTTP 500: boom")])
        second = make_adapter("replicate")

        await orchestrator.generate(image_request, [first, second])
        snapshot = metrics.get_snapshot()

        assert snapshot["counters"]["attempts.huggingface"] == 1
        assert snapshot["counters"]["failures.huggingface"] == 1
        assert snapshot["counters"]["success.replicate"] == 1
        assert snapshot["recent_errors"][0]["error_type"] == "transient"
        assert set(snapshot["latency"]) == {"huggingface", "replicate"}
