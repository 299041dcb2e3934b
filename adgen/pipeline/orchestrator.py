"""
FallbackOrchestrator — turns one GenerationRequest into one GenerationResult.

Providers are tried strictly one after another in the order given, never in
parallel. The first provider that accepts the job wins. Every failure is
appended to an attempt log owned by the call. If nobody succeeds, a
"simulation" result pointing at a static placeholder is returned instead of
raising, with the full attempt log attached.

Usage:
    orchestrator = FallbackOrchestrator()
    adapters = factory.build(MediaKind.VIDEO, credentials)
    result = await orchestrator.generate(scene.request, adapters, session)
    if result.degraded:
        print(result.failure_summary())
"""

import time
import logging
from typing import Iterable, Optional

from .. import config, metrics
from ..base import ProviderAdapter
from ..exceptions import (
    AllProvidersExhausted,
    AuthenticationError,
    CompositionError,
    TerminalGenerationFailure,
    TransientProviderError,
)
from .models import (
    SIMULATION_PROVIDER,
    AttemptLogEntry,
    GenerationRequest,
    GenerationResult,
    GenerationStatus,
    MediaKind,
    MediaRef,
)

logger = logging.getLogger(__name__)


class ProviderSession:
    """
    Per-caller memory of (provider, credential) pairs whose credential was
    rejected. A disabled pair is skipped until the session is discarded.
    """

    def __init__(self):
        self._disabled: dict[tuple[str, str], str] = {}

    def disable(self, adapter: ProviderAdapter, reason: str):
        self._disabled[adapter.session_key] = reason
        logger.warning(f"{adapter.tag} Disabled for this session: {reason}")

    def is_disabled(self, adapter: ProviderAdapter) -> bool:
        return adapter.session_key in self._disabled

    def reason(self, adapter: ProviderAdapter) -> Optional[str]:
        return self._disabled.get(adapter.session_key)

    def disabled_providers(self) -> list[str]:
        return sorted({name for name, _ in self._disabled})


class FallbackOrchestrator:
    def __init__(self, placeholders: Optional[dict] = None):
        self.placeholders = {
            MediaKind.IMAGE: config.SIMULATION_IMAGE_URI,
            MediaKind.VIDEO: config.SIMULATION_VIDEO_URL,
        }
        if placeholders:
            self.placeholders.update({MediaKind(k): v for k, v in placeholders.items()})

    async def generate(
        self,
        request: GenerationRequest,
        providers: Iterable[ProviderAdapter],
        session: Optional[ProviderSession] = None,
    ) -> GenerationResult:
        """
        Try each provider in order until one accepts the request.

        Args:
            request:   The composed request.
            providers: Ordered, credential-filtered adapters for this media kind.
            session:   Optional session; credentials rejected here are skipped
                       by later calls sharing the same session.

        Returns:
            COMPLETED or PENDING from the first provider that accepted the job,
            FAILED if an accepted job was reported failed, or a degraded
            COMPLETED "simulation" result when every provider failed.
        """
        attempts: list[AttemptLogEntry] = []

        for adapter in providers:
            if adapter.media_kind != request.media_kind:
                self._log_failure(
                    attempts, adapter, f"does not generate {request.media_kind.value}", "skipped"
                )
                continue
            if session is not None and session.is_disabled(adapter):
                self._log_failure(
                    attempts, adapter, f"disabled for this session ({session.reason(adapter)})", "skipped"
                )
                continue

            metrics.inc_counter(f"attempts.{adapter.name}")
            started = time.perf_counter()
            try:
                result = await adapter.submit(request)
            except CompositionError:
                raise
            except AuthenticationError as e:
                self._log_failure(attempts, adapter, e.message, "auth")
                if session is not None:
                    session.disable(adapter, e.message)
                continue
            except TerminalGenerationFailure as e:
                self._log_failure(attempts, adapter, e.message, "terminal")
                return adapter.failed(e.message).model_copy(update={"attempts": tuple(attempts)})
            except TransientProviderError as e:
                self._log_failure(attempts, adapter, e.message, "transient")
                continue
            except Exception as e:
                logger.error(f"{adapter.tag} Unexpected adapter error: {e}", exc_info=True)
                self._log_failure(attempts, adapter, f"unexpected error: {type(e).__name__}", "unexpected")
                continue
            finally:
                metrics.record_latency(adapter.name, (time.perf_counter() - started) * 1000)

            if result.status == GenerationStatus.FAILED:
                self._log_failure(attempts, adapter, result.error or "generation failed", "terminal")
                return result.model_copy(update={"attempts": tuple(attempts)})

            metrics.inc_counter(f"success.{adapter.name}")
            logger.info(f"{adapter.tag} Accepted {request.media_kind.value} request → {result.status.value}")
            return result.model_copy(update={"attempts": tuple(attempts)})

        return self._degraded(request, attempts)

    def _log_failure(self, attempts: list, adapter: ProviderAdapter, reason: str, error_type: str):
        attempts.append(AttemptLogEntry(provider=adapter.name, reason=reason))
        metrics.inc_counter(f"failures.{adapter.name}")
        metrics.record_error(adapter.name, error_type, reason)
        logger.warning(f"{adapter.tag} Generation failed ({error_type}): {reason}")

    def _degraded(self, request: GenerationRequest, attempts: list[AttemptLogEntry]) -> GenerationResult:
        exhausted = AllProvidersExhausted(request.media_kind.value, attempts)
        metrics.inc_counter(f"degraded.{request.media_kind.value}")
        logger.warning(f"Returning simulated {request.media_kind.value}: {exhausted}")
        return GenerationResult(
            status=GenerationStatus.COMPLETED,
            provider_name=SIMULATION_PROVIDER,
            media_kind=request.media_kind,
            media=MediaRef.from_url(self.placeholders[request.media_kind]),
            progress=100,
            error=str(exhausted),
            attempts=exhausted.attempts,
        )
