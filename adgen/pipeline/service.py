"""
AdGenerationService — the entry point collaborators call.

Wires the prompt engine, the provider factory, the fallback orchestrator and
the operation poller together:

  facets → storyboard → per-scene request → orchestrator → adapter(s)
         → result (PENDING → poller → COMPLETED | FAILED)

Credentials are resolved per call: secrets supplied with a request override
the ones from the environment, provider by provider.
"""

import asyncio
import logging
from typing import Optional

import httpx

from .. import config, prompt_engine
from ..exceptions import AuthenticationError
from ..gemini import describe_product_image
from ..provider_factory import ProviderFactory
from .models import (
    CredentialBundle,
    FacetSelection,
    GenerationRequest,
    GenerationResult,
    MediaKind,
    ProjectResponse,
    SceneDescriptor,
    SceneResult,
    StoryboardFacets,
)
from .orchestrator import FallbackOrchestrator, ProviderSession
from .poller import OperationPoller, ResultCallback

logger = logging.getLogger(__name__)


class AdGenerationService:
    """
    Usage:
        service = AdGenerationService()

        scenes = service.storyboard(StoryboardFacets(...))
        result = await service.generate_scene(scenes[0])
        final = await service.wait_for_result(result, timeout=600)
    """

    def __init__(
        self,
        factory: Optional[ProviderFactory] = None,
        orchestrator: Optional[FallbackOrchestrator] = None,
        poller: Optional[OperationPoller] = None,
        credentials: Optional[CredentialBundle] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.factory = factory or ProviderFactory()
        self.orchestrator = orchestrator or FallbackOrchestrator()
        self.poller = poller or OperationPoller()
        self.credentials = credentials if credentials is not None else config.credentials_from_env()
        self._client = client
        # Rejected (provider, credential) pairs stay disabled for the life of the service
        self.session = ProviderSession()

    def _credentials(self, override: Optional[CredentialBundle]) -> CredentialBundle:
        return self.credentials.merged(override)

    # ── Prompts ──────────────────────────────────────────────────────────

    def compose(self, selection: FacetSelection) -> SceneDescriptor:
        return prompt_engine.compose(selection)

    def storyboard(self, facets: StoryboardFacets) -> tuple[SceneDescriptor, ...]:
        return prompt_engine.build_storyboard(facets)

    # ── Generation ───────────────────────────────────────────────────────

    async def generate(
        self,
        request: GenerationRequest,
        credentials: Optional[CredentialBundle] = None,
        session: Optional[ProviderSession] = None,
    ) -> GenerationResult:
        """
        Dispatch any request through the configured chain for its media kind.
        Without an explicit session the service-wide one is used.
        """
        adapters = self.factory.build(request.media_kind, self._credentials(credentials), client=self._client)
        return await self.orchestrator.generate(request, adapters, session if session is not None else self.session)

    async def generate_image(
        self,
        request: GenerationRequest,
        credentials: Optional[CredentialBundle] = None,
        session: Optional[ProviderSession] = None,
    ) -> GenerationResult:
        if request.media_kind != MediaKind.IMAGE:
            raise ValueError("generate_image() needs an image request")
        return await self.generate(request, credentials, session)

    async def generate_master_image(
        self,
        product_name: str,
        background: str,
        style: str,
        seed: Optional[int] = None,
        credentials: Optional[CredentialBundle] = None,
        session: Optional[ProviderSession] = None,
    ) -> GenerationResult:
        request = prompt_engine.compose_master_image(product_name, background, style, seed=seed)
        logger.info(f"Generating master image for {product_name!r} (seed={seed})")
        return await self.generate(request, credentials, session)

    async def generate_scene(
        self,
        scene: SceneDescriptor,
        credentials: Optional[CredentialBundle] = None,
        session: Optional[ProviderSession] = None,
    ) -> GenerationResult:
        logger.info(f"Generating scene {scene.scene_number} ({scene.scene_type.value})")
        return await self.generate(scene.request, credentials, session)

    async def generate_project(
        self,
        facets: StoryboardFacets,
        credentials: Optional[CredentialBundle] = None,
        reference_image: Optional[str] = None,
    ) -> ProjectResponse:
        """
        Compose the storyboard and submit every scene, one after another.

        Scenes share the service-wide ProviderSession, so a rejected key is
        tried at most once. Async providers leave scenes PENDING; poll them with
        wait_for_result() or check_status().
        """
        storyboard = self.storyboard(facets)
        scenes = []

        for scene in storyboard:
            if reference_image:
                scene = scene.model_copy(
                    update={"request": scene.request.model_copy(update={"reference_image": reference_image})}
                )
            result = await self.generate_scene(scene, credentials)
            scenes.append(SceneResult(
                scene_number=scene.scene_number,
                scene_type=scene.scene_type,
                prompt=scene.request.prompt,
                result=result,
            ))

        degraded = sum(1 for s in scenes if s.result.degraded)
        logger.info(f"Project submitted: {len(scenes)} scenes, {degraded} simulated")
        return ProjectResponse(storyboard=list(storyboard), scenes=scenes)

    # ── Operations ───────────────────────────────────────────────────────

    def _adapter(self, provider: str, kind: MediaKind, credentials: Optional[CredentialBundle]):
        adapter = self.factory.adapter_for(kind, provider, self._credentials(credentials), client=self._client)
        if adapter is None:
            raise AuthenticationError(provider, "credential missing")
        return adapter

    async def check_status(
        self,
        provider: str,
        kind: MediaKind,
        handle: str,
        credentials: Optional[CredentialBundle] = None,
    ) -> GenerationResult:
        """One status check, errors propagate to the caller."""
        return await self._adapter(provider, kind, credentials).check_status(handle)

    async def wait_for_result(
        self,
        result: GenerationResult,
        credentials: Optional[CredentialBundle] = None,
        timeout: Optional[float] = None,
        on_update: Optional[ResultCallback] = None,
        on_terminal: Optional[ResultCallback] = None,
    ) -> GenerationResult:
        """
        Poll a PENDING result to completion. Terminal results come straight back.

        Raises:
            asyncio.TimeoutError: when `timeout` seconds pass first.
        """
        if result.is_terminal:
            return result

        adapter = self._adapter(result.provider_name, result.media_kind, credentials)
        polling = self.poller.poll(result.operation_handle, adapter, on_terminal, on_update)
        if timeout is None:
            return await polling
        return await asyncio.wait_for(polling, timeout)

    async def describe_product(self, image: str, credentials: Optional[CredentialBundle] = None) -> str:
        credential = self._credentials(credentials).for_provider("gemini")
        if credential is None:
            raise AuthenticationError("gemini", "credential missing")
        return await describe_product_image(image, credential, client=self._client)
