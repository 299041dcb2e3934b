"""
Provider registry and chain builder.

Priority is configuration: the factory turns an ordered list of provider
names per media kind into adapter instances, one per (provider, credential)
pair, skipping providers that have no credential.
"""

import logging
from typing import Optional

import httpx

from . import config
from .base import ProviderAdapter
from .gemini import GeminiImageAdapter, VeoVideoAdapter
from .huggingface import HuggingFaceImageAdapter
from .kie import KieVideoAdapter
from .pipeline.models import CredentialBundle, MediaKind
from .replicate import ReplicateImageAdapter, ReplicateVideoAdapter

logger = logging.getLogger(__name__)

ADAPTERS: dict[tuple[MediaKind, str], type[ProviderAdapter]] = {
    (MediaKind.IMAGE, "huggingface"): HuggingFaceImageAdapter,
    (MediaKind.IMAGE, "gemini"): GeminiImageAdapter,
    (MediaKind.IMAGE, "replicate"): ReplicateImageAdapter,
    (MediaKind.VIDEO, "gemini"): VeoVideoAdapter,
    (MediaKind.VIDEO, "replicate"): ReplicateVideoAdapter,
    (MediaKind.VIDEO, "kie"): KieVideoAdapter,
}


class UnknownProviderError(ValueError):
    """No adapter is registered for a (media kind, provider) pair."""


class ProviderFactory:
    def __init__(self, chains: Optional[dict] = None):
        chains = chains if chains is not None else config.provider_chains()
        self.chains: dict[MediaKind, list[str]] = {
            MediaKind(kind): list(names) for kind, names in chains.items()
        }
        for kind, names in self.chains.items():
            for name in names:
                if (kind, name) not in ADAPTERS:
                    raise UnknownProviderError(f"No {kind.value} adapter named {name!r}")

    def chain(self, kind: MediaKind) -> list[str]:
        return list(self.chains.get(MediaKind(kind), []))

    def build(
        self,
        kind: MediaKind,
        credentials: CredentialBundle,
        client: Optional[httpx.AsyncClient] = None,
    ) -> list[ProviderAdapter]:
        """Adapters for `kind` in priority order, credential-gated."""
        kind = MediaKind(kind)
        adapters = []
        for name in self.chain(kind):
            credential = credentials.for_provider(name)
            if credential is None:
                logger.info(f"Skipping {name} for {kind.value}: no credential")
                continue
            adapters.append(ADAPTERS[(kind, name)](credential, client=client))
        logger.info(f"{kind.value} chain: {[a.name for a in adapters] or 'empty'}")
        return adapters

    def adapter_for(
        self,
        kind: MediaKind,
        provider: str,
        credentials: CredentialBundle,
        client: Optional[httpx.AsyncClient] = None,
    ) -> Optional[ProviderAdapter]:
        """
        A single adapter, e.g. to check the status of an operation it started.
        Returns None when the provider has no credential.
        """
        kind = MediaKind(kind)
        adapter_cls = ADAPTERS.get((kind, provider))
        if adapter_cls is None:
            raise UnknownProviderError(f"No {kind.value} adapter named {provider!r}")
        credential = credentials.for_provider(provider)
        if credential is None:
            return None
        return adapter_cls(credential, client=client)
