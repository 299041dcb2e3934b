"""
Error taxonomy for prompt composition and provider dispatch.

  CompositionError          — a facet id did not resolve (caller error, never recovered)
  AuthenticationError       — credential missing or rejected by one provider
  TransientProviderError    — network failure or malformed response (fallback-eligible)
  TerminalGenerationFailure — provider accepted the job, then reported it failed
  AllProvidersExhausted     — every configured provider failed
"""


class AdGenError(Exception):
    """Base exception for the adgen worker."""


class CompositionError(AdGenError):
    """A facet identifier is missing from its catalog."""

    def __init__(self, catalog: str, key: str):
        self.catalog = catalog
        self.key = key
        super().__init__(f"Unknown {catalog}: {key!r}")


class ProviderError(AdGenError):
    """Base exception for provider errors."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        self.message = message
        super().__init__(f"[{provider}] {message}")


class AuthenticationError(ProviderError):
    """Credential missing or rejected. Disables the provider for the session."""


class TransientProviderError(ProviderError):
    """Transport failure or unusable response body."""

    def __init__(self, provider: str, message: str, status_code: int | None = None):
        super().__init__(provider, message)
        self.status_code = status_code


class TerminalGenerationFailure(ProviderError):
    """The provider consumed the job and reported that it failed."""


class AllProvidersExhausted(AdGenError):
    """Every provider in the chain failed; carries the ordered attempt log."""

    def __init__(self, media_kind: str, attempts):
        self.media_kind = media_kind
        self.attempts = tuple(attempts)
        if self.attempts:
            details = "; ".join(f"{a.provider}: {a.reason}" for a in self.attempts)
        else:
            details = "no providers configured"
        super().__init__(f"All {media_kind} providers failed ({details})")
