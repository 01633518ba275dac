"""Error taxonomy for routing and dispatch.

Every failure the core can raise derives from RelayError so callers
(the CLI, an embedding UI) can catch one type:

- EmptyProviderSet: no provider has a credential; nothing to route to
- CredentialMissing: an adapter was invoked for a provider without a key
- UpstreamError: the backend answered with a non-success status or the
  request never completed
- UpstreamMalformed: the backend said success but the body did not parse
"""


class RelayError(Exception):
    """Base class for all relaychat failures."""


class EmptyProviderSet(RelayError):
    """Raised when routing is attempted with no available providers."""

    def __init__(self, message: str = "No API providers available"):
        super().__init__(message)


class CredentialMissing(RelayError):
    """Raised when a provider is called without a configured API key."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"{provider} API key is required")


class UpstreamError(RelayError):
    """The remote backend did not return a successful response."""

    def __init__(self, provider: str, status: int | None, message: str):
        self.provider = provider
        self.status = status
        self.message = message
        prefix = f"{provider} ({status})" if status is not None else provider
        super().__init__(f"{prefix}: {message}")


class UpstreamMalformed(RelayError):
    """A success response could not be mapped to the normalized shape."""

    def __init__(self, provider: str, detail: str = ""):
        self.provider = provider
        self.detail = detail
        message = f"Unexpected response from {provider}"
        if detail:
            message += f": {detail}"
        super().__init__(message)
