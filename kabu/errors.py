"""Error types raised by the lookup collaborators."""

from __future__ import annotations

from enum import Enum


class KabuErrorCode(Enum):
    """Error classification codes."""

    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    PROVIDER_ERROR = "provider_error"
    MALFORMED = "malformed"
    REGISTRY = "registry"


class KabuError(Exception):
    """Base error with a structured code and retryable flag.

    Attributes:
        message: Human-readable error description.
        code: Structured error code for programmatic handling.
        retryable: Whether a later attempt may succeed.
    """

    def __init__(
        self,
        message: str,
        code: KabuErrorCode = KabuErrorCode.PROVIDER_ERROR,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.retryable = retryable


class SearchError(KabuError):
    """The full-text symbol search failed."""


class QuoteFetchError(KabuError):
    """The quote summary for a symbol could not be fetched."""


class RankingFetchError(KabuError):
    """The market movers screen could not be fetched."""


class RegistryLoadError(KabuError):
    """The ticker registry file is missing or unreadable."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code=KabuErrorCode.REGISTRY)
