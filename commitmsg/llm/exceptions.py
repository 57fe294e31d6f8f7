"""LLM-related exception classes.

Contains all exception classes for provider operations:
- ProviderError: Base exception for provider failures (network, auth, quota)
- MissingAPIKeyError: Raised when API key is not set
"""

from commitmsg.exceptions import CommitMsgError


class ProviderError(CommitMsgError):
    """Base exception for LLM provider errors."""

    pass


class MissingAPIKeyError(ProviderError):
    """Raised when the required API key is not set."""

    pass
