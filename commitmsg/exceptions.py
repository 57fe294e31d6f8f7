"""Exception classes shared across commitmsg.

Contains:
- CommitMsgError: Base exception for all commitmsg errors
- ConfigurationError: Raised when a persisted file is malformed
- PersistenceError: Raised when the cache or stats file cannot be written
- GenerationCancelled: Raised when a caller cancels a generation
- RateLimitAbort: Raised when cancelled while waiting for a rate limiter slot
- EmptyChangesError: Raised when there is nothing to describe
"""


class CommitMsgError(Exception):
    """Base exception for commitmsg errors."""

    pass


class ConfigurationError(CommitMsgError):
    """Raised when a cache, stats or config file cannot be parsed."""

    pass


class PersistenceError(CommitMsgError):
    """Raised when writing the cache or stats file fails.

    The in-memory state is already updated when this is raised.
    """

    pass


class GenerationCancelled(CommitMsgError):
    """Raised when the caller cancelled or the deadline expired."""

    pass


class RateLimitAbort(GenerationCancelled):
    """Raised when cancelled while waiting for a rate limiter slot."""

    pass


class EmptyChangesError(CommitMsgError):
    """Raised when the supplied changes are empty."""

    pass
