"""Cache utility functions for commitmsg.

Contains:
- compute_fingerprint: Compute the cache key for a generation request
"""

import hashlib
from typing import Optional, Union

from commitmsg.config import LLMProvider


def _provider_id(provider: Union[LLMProvider, str]) -> str:
    if isinstance(provider, LLMProvider):
        return provider.value
    return str(provider)


def compute_fingerprint(
    changes: str,
    provider: Union[LLMProvider, str],
    style_instruction: Optional[str] = None,
    attempt: int = 1,
) -> str:
    """Compute the SHA256 fingerprint of a generation request.

    Each field is length-prefixed so that moving text between fields
    (e.g. the end of the diff into the style instruction) changes the hash.

    Args:
        changes: The diff text.
        provider: The provider identifier.
        style_instruction: Optional style instruction text.
        attempt: Attempt index for regenerating the same request.

    Returns:
        SHA256 hex digest identifying the request.
    """
    digest = hashlib.sha256()
    for part in (changes, _provider_id(provider), style_instruction or "", str(attempt)):
        encoded = part.encode("utf-8")
        digest.update(str(len(encoded)).encode("ascii"))
        digest.update(b"\x00")
        digest.update(encoded)
    return digest.hexdigest()
