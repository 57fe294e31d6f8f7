"""AI commit message generator with cached, rate-limited LLM calls."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("commitmsg")
except PackageNotFoundError:
    # Fallback for development mode
    __version__ = "0.0.0-dev"
