"""Configuration for commitmsg LLM providers and stores.

Configuration is loaded from ~/.commitmsg/config.yaml
Use 'commitmsg config' commands to modify settings.
"""

from enum import Enum


class LLMProvider(Enum):
    """Supported LLM providers."""

    OPENAI = "openai"
    CLAUDE = "claude"
    GEMINI = "gemini"
    GROK = "grok"
    GROQ = "groq"
    OLLAMA = "ollama"


# ============================================================
# DEFAULT FALLBACK VALUES
# ============================================================
# These are used only if ~/.commitmsg/config.yaml doesn't set them

DEFAULT_PROVIDER = LLMProvider.GEMINI
DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_MAX_TOKENS = 1500
DEFAULT_TEMPERATURE = 0.3

# Maximum number of generation calls in flight at once, across providers
DEFAULT_MAX_CONCURRENT = 5

# Cache policy
DEFAULT_CACHE_ENABLED = True
DEFAULT_CACHE_MAX_ENTRIES = 500
DEFAULT_CACHE_MAX_AGE_DAYS = 30
DEFAULT_CACHE_CLEANUP_INTERVAL_HOURS = 24

CACHE_FILE_NAME = "cache.json"
STATS_FILE_NAME = "usage_stats.json"

DEFAULT_LOG_LEVEL = "WARNING"


# ============================================================
# ACTIVE CONFIGURATION (loaded from global config)
# ============================================================

# Initially set to defaults - will be overridden by load_config()
ACTIVE_PROVIDER = DEFAULT_PROVIDER
ACTIVE_MODEL = DEFAULT_MODEL
MAX_TOKENS = DEFAULT_MAX_TOKENS
TEMPERATURE = DEFAULT_TEMPERATURE


def load_config() -> None:
    """Load provider settings from the global config file.

    This should be called by the CLI before using the LLM.

    Raises:
        ConfigurationError: If the config file is malformed.
    """
    global ACTIVE_PROVIDER, ACTIVE_MODEL, MAX_TOKENS, TEMPERATURE

    # Import here to avoid circular dependency
    from commitmsg import global_config

    provider = global_config.get_active_provider()
    model = global_config.get_active_model()
    max_tokens = global_config.get_max_tokens()
    temperature = global_config.get_temperature()

    if provider:
        ACTIVE_PROVIDER = provider
        ACTIVE_MODEL = DEFAULT_MODELS[provider]
    if model:
        ACTIVE_MODEL = model
    if max_tokens is not None:
        MAX_TOKENS = max_tokens
    if temperature is not None:
        TEMPERATURE = temperature


# ============================================================
# AVAILABLE MODELS PER PROVIDER
# ============================================================

AVAILABLE_MODELS = {
    LLMProvider.OPENAI: [
        "gpt-4o",
        "gpt-4o-mini",
        "gpt-4.1",
        "gpt-4.1-mini",
    ],
    LLMProvider.CLAUDE: [
        "claude-sonnet-4-20250514",
        "claude-3-5-sonnet-latest",
        "claude-3-5-haiku-latest",
    ],
    LLMProvider.GEMINI: [
        "gemini-2.0-flash",
        "gemini-2.0-flash-lite",
        "gemini-2.5-flash",
        "gemini-2.5-pro",
    ],
    LLMProvider.GROK: [
        "grok-2-latest",
        "grok-3-mini",
    ],
    LLMProvider.GROQ: [
        "llama-3.3-70b-versatile",
        "llama-3.1-8b-instant",
    ],
    LLMProvider.OLLAMA: [
        "llama3.1",
        "qwen2.5-coder",
    ],
}

DEFAULT_MODELS = {provider: models[0] for provider, models in AVAILABLE_MODELS.items()}


# ============================================================
# API KEY ENVIRONMENT VARIABLES
# ============================================================

API_KEY_ENV_VARS = {
    LLMProvider.OPENAI: "OPENAI_API_KEY",
    LLMProvider.CLAUDE: "CLAUDE_API_KEY",
    LLMProvider.GEMINI: "GEMINI_API_KEY",
    LLMProvider.GROK: "GROK_API_KEY",
    LLMProvider.GROQ: "GROQ_API_KEY",
}

# OpenAI-compatible endpoints
GROK_BASE_URL = "https://api.x.ai/v1"
OLLAMA_BASE_URL = "http://localhost:11434/v1"


# ============================================================
# PRICING (USD per million tokens: input, output)
# ============================================================

MODEL_PRICING = {
    "gpt-4o": (2.50, 10.00),
    "gpt-4o-mini": (0.15, 0.60),
    "gpt-4.1": (2.00, 8.00),
    "gpt-4.1-mini": (0.40, 1.60),
    "claude-sonnet-4-20250514": (3.00, 15.00),
    "claude-3-5-sonnet-latest": (3.00, 15.00),
    "claude-3-5-haiku-latest": (0.80, 4.00),
    "gemini-2.0-flash": (0.10, 0.40),
    "gemini-2.0-flash-lite": (0.075, 0.30),
    "gemini-2.5-flash": (0.30, 2.50),
    "gemini-2.5-pro": (1.25, 10.00),
    "grok-2-latest": (2.00, 10.00),
    "grok-3-mini": (0.30, 0.50),
    "llama-3.3-70b-versatile": (0.59, 0.79),
    "llama-3.1-8b-instant": (0.05, 0.08),
}


def get_api_key_env_var(provider: LLMProvider) -> str:
    """Get the environment variable name for the API key.

    Args:
        provider: The LLM provider.

    Returns:
        The environment variable name.

    Raises:
        KeyError: If the provider does not use an API key.
    """
    return API_KEY_ENV_VARS[provider]
