"""Application-wide constants."""

# Research results
UNKNOWN = "Unknown"  # Sentinel value for a field the provider could not find
DEFAULT_FIELD_HINT = "Search public sources"  # Guidance for fields without a known strategy

# Provider
DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"  # OpenAI-compatible chat completions
DEFAULT_MODEL = "perplexity/sonar-pro"  # Search-augmented model
DEFAULT_REFERER = "http://localhost:3000"  # OpenRouter HTTP-Referer attribution header
DEFAULT_APP_TITLE = "Company Research Tool"  # OpenRouter X-Title attribution header
DEFAULT_TIMEOUT = 120  # Per-request timeout in seconds

# Initial research pass
INITIAL_TEMPERATURE = 0.2  # Deterministic-leaning
INITIAL_MAX_TOKENS = 2000

# Enhancement pass (follow-up for unknown fields)
FOLLOWUP_TEMPERATURE = 0.3  # Slightly more exploratory than the initial pass
FOLLOWUP_MAX_TOKENS = 1500

# Batch scheduling
DEFAULT_CONCURRENCY_LIMIT = 3  # Concurrent in-flight company pipelines

# CSV enrichment
ERROR_COLUMN = "Research Error"  # Column that carries per-company failure messages

# Logging
MAX_COMPANY_NAME_LOG_LENGTH = 80  # Maximum company name length in logs (default)
MIN_COMPANY_NAME_TRUNCATE_LENGTH = 3  # Minimum length for truncation ellipsis
