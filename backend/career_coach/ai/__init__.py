"""Resilience layer for generative AI calls.

`retry_with_backoff` retries transient provider failures with exponential
backoff; `generate_template_response` produces deterministic stand-in content
when a workflow decides to degrade instead of failing.
"""

from .errors import (
    AIConfigurationError,
    CallError,
    ErrorKind,
    OtherCallError,
    QuotaExceeded,
    RateLimited,
    ServerError,
    ServiceUnavailable,
    classify_error,
)
from .retry import RetryPolicy, backoff_delay_ms, is_retryable, retry_with_backoff
from .templates import FallbackCategory, generate_template_response
