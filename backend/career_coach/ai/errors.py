"""
Failures raised by remote AI calls.

Every provider failure is mapped onto one of a closed set of variants so that
retry and fallback decisions are a plain lookup on ``kind``.
"""
from enum import Enum
from typing import Optional

QUOTA_CODES = {"insufficient_quota", "quota_exceeded", "resource_exhausted"}

# Wording that marks a RESOURCE_EXHAUSTED as a hard (daily or billing) quota
HARD_QUOTA_HINTS = ("per day", "perday", "daily", "billing")


class ErrorKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    SERVICE_UNAVAILABLE = "service_unavailable"
    QUOTA_EXCEEDED = "quota_exceeded"
    OTHER = "other"


class CallError(Exception):
    """Base class for a failed remote AI call."""

    kind = ErrorKind.OTHER

    def __init__(self, message: str = "", status: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message or f"AI call failed (status={status}, code={code})")
        self.status = status
        self.code = code

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status!r}, code={self.code!r})"


class RateLimited(CallError):
    kind = ErrorKind.RATE_LIMITED


class ServerError(CallError):
    kind = ErrorKind.SERVER_ERROR


class ServiceUnavailable(CallError):
    kind = ErrorKind.SERVICE_UNAVAILABLE


class QuotaExceeded(CallError):
    kind = ErrorKind.QUOTA_EXCEEDED


class OtherCallError(CallError):
    kind = ErrorKind.OTHER


class AIConfigurationError(Exception):
    """Raised before any network call when a provider is not configured."""


def _is_quota_code(code: Optional[str], message: str) -> bool:
    if isinstance(code, str) and code.lower() in QUOTA_CODES:
        # Gemini reports RESOURCE_EXHAUSTED for per-minute limits too; those stay retryable
        if code.lower() == "resource_exhausted":
            text = message.lower()
            return any(hint in text for hint in HARD_QUOTA_HINTS)
        return True
    return False


def classify_error(status: Optional[int], code: Optional[str] = None, message: str = "") -> CallError:
    """Map a raw provider failure onto a CallError variant."""
    if _is_quota_code(code, message):
        return QuotaExceeded(message, status=status, code=code)
    if status == 429:
        return RateLimited(message, status=status, code=code)
    if status == 500:
        return ServerError(message, status=status, code=code)
    if status == 503:
        return ServiceUnavailable(message, status=status, code=code)
    return OtherCallError(message, status=status, code=code)
