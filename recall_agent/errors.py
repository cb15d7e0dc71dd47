"""
Exception hierarchy for the Recall competition client.
"""

from dataclasses import dataclass
from typing import Any, List, Optional


class RecallError(Exception):
    """Base class for every error raised by recall_agent."""


class ConfigurationError(RecallError):
    """Raised when settings are missing or unusable."""


@dataclass(frozen=True)
class ValidationIssue:
    """A single field-level schema violation."""
    path: str
    message: str
    kind: str = "value_error"

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class ValidationError(RecallError):
    """
    Malformed input or response.

    Never retried. ``issues`` lists every violation found, using wire
    (camelCase) field names in each path.
    """

    def __init__(self, issues: List[ValidationIssue], context: Optional[str] = None):
        self.issues = list(issues)
        self.context = context
        detail = "; ".join(str(issue) for issue in self.issues) or "invalid data"
        prefix = f"{context}: " if context else ""
        super().__init__(f"{prefix}{detail}")

    @classmethod
    def single(cls, path: str, message: str, kind: str = "value_error",
               context: Optional[str] = None) -> "ValidationError":
        return cls([ValidationIssue(path=path, message=message, kind=kind)], context=context)

    @property
    def paths(self) -> List[str]:
        return [issue.path for issue in self.issues]


class NetworkError(RecallError):
    """Connection failure or timeout, raised once retries are exhausted."""

    def __init__(self, message: str, attempts: int = 1):
        self.attempts = attempts
        super().__init__(message)


class HttpStatusError(RecallError):
    """Non-2xx response from the competition API."""

    def __init__(self, status_code: int, body: Any = None, message: Optional[str] = None,
                 attempts: int = 1):
        self.status_code = status_code
        self.body = body
        self.attempts = attempts
        text = f"HTTP {status_code}"
        if message:
            text = f"{text}: {message}"
        super().__init__(text)

    @property
    def retryable(self) -> bool:
        return self.status_code == 429 or self.status_code >= 500


class TradingClientError(RecallError):
    """
    Uniform error raised by :class:`recall_agent.client.RecallClient`.

    The original exception is kept on ``cause`` (and chained as
    ``__cause__``) so callers can branch on its type.
    """

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} failed: {cause}")

    @property
    def kind(self) -> str:
        """Name of the underlying error class, e.g. ``HttpStatusError``."""
        return type(self.cause).__name__


class AgentError(RecallError):
    """The LLM provider could not produce a completion."""
