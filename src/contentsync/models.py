"""Canonical Pydantic models shared across all contentsync modules.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig` and :class:`GlobalConfig`.

**Pipeline models** -- produced and consumed by import and lint:
    :class:`ResultType`, :class:`ResultEvent`, :class:`DispatchEntry`,
    :class:`PublicUrlTarget`, and :class:`RestResult`.

All models use Pydantic v2. Pipeline models are frozen: an entry or event
is created once and never mutated afterwards.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Config Models ---


class RequestConfig(BaseModel):
    """HTTP request settings applied to every call against the content store."""

    timeout: int = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    max_retries: int = Field(
        default=0, description="Transport-level retries on 5xx and connection errors"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/contentsync/config.json``.

    ``urls`` and ``keys`` map short alias names to site prefixes and write
    keys, so ``contentsync import -u prod -k prod`` works without pasting
    either on the command line. See
    :func:`~contentsync.config.resolve_alias`.
    """

    urls: dict[str, str] = Field(default_factory=dict)
    keys: dict[str, str] = Field(default_factory=dict)
    concurrency: int = Field(default=10, description="Default concurrency bound")
    request: RequestConfig = Field(default_factory=RequestConfig)


# --- Pipeline Models ---


class ResultType(str, enum.Enum):
    """Outcome tag carried by every :class:`ResultEvent`."""

    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class ResultEvent(BaseModel):
    """A single outcome reported by import or lint.

    Events are the only output of the core: each write, each validated
    node, and each fatal parse/config failure becomes exactly one event.

    Example::

        ResultEvent.success("http://domain.com/_components/a")
        ResultEvent.error("JSON syntax error: ...", details=raw_text)
    """

    model_config = ConfigDict(frozen=True)

    type: ResultType
    message: str = ""
    details: Optional[str] = None

    @classmethod
    def success(cls, message: str = "", details: Optional[str] = None) -> ResultEvent:
        return cls(type=ResultType.SUCCESS, message=message, details=details)

    @classmethod
    def warning(cls, message: str, details: Optional[str] = None) -> ResultEvent:
        return cls(type=ResultType.WARNING, message=message, details=details)

    @classmethod
    def error(cls, message: str, details: Optional[str] = None) -> ResultEvent:
        return cls(type=ResultType.ERROR, message=message, details=details)

    @property
    def is_error(self) -> bool:
        return self.type == ResultType.ERROR

    def to_dict(self) -> dict[str, str]:
        """Plain dict form, omitting ``details`` when unset."""
        data = {"type": self.type.value, "message": self.message}
        if self.details is not None:
            data["details"] = self.details
        return data


class DispatchEntry(BaseModel):
    """One write: a site-relative content URI and the payload to store there."""

    model_config = ConfigDict(frozen=True)

    uri: str = Field(description="Site-relative URI, e.g. /_components/a/instances/b")
    payload: Any = None


class PublicUrlTarget(BaseModel):
    """The page a public URL resolves to, and the site prefix it lives under."""

    uri: str
    prefix: str


class RestResult(BaseModel):
    """Outcome of a single transport call; errors are values, never raised.

    Attributes:
        url: The URL that was requested.
        data: Decoded body (JSON value, text, or :class:`PublicUrlTarget`).
        error: Error description, or ``None`` on success.
        status_code: HTTP status, when a response was received.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    data: Any = None
    error: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None
