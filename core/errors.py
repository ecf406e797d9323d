"""
Error hierarchy for the whale watcher.

UpstreamError  - the indexing API rejected or failed the request
NoDataError    - the API answered but had no transaction/balance set
ValidationError - bad caller input (analysis window)
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class WhaleWatcherError(Exception):
    """Base exception for all whale watcher errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class UpstreamError(WhaleWatcherError):
    """Network failure, auth failure, rate limit or malformed response."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["status_code"] = self.status_code
        return d


class NoDataError(WhaleWatcherError):
    """Source reachable, but the item set was empty or absent."""


class ValidationError(WhaleWatcherError):
    pass
