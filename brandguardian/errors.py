from __future__ import annotations

from typing import Any


class ServiceError(Exception):
    """An error surfaced to API callers as ``{"code", "message", ...}``."""

    def __init__(self, status_code: int, code: str, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, **self.extra}


class NavigationError(Exception):
    """Raised when every navigation tier failed to load the URL."""

    def __init__(self, url: str, status: int | None = None, reason: str | None = None) -> None:
        self.url = url
        self.status = status
        self.reason = reason
        shown = status if status is not None else "unknown"
        message = f"Could not load {url} (status {shown})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
