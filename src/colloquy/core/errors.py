"""Exception hierarchy for Colloquy."""

from __future__ import annotations

from typing import Optional


class ColloquyError(Exception):
    """Base class for all Colloquy errors."""


class ConfigError(ColloquyError):
    """Required API configuration (credential or base URL) is missing."""


class UpstreamError(ColloquyError):
    """A backend answered with a non-success status or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.status_code} | {self.message}"


class ToolLookupError(UpstreamError):
    """A search or page-read request against the lookup backend failed."""


class OrchestrationError(ColloquyError):
    """An orchestration run was aborted."""

    def __init__(self, cause: BaseException, state: str):
        super().__init__(f"Orchestration error: {cause}")
        self.cause = cause
        self.state = state


class OrchestrationBusyError(ColloquyError):
    """An orchestration run is already in progress."""
