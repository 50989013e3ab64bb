"""Error taxonomy for the true-random supply."""
from __future__ import annotations
from typing import Any


class TrueRandomError(Exception):
    pass


class SourceUnavailableError(TrueRandomError):
    """No source bound, or the bound source has no usable credential."""


class FetchFailedError(TrueRandomError):
    """A refill request did not produce a usable batch."""


class MalformedResponseError(FetchFailedError):
    pass


class RandomOrgAPIError(FetchFailedError):
    def __init__(self, code: Any, message: str, data: dict | None = None):
        super().__init__(f"Random.org error {code}: {message}")
        self.code = code
        self.message = message
        self.data = data or {}


class SettingError(TrueRandomError, ValueError):
    pass
