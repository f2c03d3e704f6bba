"""Errors raised by the travel search collaborators."""

from __future__ import annotations

from typing import Optional


class TravelSearchError(Exception):
    """A flight or hotel provider call failed.

    ``status_code`` carries the provider's HTTP status when one was returned,
    so callers can decide whether the failure is worth retrying.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
