"""Exceptions raised while talking to the model server."""

from __future__ import annotations

from typing import Optional


class UpstreamUnavailableError(RuntimeError):
    """The model server could not be reached or refused the request."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
