"""
Error taxonomy for the multi-category layer.

None of these are meant to reach the end user: callers catch them and
degrade (empty result, skipped write) so the host's own save or listing
still completes.
"""

from typing import Optional


class MulticatError(Exception):
    """Base class for association-layer failures."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause

    def __str__(self) -> str:
        base = super().__str__()
        if self.cause is not None:
            return f"{base}: {self.cause}"
        return base


class StoreUnavailableError(MulticatError):
    """Reading categories or associations failed."""


class AssociationWriteError(MulticatError):
    """Replacing the associations of a content item failed and was rolled back."""
