"""
Base protocols for content loaders.

Loaders are narrow: one fetch, one transformation, one write-through into the
host's store. Retry policy, scheduling, and schema validation belong to the
host pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Protocol

from ..core.context import LoaderContext


class AdapterError(RuntimeError):
    """Raised when a loader encounters a non-recoverable error."""


class ConfigurationError(AdapterError):
    """Raised when loader options cannot be assembled from the available sources."""


@dataclass(slots=True)
class VerificationResult:
    """
    Structured response returned by loader verification routines.

    Attributes
    ----------
    success:
        Indicates whether the verification succeeded.
    message:
        Human-readable summary.
    details:
        Optional structured metadata such as the number of records visible.
    """

    success: bool
    message: str
    details: Optional[Mapping[str, object]] = None


class Loader(Protocol):
    """Protocol implemented by all content loaders."""

    @property
    def name(self) -> str:
        """Stable loader identifier reported to the host."""

    async def load(self, context: LoaderContext) -> None:
        """Populate ``context.store``."""
