"""
Loader interfaces for external content sources.

Concrete loaders live in submodules keyed by source type. Each loader owns a
single fetch-and-store operation that the host pipeline invokes per collection.
"""

from .base import AdapterError, ConfigurationError, Loader, VerificationResult

__all__ = [
    "AdapterError",
    "ConfigurationError",
    "Loader",
    "VerificationResult",
]
