"""Failures raised while acquiring the GitHub meta block list."""

from __future__ import annotations


class MetaFetchError(RuntimeError):
    """Base class for block list acquisition failures."""


class InvalidMetadataError(MetaFetchError):
    """Raised when a payload is present but yields no usable CIDR entries."""


class CacheCorruptError(MetaFetchError):
    """Raised when the origin reports not-modified but no usable cache exists."""


class TransportFailureError(MetaFetchError):
    """Raised when the request fails and there is no cache to fall back to."""
