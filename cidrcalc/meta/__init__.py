"""Acquisition of GitHub's published IP ranges.

Fetches https://api.github.com/meta, revalidates with the cached ETag and falls
back to the on-disk copy when the endpoint is unreachable.

Example:
    >>> from cidrcalc.meta import fetch
    >>> store = fetch(timeout=15, cache_dir="/tmp/cidrcalc")
"""

from .cache import MetaCache
from .client import DEFAULT_ENDPOINT_URL, MetaClient, fetch, fetch_from_settings
from .errors import CacheCorruptError, InvalidMetadataError, MetaFetchError, TransportFailureError
from .parser import parse_meta_payload

__all__ = [
    "DEFAULT_ENDPOINT_URL",
    "CacheCorruptError",
    "InvalidMetadataError",
    "MetaCache",
    "MetaClient",
    "MetaFetchError",
    "TransportFailureError",
    "fetch",
    "fetch_from_settings",
    "parse_meta_payload",
]
