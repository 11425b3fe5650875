"""Parse the GitHub meta payload into labelled CIDR entries.

The payload is a JSON object keyed by subsystem name. Only keys whose value is
a list of strings are CIDR sources; everything else (flags such as
``verifiable_password_authentication``, nested fingerprint objects, lists of
SSH keys that fail to parse) is ignored.

Example payload:
    {
        "hooks": ["192.30.252.0/22", "2001:db8:1::/48"],
        "web": ["140.82.112.0/20"],
        "verifiable_password_authentication": true,
        "ssh_key_fingerprints": {"SHA256_RSA": "..."}
    }
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterator, List, Optional, Tuple, Union

from ..ranges.models import EmptyDatasetError, RangeEntryStore
from .errors import InvalidMetadataError

logger = logging.getLogger(__name__)


def _string_list(value: Any) -> Optional[List[str]]:
    """Return ``value`` if it is a list made only of strings, otherwise None."""
    if not isinstance(value, list):
        return None
    if not all(isinstance(item, str) for item in value):
        return None
    return value


def iter_cidr_candidates(payload: Any) -> Iterator[Tuple[str, str]]:
    """Yield ``(label, text)`` pairs from every string-list key of ``payload``."""
    for label, value in payload.items():
        candidates = _string_list(value)
        if candidates is None:
            logger.debug(f"Ignoring non-list meta key {label!r}")
            continue
        for text in candidates:
            yield label, text


def parse_meta_payload(raw: Union[bytes, str]) -> RangeEntryStore:
    """Decode a raw meta payload and build a store from it.

    Args:
        raw: Response body or cached file contents

    Returns:
        RangeEntryStore with every valid CIDR block in the payload

    Raises:
        InvalidMetadataError: If the payload is not a JSON object or contains
            no valid CIDR blocks
    """
    try:
        payload = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise InvalidMetadataError(f"decode meta response: {e}") from e

    if not isinstance(payload, dict):
        raise InvalidMetadataError(f"meta response must be a JSON object, got {type(payload).__name__}")

    try:
        return RangeEntryStore.from_raw_entries(iter_cidr_candidates(payload))
    except EmptyDatasetError as e:
        raise InvalidMetadataError(f"no CIDR entries found in meta response: {e}") from e
