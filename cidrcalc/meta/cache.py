"""On-disk cache for the GitHub meta payload and its ETag."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar, Dict, Optional

from ..ranges.models import RangeEntryStore
from .parser import parse_meta_payload

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MetaCache:
    """Persist the last successful meta payload with its revalidation token.

    Layout under ``base_dir``:
        - meta.json: raw body of the last 200 response
        - meta.etag: ETag sent with that response

    Missing files mean "no cache" and are never an error. Writes are
    best-effort; a failed write is logged and the fetch carries on. Concurrent
    writers are not coordinated, the last one wins.

    Example:
        >>> cache = MetaCache(base_dir=Path("~/.cache/cidrcalc").expanduser())
        >>> cache.read_etag()
        '"abc123"'
    """

    base_dir: Path
    stats: Dict[str, int] = field(default_factory=lambda: {"hits": 0, "misses": 0, "stores": 0, "store_failures": 0})

    PAYLOAD_FILENAME: ClassVar[str] = "meta.json"
    ETAG_FILENAME: ClassVar[str] = "meta.etag"

    @property
    def payload_path(self) -> Path:
        """Location of the cached payload."""
        return self.base_dir / self.PAYLOAD_FILENAME

    @property
    def etag_path(self) -> Path:
        """Location of the cached ETag."""
        return self.base_dir / self.ETAG_FILENAME

    def read_etag(self) -> Optional[str]:
        """Return the stored ETag with surrounding whitespace removed, if any."""
        try:
            etag = self.etag_path.read_text(encoding="utf-8").strip()
        except OSError:
            return None
        return etag or None

    def load_payload(self) -> Optional[bytes]:
        """Return the cached raw payload, or None when it is missing or unreadable."""
        try:
            payload = self.payload_path.read_bytes()
        except OSError:
            self.stats["misses"] += 1
            return None
        self.stats["hits"] += 1
        return payload

    def load_store(self) -> Optional[RangeEntryStore]:
        """Parse the cached payload.

        Returns:
            RangeEntryStore built from the cached payload, or None if there is
            no cached payload

        Raises:
            InvalidMetadataError: If the cached payload exists but is unusable
        """
        payload = self.load_payload()
        if payload is None:
            return None
        return parse_meta_payload(payload)

    def store(self, payload: bytes, etag: Optional[str]) -> bool:
        """Persist a fresh payload and its ETag.

        A response without an ETag removes the previous one so the old token is
        never sent alongside a newer payload.

        Args:
            payload: Raw response body
            etag: ETag header of the response, if any

        Returns:
            True if both artifacts were written, False if the write failed
        """
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            self.payload_path.write_bytes(payload)
            if etag:
                self.etag_path.write_text(etag, encoding="utf-8")
            else:
                self.etag_path.unlink(missing_ok=True)
        except OSError as e:
            self.stats["store_failures"] += 1
            logger.warning(f"Failed to write meta cache to {self.base_dir}: {e}")
            return False

        self.stats["stores"] += 1
        logger.debug(f"Cached meta payload ({len(payload)} bytes) to {self.payload_path}")
        return True

