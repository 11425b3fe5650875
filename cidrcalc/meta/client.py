"""HTTP client for the GitHub meta endpoint with ETag revalidation.

One GET per fetch. The cached ETag is sent as ``If-None-Match``; a 304 reuses
the cached payload, a 200 replaces it, and a failed request falls back to the
cache when one exists. The timeout passed to fetch() bounds the whole request,
body included, not just each socket read.

Response handling:
    - 200: parse body, persist body and ETag, return fresh store
      (InvalidMetadataError if the body is unusable)
    - 304: return store parsed from cache (CacheCorruptError if none)
    - other status / transport error / deadline: cached store if available,
      otherwise raise
"""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple, Union

import requests

from .. import get_version
from ..ranges.models import RangeEntryStore
from .cache import MetaCache
from .errors import CacheCorruptError, InvalidMetadataError, MetaFetchError, TransportFailureError
from .parser import parse_meta_payload

if TYPE_CHECKING:
    from ..settings import CidrCalcSettings

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT_URL = "https://api.github.com/meta"
DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_USER_AGENT = f"cidrcalc/{get_version()}"
READ_CHUNK_SIZE = 8192


class MetaClient:
    """Fetch and cache GitHub's published IP ranges.

    The endpoint is plain constructor configuration, so tests and mirrors can
    point the client elsewhere without touching module state. A session the
    client creates itself is closed by close(); a session passed in belongs to
    the caller.

    Example:
        >>> from pathlib import Path
        >>> with MetaClient(cache=MetaCache(base_dir=Path("/tmp/cidrcalc"))) as client:
        ...     store = client.fetch(timeout=15)
        >>> len(store) > 0
        True
    """

    def __init__(
        self,
        endpoint_url: str = DEFAULT_ENDPOINT_URL,
        session: Optional[requests.Session] = None,
        cache: Optional[MetaCache] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        request_timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize meta client.

        Args:
            endpoint_url: URL of the meta endpoint (default: GitHub API)
            session: Optional requests session (default: a new session owned by the client)
            cache: Optional on-disk cache; None disables caching and fallback
            user_agent: Value of the User-Agent header
            request_timeout: Deadline in seconds when fetch() gets none
        """
        self.endpoint_url = endpoint_url
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        self.cache = cache
        self.user_agent = user_agent
        self.request_timeout = request_timeout

        self.stats: dict[str, int] = {
            "fetches": 0,
            "fresh": 0,
            "not_modified": 0,
            "cache_fallbacks": 0,
            "failures": 0,
        }

    def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "MetaClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def _build_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }
        etag = self.cache.read_etag() if self.cache is not None else None
        if etag:
            headers["If-None-Match"] = etag
        return headers

    def _get(self, headers: dict[str, str], timeout: float, deadline: float) -> Tuple[int, Optional[str], bytes]:
        """Issue the GET and read a 200 body in chunks until ``deadline``."""
        response = self.session.get(self.endpoint_url, headers=headers, timeout=timeout, stream=True)
        try:
            status_code = response.status_code
            etag = response.headers.get("ETag")
            if status_code != requests.codes.ok:
                return status_code, etag, b""

            chunks = []
            for chunk in response.iter_content(chunk_size=READ_CHUNK_SIZE):
                chunks.append(chunk)
                if time.monotonic() > deadline:
                    raise requests.Timeout(f"meta response not complete within {timeout}s")
            return status_code, etag, b"".join(chunks)
        finally:
            response.close()

    def _request(self, headers: dict[str, str], timeout: float) -> Tuple[int, Optional[str], bytes]:
        """Run the request on a worker thread and give up once ``timeout`` elapses.

        Raises:
            requests.RequestException: If the request fails or misses the deadline
        """
        deadline = time.monotonic() + timeout
        outcome: Dict[str, Any] = {}

        def worker() -> None:
            try:
                outcome["result"] = self._get(headers, timeout, deadline)
            except Exception as e:
                outcome["error"] = e

        thread = threading.Thread(target=worker, name="cidrcalc-meta-fetch", daemon=True)
        thread.start()
        thread.join(timeout)
        if thread.is_alive():
            raise requests.Timeout(f"meta request exceeded the {timeout}s deadline")
        if "error" in outcome:
            raise outcome["error"]
        return outcome["result"]

    def fetch(self, timeout: Optional[float] = None) -> RangeEntryStore:
        """Fetch the block list, revalidating against the cache.

        Args:
            timeout: Deadline in seconds for the whole request (default: request_timeout)

        Returns:
            RangeEntryStore from a fresh payload or from the cache

        Raises:
            CacheCorruptError: If the endpoint answers 304 without a usable cache
            InvalidMetadataError: If the endpoint answers 200 with an unusable body
            TransportFailureError: If the request fails and there is no cache
        """
        self.stats["fetches"] += 1
        headers = self._build_headers()
        effective_timeout = self.request_timeout if timeout is None else timeout

        try:
            status_code, etag, body = self._request(headers, effective_timeout)
        except requests.RequestException as e:
            logger.error(f"Meta request to {self.endpoint_url} failed: {e}")
            return self._fallback(TransportFailureError(f"fetch github meta: {e}"), e)

        if status_code == requests.codes.not_modified:
            return self._load_not_modified()

        if status_code == requests.codes.ok:
            try:
                store = parse_meta_payload(body)
            except InvalidMetadataError as e:
                self.stats["failures"] += 1
                logger.error(f"Meta response from {self.endpoint_url} is unusable: {e}")
                raise

            if self.cache is not None:
                self.cache.store(body, etag)
            self.stats["fresh"] += 1
            logger.info(f"Loaded {len(store)} CIDR blocks from {self.endpoint_url}")
            return store

        logger.error(f"Unexpected status {status_code} from meta endpoint")
        return self._fallback(TransportFailureError(f"unexpected status {status_code} from meta endpoint"), None)

    def _load_not_modified(self) -> RangeEntryStore:
        if self.cache is None:
            self.stats["failures"] += 1
            raise CacheCorruptError("meta endpoint returned 304 but caching is disabled")

        try:
            store = self.cache.load_store()
        except InvalidMetadataError as e:
            self.stats["failures"] += 1
            raise CacheCorruptError(f"load cached meta after 304: {e}") from e

        if store is None:
            self.stats["failures"] += 1
            raise CacheCorruptError(f"load cached meta after 304: no payload at {self.cache.payload_path}")

        self.stats["not_modified"] += 1
        logger.info(f"Meta unchanged; using {len(store)} cached CIDR blocks")
        return store

    def _fallback(self, error: MetaFetchError, cause: Optional[BaseException]) -> RangeEntryStore:
        """Return the cached store, or raise ``error`` when there is none."""
        store: Optional[RangeEntryStore] = None
        if self.cache is not None:
            try:
                store = self.cache.load_store()
            except InvalidMetadataError as e:
                logger.warning(f"Cached meta payload is unusable: {e}")

        if store is None:
            self.stats["failures"] += 1
            if cause is None:
                raise error
            raise error from cause

        self.stats["cache_fallbacks"] += 1
        logger.warning(f"Using cached meta data ({len(store)} CIDR blocks) after fetch failure: {error}")
        return store


def fetch(
    timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
    cache_dir: Optional[Union[str, Path]] = None,
    *,
    session: Optional[requests.Session] = None,
    endpoint_url: str = DEFAULT_ENDPOINT_URL,
    user_agent: str = DEFAULT_USER_AGENT,
) -> RangeEntryStore:
    """Fetch the GitHub block list once.

    Args:
        timeout: Deadline in seconds for the request
        cache_dir: Cache directory; None disables caching
        session: Optional requests session
        endpoint_url: Meta endpoint URL
        user_agent: User-Agent header value

    Returns:
        RangeEntryStore ready for classification

    Raises:
        MetaFetchError: If no fresh or cached block list is available
    """
    cache = MetaCache(base_dir=Path(cache_dir)) if cache_dir else None
    with MetaClient(
        endpoint_url=endpoint_url,
        session=session,
        cache=cache,
        user_agent=user_agent,
    ) as client:
        return client.fetch(timeout=timeout)


def fetch_from_settings(settings: "CidrCalcSettings", session: Optional[requests.Session] = None) -> RangeEntryStore:
    """Fetch the block list using endpoint, cache and timeout from ``settings``."""
    cache = MetaCache(base_dir=settings.cache_dir) if settings.cache_dir is not None else None
    with MetaClient(
        endpoint_url=settings.endpoint_url,
        session=session,
        cache=cache,
        user_agent=settings.user_agent,
        request_timeout=settings.request_timeout,
    ) as client:
        return client.fetch()
