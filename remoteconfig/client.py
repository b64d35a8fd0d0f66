import atexit
import datetime
import logging
import threading
import uuid
from datetime import timezone
from functools import lru_cache
from typing import Any, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from pydantic import TypeAdapter, ValidationError

from .exceptions import DecodeError, FetchError
from .fetcher import fetch
from .models import RefreshEvent, RemoteConfigOptions

# Set up logger for this module
logger = logging.getLogger(__name__)


@lru_cache(maxsize=128)
def _cached_adapter(target):
    return TypeAdapter(target)


def _adapter_for(target):
    try:
        hash(target)
    except TypeError:
        # Unhashable targets (e.g. Annotated with list metadata) skip the cache.
        return TypeAdapter(target)
    return _cached_adapter(target)


class RemoteConfig:
    """A JSON document fetched from a public URL and kept fresh in the background.

    Construction fetches the document once, synchronously, and raises the
    FetchError if that fails. Afterwards an interval job on an APScheduler
    BackgroundScheduler re-fetches it. A successful refresh swaps the whole
    payload in one step; a failed one is logged and the last good payload is
    kept.

    Usage:
        with RemoteConfig("https://example.com/config.json") as rc:
            settings = rc.unmarshal(Settings)
    """

    def __init__(self, url: str, options: Optional[RemoteConfigOptions] = None):
        self._url = url
        self._options = options or RemoteConfigOptions()
        self._lock = threading.Lock()
        self._closed = False

        # Raises on failure: no handle and no background job.
        self._payload = fetch(url, session=self._options.session, timeout=self._options.timeout)
        self._last_refreshed_at = datetime.datetime.now(timezone.utc)
        logger.info(f"Loaded remote config from {url} ({len(self._payload)} bytes)")

        self._owns_scheduler = self._options.scheduler is None
        self._scheduler = BackgroundScheduler(daemon=True) if self._owns_scheduler else self._options.scheduler
        self._job_id = f"remoteconfig-{uuid.uuid4().hex}"
        self._scheduler.add_job(
            self._scheduled_refresh,
            'interval',
            seconds=self._options.refresh_interval,
            id=self._job_id,
            max_instances=1,
            coalesce=True,
        )
        if self._owns_scheduler:
            self._scheduler.start()
            atexit.register(self.close)

    @property
    def url(self) -> str:
        return self._url

    @property
    def refresh_interval(self) -> float:
        return self._options.refresh_interval

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def last_refreshed_at(self) -> datetime.datetime:
        """UTC time of the last successful fetch, construction included."""
        with self._lock:
            return self._last_refreshed_at

    def unmarshal(self, target: Any = Any) -> Any:
        """Decodes the current payload into an instance of ``target``.

        Args:
            target: Any type pydantic can validate JSON into: a BaseModel
                subclass, a dataclass, a TypedDict, a builtin container such
                as ``dict[str, int]``, or ``Any`` for plain JSON values.
                Validation is strict: a JSON string is never coerced into a
                number or a bool.

        Returns:
            The decoded value.

        Raises:
            DecodeError: The payload is not valid JSON or does not match
                ``target``.
        """
        with self._lock:
            payload = self._payload

        try:
            return _adapter_for(target).validate_json(payload, strict=True)
        except ValidationError as e:
            raise DecodeError(f"remoteconfig: cannot decode payload from {self._url}: {e}") from e

    def refresh(self) -> bool:
        """Runs one refresh cycle.

        Fetch errors are logged and reported to the on_refresh observer, never
        raised. The stored payload is left untouched on failure.

        Returns:
            True if a new payload was stored, False otherwise.
        """
        try:
            payload = fetch(self._url, session=self._options.session, timeout=self._options.timeout)
        except FetchError as e:
            logger.error(f"Error fetching remote config from {self._url}: {e}")
            self._notify(RefreshEvent(
                url=self._url,
                succeeded=False,
                fetched_at=datetime.datetime.now(timezone.utc),
                error=e,
            ))
            return False

        fetched_at = datetime.datetime.now(timezone.utc)
        with self._lock:
            self._payload = payload
            self._last_refreshed_at = fetched_at
        logger.info(f"Fetched remote config from {self._url}")
        self._notify(RefreshEvent(url=self._url, succeeded=True, fetched_at=fetched_at, size=len(payload)))
        return True

    def close(self) -> None:
        """Stops the background refresh. Safe to call more than once.

        A scheduler created by this handle is shut down; a shared scheduler
        passed in through the options only loses this handle's job.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True

        if self._owns_scheduler:
            atexit.unregister(self.close)
            if self._scheduler.running:
                self._scheduler.shutdown(wait=False)
        else:
            try:
                self._scheduler.remove_job(self._job_id)
            except JobLookupError:
                logger.debug(f"Refresh job {self._job_id} already removed from shared scheduler")
        logger.info(f"Stopped refreshing remote config from {self._url}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def _scheduled_refresh(self):
        """Scheduled job body; unexpected errors are logged and contained."""
        try:
            self.refresh()
        except Exception as e:
            logger.error(f"Unexpected error during scheduled refresh of {self._url}: {e}", exc_info=True)

    def _notify(self, event: RefreshEvent) -> None:
        callback = self._options.on_refresh
        if callback is None:
            return
        try:
            callback(event)
        except Exception as e:
            logger.error(f"on_refresh observer raised for {self._url}: {e}", exc_info=True)


def new(url: str, **options) -> RemoteConfig:
    """Fetches ``url`` once and returns a RemoteConfig that keeps it fresh.

    Keyword arguments are the fields of RemoteConfigOptions.
    """
    return RemoteConfig(url, RemoteConfigOptions(**options))
