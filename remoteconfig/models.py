import datetime
from dataclasses import dataclass
from typing import Callable, Optional

import requests
from apscheduler.schedulers.background import BackgroundScheduler

from .exceptions import FetchError

DEFAULT_REFRESH_INTERVAL_SECONDS = 60


@dataclass(frozen=True)
class RefreshEvent:
    """Outcome of one refresh cycle, handed to the on_refresh observer.

    Attributes:
        url: The configuration source that was fetched.
        succeeded: Whether the stored payload was replaced.
        fetched_at: UTC time at which the cycle finished.
        size: Length in bytes of the new payload, 0 on failure.
        error: The fetch error on failure, None on success.
    """
    url: str
    succeeded: bool
    fetched_at: datetime.datetime
    size: int = 0
    error: Optional[FetchError] = None


@dataclass
class RemoteConfigOptions:
    """Construction options for a RemoteConfig handle.

    Attributes:
        refresh_interval: Seconds between background refreshes.
        timeout: Per-request timeout in seconds. None waits indefinitely.
        on_refresh: Called with a RefreshEvent after every background refresh.
        scheduler: A shared BackgroundScheduler to register the refresh job
            on. When None the handle creates, starts and owns its own.
        session: A requests.Session used for every fetch.
    """
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL_SECONDS
    timeout: Optional[float] = None
    on_refresh: Optional[Callable[[RefreshEvent], None]] = None
    scheduler: Optional[BackgroundScheduler] = None
    session: Optional[requests.Session] = None

    def __post_init__(self):
        if self.refresh_interval <= 0:
            raise ValueError(f"refresh_interval must be positive, got {self.refresh_interval}")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
