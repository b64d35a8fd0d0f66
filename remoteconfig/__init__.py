"""Read JSON configuration from a public URL and keep it fresh in the background.

Only public sources (a raw file in a public repository, an unlisted gist) are
supported, so this is not a place for secrets.
"""
from .client import RemoteConfig, new
from .exceptions import (
    BadStatusError,
    BodyReadError,
    DecodeError,
    FetchError,
    NetworkError,
    RemoteConfigError,
)
from .fetcher import fetch
from .models import DEFAULT_REFRESH_INTERVAL_SECONDS, RefreshEvent, RemoteConfigOptions

__all__ = [
    "RemoteConfig",
    "RemoteConfigOptions",
    "RefreshEvent",
    "DEFAULT_REFRESH_INTERVAL_SECONDS",
    "new",
    "fetch",
    "RemoteConfigError",
    "FetchError",
    "NetworkError",
    "BadStatusError",
    "BodyReadError",
    "DecodeError",
]
