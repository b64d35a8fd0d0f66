class RemoteConfigError(Exception):
    """Base class for every error raised by remoteconfig."""


class FetchError(RemoteConfigError):
    """The configuration document could not be retrieved."""

    def __init__(self, url, message):
        super().__init__(message)
        self.url = url


class NetworkError(FetchError):
    """Transport-level failure before a response was received (DNS, TCP, TLS)."""


class BadStatusError(FetchError):
    """The source answered with a status code of 300 or above."""

    def __init__(self, url, status_code):
        super().__init__(url, f"remoteconfig: fetch failed with status code {status_code}")
        self.status_code = status_code


class BodyReadError(FetchError):
    """The response body failed mid-read after headers were received."""


class DecodeError(RemoteConfigError):
    """The cached payload does not fit the requested target type."""
