import logging
from typing import Optional

import requests

from .exceptions import BadStatusError, BodyReadError, NetworkError

# Set up logger for this module
logger = logging.getLogger(__name__)

_HEADERS = {"Accept": "application/json"}


def fetch(url: str, session: Optional[requests.Session] = None, timeout: Optional[float] = None) -> bytes:
    """Performs a single blocking GET of the configuration document.

    The response is streamed so that a failure while reading the body can be
    told apart from a failure to connect. The connection is released before
    returning on every path.

    Args:
        url: The public URL of the JSON document.
        session: Optional requests.Session to issue the request with. The
            module-level requests.get is used when omitted.
        timeout: Optional timeout in seconds. None keeps the transport default
            of waiting indefinitely.

    Returns:
        The full raw body of the response.

    Raises:
        NetworkError: The request failed before a response was received.
        BadStatusError: The response status code was 300 or above.
        BodyReadError: The response body could not be read completely, or
            was empty.
    """
    getter = session.get if session is not None else requests.get
    logger.debug(f"Fetching remote config: {url}")

    try:
        rsp = getter(url, headers=_HEADERS, timeout=timeout, stream=True)
    except requests.RequestException as e:
        logger.debug(f"Network error fetching {url}: {e}")
        raise NetworkError(url, f"remoteconfig: network error: {e}") from e

    with rsp:
        if rsp.status_code > 299:
            logger.debug(f"Fetching {url} returned status code {rsp.status_code}")
            raise BadStatusError(url, rsp.status_code)

        try:
            body = rsp.content
        except requests.RequestException as e:
            logger.debug(f"Failed to read response body from {url}: {e}")
            raise BodyReadError(url, f"remoteconfig: failed to read body: {e}") from e

        if not body:
            logger.debug(f"Empty response body from {url}")
            raise BodyReadError(url, "remoteconfig: empty response body")

    logger.debug(f"Fetched {len(body)} bytes from {url}")
    return body
