from unittest.mock import MagicMock, PropertyMock

import pytest

from remoteconfig import RemoteConfig, RemoteConfigOptions

CONFIG_URL = "https://example.com/config.json"

# Long enough that the background job never fires during a test.
IDLE_INTERVAL = 3600


def make_response(body=b'{"a": 1}', status_code=200, read_error=None):
    """Builds a stand-in for a streamed requests.Response."""
    rsp = MagicMock()
    rsp.status_code = status_code
    if read_error is not None:
        type(rsp).content = PropertyMock(side_effect=read_error)
    else:
        rsp.content = body
    return rsp


@pytest.fixture
def response():
    """Expose make_response to tests without importing conftest."""
    return make_response


@pytest.fixture
def mock_get(mocker):
    """Patch requests.get as seen by the fetcher so no test touches the network."""
    mock = mocker.patch("remoteconfig.fetcher.requests.get")
    mock.return_value = make_response()
    return mock


@pytest.fixture
def make_config():
    """Factory for RemoteConfig handles that are always closed after the test."""
    handles = []

    def factory(url=CONFIG_URL, **options):
        options.setdefault("refresh_interval", IDLE_INTERVAL)
        rc = RemoteConfig(url, RemoteConfigOptions(**options))
        handles.append(rc)
        return rc

    yield factory

    for rc in handles:
        rc.close()
