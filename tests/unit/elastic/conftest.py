# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at http://mozilla.org/MPL/2.0/.

"""Module for test configurations for the elastic unit tests."""

import httpx
import pytest

from esclient.elastic.transport import HttpTransport
from tests.unit.elastic.endpoint import RecordingEndpoint


@pytest.fixture(name="endpoint")
def fixture_endpoint() -> RecordingEndpoint:
    """Return an endpoint recording the requests it receives."""
    return RecordingEndpoint()


@pytest.fixture(name="transport")
def fixture_transport(endpoint: RecordingEndpoint) -> HttpTransport:
    """Return an HttpTransport whose blocking and async clients both talk to `endpoint`."""
    return HttpTransport(
        host="es.test",
        port=9200,
        transport=httpx.MockTransport(endpoint),
        async_transport=httpx.MockTransport(endpoint),
    )
