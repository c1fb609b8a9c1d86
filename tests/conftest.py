import pytest

from fakes import FakeGateway


@pytest.fixture
def gateway():
    """In-memory gateway; tests register the items they need."""
    return FakeGateway()
