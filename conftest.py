import pytest
from django.core.cache import cache


@pytest.fixture(autouse=True)
def _clear_throttle_counters():
    # throttle rates are kept in the local memory cache
    cache.clear()
    yield
    cache.clear()
