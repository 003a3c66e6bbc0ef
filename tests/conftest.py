"""
Shared test setup.

Config and observer are process-wide; every test starts from defaults
with a fresh observer so recorded violations never leak between tests.
"""

import pytest

from catcontracts import ContractObserver, reset_config, set_observer


@pytest.fixture(autouse=True)
def fresh_state():
    reset_config()
    observer = ContractObserver()
    previous = set_observer(observer)
    yield observer
    set_observer(previous)
    reset_config()
