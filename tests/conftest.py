import os
from datetime import timedelta

import pytest
from hypothesis import Phase, settings

from tests.utils.deployment import ADDRESSES, OWNER, make_deployment
from tests.utils.dummies import DummyToken, DummyWeb3, address

settings.register_profile("no-shrink", settings(phases=list(Phase)[:4]), deadline=timedelta(seconds=1000))
settings.register_profile("default", deadline=timedelta(seconds=1000))
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))


@pytest.fixture()
def deployment():
    return make_deployment(users=[{"name": "owner", "address": OWNER}])


@pytest.fixture()
def w3():
    return DummyWeb3(accounts=[address(0xACC0 + i) for i in range(10)])


@pytest.fixture()
def tokens(w3):
    """sUSD, sETH and SNX with working balances."""
    for name in ("SynthsUSD", "SynthsETH", "ProxyERC20"):
        w3.eth.contracts[ADDRESSES[name]] = DummyToken(ADDRESSES[name])
    return {
        "sUSD": w3.eth.contracts[ADDRESSES["SynthsUSD"]],
        "sETH": w3.eth.contracts[ADDRESSES["SynthsETH"]],
        "SNX": w3.eth.contracts[ADDRESSES["ProxyERC20"]],
    }
