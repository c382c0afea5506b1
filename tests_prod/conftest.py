from pathlib import Path

import pytest
from web3 import Web3

from collateral_prod.contracts import connect_contracts
from collateral_prod.deployment import Deployment
from collateral_prod.funding import fund_test_accounts, patch_fresh_deployment
from collateral_prod.network import detect_network_name, make_web3, node_accounts
from collateral_prod.scenarios import CONTRACT_REQUESTS
from collateral_prod.settings import Settings

PROD_DIR = Path(__file__).resolve().parent


def pytest_collection_modifyitems(items):
    for item in items:
        if PROD_DIR in item.path.parents:
            item.add_marker(pytest.mark.prod)


@pytest.fixture(scope="session")
def settings():
    return Settings.from_env()


@pytest.fixture(scope="session")
def w3(settings):
    if not settings.provider_url:
        pytest.skip("Provider url is not set, add WEB3_PROVIDER_URL param to env")
    if settings.use_ovm:
        pytest.skip("Multi-collateral is not deployed on the OVM")
    w3 = make_web3(settings.provider_url, settings.rpc_timeout)
    assert w3.is_connected(), f"Cannot reach {settings.provider_url}"
    return w3


@pytest.fixture(scope="session")
def network(w3, settings):
    return detect_network_name(w3, settings.target_network)


@pytest.fixture(scope="session")
def deployment(network, settings):
    deployment = Deployment.load(network, settings.deployment_path_for(network))
    if not deployment.implements_multi_collateral():
        pytest.skip(f"Multi-collateral is not deployed on {network}")
    return deployment


@pytest.fixture(scope="session")
def owner(deployment):
    return Web3.to_checksum_address(deployment.get_user("owner"))


@pytest.fixture(scope="session")
def accounts(w3):
    return node_accounts(w3)


@pytest.fixture(scope="session")
def user1(accounts):
    return accounts[1]


@pytest.fixture(scope="session")
def contracts(w3, deployment, settings):
    if settings.patch_fresh_deployment:
        patch_fresh_deployment(w3, deployment)
    return connect_contracts(w3, deployment, CONTRACT_REQUESTS)


@pytest.fixture(scope="session")
def funded(w3, deployment, contracts, owner, user1, accounts):
    fund_test_accounts(w3, deployment, owner=owner, user=user1, funder=accounts[7])
    return user1
