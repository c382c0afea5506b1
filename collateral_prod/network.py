"""
Connection to the node and the dev-node RPC extensions used on forks.

The production suite runs either against a public network (read-mostly) or
against a local fork of one. Forks are served by anvil or hardhat; both accept
``evm_increaseTime``/``evm_mine`` and impersonation under their own prefix.
"""
import logging
import weakref
from typing import Optional

from web3 import Web3

from collateral_prod.constants import DEFAULT_RPC_TIMEOUT, LOCAL_NETWORK, NETWORKS
from collateral_prod.exceptions import RPCError

logger = logging.getLogger(__name__)

DEV_NODE_PREFIXES = ("anvil", "hardhat")

# Accounts already impersonated, per connection
_unlocked = weakref.WeakKeyDictionary()


def make_web3(provider_url: str, timeout: int = DEFAULT_RPC_TIMEOUT) -> Web3:
    w3 = Web3(Web3.HTTPProvider(provider_url, request_kwargs={"timeout": timeout}))
    logger.debug("Connected web3 to %s", provider_url)
    return w3


def rpc(w3: Web3, method: str, params=None):
    logger.debug("RPC %s %s", method, params or [])
    response = w3.provider.make_request(method, params or [])
    if "error" in response:
        raise RPCError(method, response["error"])
    return response.get("result")


def detect_network_name(w3: Web3, target_network: Optional[str] = None) -> str:
    """
    Name of the network the suite is pointed at.

    A fork reports the chain id of the local node, so the explicit
    ``target_network`` wins over chain id detection. Unknown chain ids are
    treated as a local development chain.
    """
    if target_network:
        return target_network
    chain_id = w3.eth.chain_id
    network = NETWORKS.get(chain_id, LOCAL_NETWORK)
    logger.info("Detected network %s (chain id %s)", network, chain_id)
    return network


def _dev_rpc(w3: Web3, suffix: str, params):
    error = None
    for prefix in DEV_NODE_PREFIXES:
        try:
            return rpc(w3, f"{prefix}_{suffix}", params)
        except RPCError as e:
            error = e
    raise error


def fast_forward(w3: Web3, seconds: int):
    """Advance chain time by ``seconds`` and mine a block so it takes effect."""
    seconds = int(seconds)
    if seconds <= 0:
        return
    rpc(w3, "evm_increaseTime", [seconds])
    rpc(w3, "evm_mine")
    logger.info("Fast forwarded %s seconds", seconds)


def current_time(w3: Web3) -> int:
    return w3.eth.get_block("latest")["timestamp"]


def unlock_account(w3: Web3, account: str) -> str:
    """
    Make the node sign transactions for ``account``.

    Node accounts are already unlocked; anything else gets impersonated once
    per connection.
    """
    account = Web3.to_checksum_address(account)
    unlocked = _unlocked.setdefault(w3, set())
    if account in unlocked:
        return account
    if account not in node_accounts(w3):
        _dev_rpc(w3, "impersonateAccount", [account])
        logger.debug("Impersonating %s", account)
    unlocked.add(account)
    return account


def node_accounts(w3: Web3) -> list:
    return [Web3.to_checksum_address(a) for a in w3.eth.accounts]
