"""
Preparing accounts and deployments before the loan flows run.

Every ``ensure_*`` helper is a no-op when the account already holds the
requested amount, so the production suite can be rerun against the same fork.
"""
import logging

from web3 import Web3

from collateral_prod.constants import EXCHANGE_FEE_HEADROOM, MOCK_BRIDGE_ADDRESS, SNX_PER_SUSD, UNIT
from collateral_prod.contracts import connect_contract
from collateral_prod.deployment import Deployment
from collateral_prod.exceptions import InsufficientBalanceError, TransactionFailedError
from collateral_prod.network import current_time, fast_forward, unlock_account
from collateral_prod.units import from_unit, multiply_decimal, to_bytes32, to_unit

logger = logging.getLogger(__name__)


def ensure_account_has_ether(w3: Web3, *, amount: int, account: str, from_account: str):
    if w3.eth.get_balance(account) >= amount:
        return

    balance = w3.eth.get_balance(from_account)
    if balance < amount:
        raise InsufficientBalanceError(from_account, balance, amount, "ETH")

    sender = unlock_account(w3, from_account)
    tx_hash = w3.eth.send_transaction({"from": sender, "to": Web3.to_checksum_address(account), "value": amount})
    receipt = w3.eth.wait_for_transaction_receipt(tx_hash)
    if receipt["status"] != 1:
        raise TransactionFailedError(Web3.to_hex(tx_hash), receipt)
    logger.info("Sent %s ETH from %s to %s", from_unit(amount), from_account, account)


def ensure_account_has_snx(w3: Web3, deployment: Deployment, *, amount: int, account: str, from_account: str):
    snx = connect_contract(w3, deployment, "ProxyERC20", abi_name="Synthetix")
    if snx.balanceOf(account) >= amount:
        return

    balance = snx.balanceOf(from_account)
    if balance < amount:
        raise InsufficientBalanceError(from_account, balance, amount, "SNX")

    snx.transfer(account, amount, sender=from_account)
    logger.info("Transferred %s SNX from %s to %s", from_unit(amount), from_account, account)


def ensure_account_has_susd(w3: Web3, deployment: Deployment, *, amount: int, account: str, from_account: str):
    """
    Give ``account`` at least ``amount`` sUSD.

    Transferred from ``from_account`` when it holds enough, otherwise issued by
    ``account`` itself against SNX taken from ``from_account``.
    """
    susd = connect_contract(w3, deployment, "SynthsUSD", abi_name="Synth")
    if susd.balanceOf(account) >= amount:
        return

    if susd.balanceOf(from_account) >= amount:
        susd.transfer(account, amount, sender=from_account)
        logger.info("Transferred %s sUSD from %s to %s", from_unit(amount), from_account, account)
        return

    ensure_account_has_snx(
        w3, deployment, amount=amount * SNX_PER_SUSD, account=account, from_account=from_account
    )
    synthetix = connect_contract(w3, deployment, "ProxyERC20", abi_name="Synthetix")
    synthetix.issueSynths(amount, sender=account)
    logger.info("Issued %s sUSD for %s", from_unit(amount), account)


def ensure_account_has_seth(w3: Web3, deployment: Deployment, *, amount: int, account: str, from_account: str):
    seth = connect_contract(w3, deployment, "SynthsETH", abi_name="Synth")
    if seth.balanceOf(account) >= amount:
        return

    if seth.balanceOf(from_account) >= amount:
        seth.transfer(account, amount, sender=from_account)
        logger.info("Transferred %s sETH from %s to %s", from_unit(amount), from_account, account)
        return

    exchange_rates = connect_contract(w3, deployment, "ExchangeRates")
    rate = exchange_rates.rateForCurrency(to_bytes32("sETH"))
    susd_amount = multiply_decimal(multiply_decimal(amount, rate), EXCHANGE_FEE_HEADROOM)

    ensure_account_has_susd(w3, deployment, amount=susd_amount, account=account, from_account=from_account)
    synthetix = connect_contract(w3, deployment, "ProxyERC20", abi_name="Synthetix")
    synthetix.exchange(to_bytes32("sUSD"), susd_amount, to_bytes32("sETH"), sender=account)
    logger.info("Exchanged %s sUSD into sETH for %s", from_unit(susd_amount), account)


def skip_waiting_period(w3: Web3, deployment: Deployment):
    """Move past the settlement window that follows an exchange."""
    system_settings = connect_contract(w3, deployment, "SystemSettings")
    fast_forward(w3, system_settings.waitingPeriodSecs())


def simulate_exchange_rates(w3: Web3, deployment: Deployment):
    """Push fresh rates of 1 for every synth (except sUSD), SNX and ETH."""
    issuer = connect_contract(w3, deployment, "Issuer")
    exchange_rates = connect_contract(w3, deployment, "ExchangeRates")

    susd = to_bytes32("sUSD")
    currency_keys = [bytes(key) for key in issuer.availableCurrencyKeys() if bytes(key) != susd]
    currency_keys += [to_bytes32("SNX"), to_bytes32("ETH")]
    rates = [UNIT] * len(currency_keys)

    oracle = exchange_rates.oracle()
    exchange_rates.updateRates(currency_keys, rates, current_time(w3), sender=oracle)
    logger.info("Simulated rates for %d currencies", len(currency_keys))


def take_debt_snapshot(w3: Web3, deployment: Deployment):
    debt_cache = connect_contract(w3, deployment, "DebtCache")
    debt_cache.takeDebtSnapshot(sender=deployment.get_user("owner"))
    logger.info("Took debt snapshot")


def mock_optimism_bridge(w3: Web3, deployment: Deployment):
    """Point the L2 bridge dependencies at a dummy so caches resolve on a fresh deployment."""
    owner = deployment.get_user("owner")
    resolver = connect_contract(w3, deployment, "AddressResolver")
    resolver.importAddresses(
        [to_bytes32("ext:Messenger"), to_bytes32("ovm:SynthetixBridgeToBase")],
        [MOCK_BRIDGE_ADDRESS, MOCK_BRIDGE_ADDRESS],
        sender=owner,
    )
    if deployment.has_target("SynthetixBridgeToOptimism"):
        bridge = connect_contract(w3, deployment, "SynthetixBridgeToOptimism")
        bridge.rebuildCache(sender=owner)
    logger.info("Mocked the optimism bridge")


def patch_fresh_deployment(w3: Web3, deployment: Deployment):
    simulate_exchange_rates(w3, deployment)
    take_debt_snapshot(w3, deployment)
    mock_optimism_bridge(w3, deployment)


def fund_test_accounts(w3: Web3, deployment: Deployment, *, owner: str, user: str, funder: str):
    """
    Balances the loan flows need: gas for the owner, sUSD collateral and fees
    for short loans, sETH to repay them.
    """
    skip_waiting_period(w3, deployment)

    ensure_account_has_ether(w3, amount=to_unit("1"), account=owner, from_account=funder)
    ensure_account_has_susd(w3, deployment, amount=to_unit("1100"), account=user, from_account=owner)
    ensure_account_has_seth(w3, deployment, amount=to_unit("2"), account=user, from_account=owner)
