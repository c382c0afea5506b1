import pytest
from web3 import Web3

from collateral_prod.constants import RENBTC_SCALE
from collateral_prod.contracts import connect_contracts
from collateral_prod.exceptions import MissingAccountError, UnsupportedCollateralError
from collateral_prod.scenarios import (
    APPROVAL_AMOUNT,
    COLLATERAL_ERC20,
    COLLATERAL_ETH,
    COLLATERAL_SHORT,
    RENBTC_TRANSFER_AMOUNT,
    SCENARIOS,
    CollateralLoanDriver,
    Loan,
)
from collateral_prod.units import to_bytes32, to_unit
from tests.utils.deployment import ADDRESSES, OWNER, USER
from tests.utils.dummies import DummyToken, address

RENBTC = address(0xBBBB)
STATE = address(0x5757)
RENBTC_WALLET = Web3.to_checksum_address("0x35ffd6e268610e764ff6944d07760d0efe5e40e5")

CONTRACT_REQUESTS = [
    {"contract_name": "CollateralEth"},
    {"contract_name": "CollateralErc20"},
    {"contract_name": "CollateralShort"},
    {"contract_name": "ExchangeRates"},
    {"contract_name": "SynthsUSD", "abi_name": "Synth"},
]


@pytest.fixture()
def contracts(w3, deployment, tokens):
    for name in ("CollateralEth", "CollateralErc20", "CollateralShort"):
        w3.eth.contract(address=ADDRESSES[name]).views.update({"state": STATE, "interactionDelay": 300})
    w3.eth.contract(address=ADDRESSES["CollateralErc20"]).views["underlyingContract"] = RENBTC
    w3.eth.contracts[RENBTC] = DummyToken(RENBTC, {RENBTC_WALLET: 10**9, OWNER: 10**9})
    return connect_contracts(w3, deployment, CONTRACT_REQUESTS)


@pytest.fixture()
def make_driver(w3, deployment, contracts):
    def f(collateral_type, network="mainnet"):
        return CollateralLoanDriver(w3, deployment, contracts, SCENARIOS[collateral_type], network, OWNER)

    return f


def sent(w3, name, method):
    return w3.eth.contract(address=ADDRESSES[name]).sent(method)


def test_scenarios():
    eth, erc20, short = SCENARIOS[COLLATERAL_ETH], SCENARIOS[COLLATERAL_ERC20], SCENARIOS[COLLATERAL_SHORT]
    assert (eth.amount_to_deposit, eth.amount_to_borrow) == (to_unit("2"), to_unit("0.5"))
    assert (erc20.amount_to_deposit, erc20.collateral_currency) == (10**8, "renBTC")
    assert (short.borrow_currency, short.amount_to_borrow) == ("sETH", to_unit("0.01"))
    assert short.is_short and not eth.is_short
    assert eth.name == f"CollateralEth: deposit {to_unit('2')} ETH, borrow {to_unit('0.5')} sUSD"


def test_unsupported_collateral(w3, deployment, contracts):
    scenario = SCENARIOS[COLLATERAL_ETH]._replace(type="CollateralLoans")
    with pytest.raises(UnsupportedCollateralError, match="Unsupported collateral type CollateralLoans"):
        CollateralLoanDriver(w3, deployment, contracts, scenario, "mainnet", OWNER)


def test_tokens(make_driver, contracts):
    assert make_driver(COLLATERAL_ETH).deposit_token is None
    assert make_driver(COLLATERAL_ERC20).deposit_token.address == RENBTC
    short = make_driver(COLLATERAL_SHORT)
    assert short.deposit_token is contracts["SynthsUSD"]
    assert short.borrow_token is contracts["SynthsUSD"]
    assert short.state.address == STATE
    assert short.currency == to_bytes32("sETH")


def test_deposit_balance(w3, make_driver, tokens):
    w3.eth.balances[USER] = to_unit("5")
    tokens["sUSD"].balances[USER] = to_unit("1100")
    assert make_driver(COLLATERAL_ETH).deposit_balance(USER) == to_unit("5")
    assert make_driver(COLLATERAL_ERC20).deposit_balance(OWNER) == 10**9
    assert make_driver(COLLATERAL_SHORT).deposit_balance(USER) == to_unit("1100")
    assert make_driver(COLLATERAL_ETH).borrow_balance(USER) == to_unit("1100")


def test_open_eth(w3, make_driver):
    make_driver(COLLATERAL_ETH).open(USER)
    assert sent(w3, "CollateralEth", "open") == [
        ((to_unit("0.5"), to_bytes32("sUSD")), {"from": USER, "value": to_unit("2")})
    ]


def test_open_erc20(w3, make_driver):
    make_driver(COLLATERAL_ERC20).open(USER)

    renbtc = w3.eth.contracts[RENBTC]
    assert renbtc.balances[USER] == RENBTC_TRANSFER_AMOUNT
    assert renbtc.sent("transfer") == [((USER, RENBTC_TRANSFER_AMOUNT), {"from": RENBTC_WALLET})]
    assert renbtc.sent("approve") == [((ADDRESSES["CollateralErc20"], APPROVAL_AMOUNT), {"from": USER})]
    assert sent(w3, "CollateralErc20", "open") == [((10**8, to_unit("0.5"), to_bytes32("sUSD")), {"from": USER})]


def test_open_erc20_on_local_chain(w3, make_driver):
    make_driver(COLLATERAL_ERC20, network="local").open(USER)
    assert w3.eth.contracts[RENBTC].sent("transfer")[0][1] == {"from": OWNER}


def test_no_renbtc_holder(make_driver):
    with pytest.raises(MissingAccountError, match="kovan"):
        make_driver(COLLATERAL_ERC20, network="kovan").collateral_holder()


def test_open_short(w3, make_driver, tokens):
    make_driver(COLLATERAL_SHORT).open(USER)
    assert tokens["sUSD"].sent("approve") == [((ADDRESSES["CollateralShort"], APPROVAL_AMOUNT), {"from": USER})]
    assert sent(w3, "CollateralShort", "open") == [
        ((to_unit("1000"), to_unit("0.01"), to_bytes32("sETH")), {"from": USER})
    ]


def test_get_loan_and_cratio(w3, make_driver):
    raw = (1, USER, to_unit("2"), to_bytes32("sUSD"), to_unit("0.5"), False, 0, 0, 1_600_000_000)
    w3.eth.contract(address=STATE).views["getLoan"] = lambda account, loan_id: raw
    w3.eth.contract(address=ADDRESSES["CollateralEth"]).views["collateralRatio"] = lambda loan: loan[2] * 2

    driver = make_driver(COLLATERAL_ETH)
    loan = driver.get_loan(USER, 1)
    assert isinstance(loan, Loan)
    assert loan.amount == to_unit("0.5")
    assert loan.last_interaction == 1_600_000_000
    assert driver.collateral_ratio(loan) == to_unit("4")


def test_skip_interaction_delay(w3, make_driver):
    make_driver(COLLATERAL_SHORT).skip_interaction_delay()
    assert w3.provider.requests == [("evm_increaseTime", [300]), ("evm_mine", [])]


def test_eth_collateral_moves_as_value(w3, make_driver):
    driver = make_driver(COLLATERAL_ETH)
    driver.deposit(USER, 1, to_unit("1"))
    driver.withdraw(USER, 1, to_unit("1"))
    driver.close(USER, 1)

    assert sent(w3, "CollateralEth", "deposit") == [((USER, 1), {"from": USER, "value": to_unit("1")})]
    assert sent(w3, "CollateralEth", "withdraw") == [((1, to_unit("1")), {"from": USER})]
    assert sent(w3, "CollateralEth", "close") == [((1,), {"from": USER})]
    # withdrawn and returned ETH is pulled with claim
    assert [args for args, _ in sent(w3, "CollateralEth", "claim")] == [(to_unit("1"),), (to_unit("2"),)]


def test_token_collateral_moves_as_amount(w3, make_driver):
    driver = make_driver(COLLATERAL_ERC20)
    driver.deposit(USER, 1, 10**8)
    driver.withdraw(USER, 1, 10**8)
    driver.repay(USER, 1, to_unit("0.5"))
    driver.close(USER, 1)

    assert sent(w3, "CollateralErc20", "deposit") == [((USER, 1, 10**8), {"from": USER})]
    assert sent(w3, "CollateralErc20", "repay") == [((USER, 1, to_unit("0.5")), {"from": USER})]
    assert sent(w3, "CollateralErc20", "claim") == []


def test_net_amount_borrowed(w3, make_driver):
    assert make_driver(COLLATERAL_ETH).net_amount_borrowed() == to_unit("0.5")

    w3.eth.contract(address=ADDRESSES["ExchangeRates"]).views["rateForCurrency"] = to_unit("2000")
    # 0.01 sETH sold for 20 sUSD, 1000 sUSD locked
    assert make_driver(COLLATERAL_SHORT).net_amount_borrowed() == to_unit("20") - to_unit("1000")


def test_expected_event_collateral(make_driver):
    assert make_driver(COLLATERAL_ETH).expected_event_collateral() == to_unit("2")
    assert make_driver(COLLATERAL_ERC20).expected_event_collateral() == 10**8 * RENBTC_SCALE
    assert make_driver(COLLATERAL_SHORT).expected_event_collateral() == to_unit("1000")
