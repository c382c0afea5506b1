"""
Loan lifecycle driver for the three collateral types.

The collateral contracts differ in how collateral moves: native ETH is sent as
value and pulled back with ``claim``, ERC-20 collateral is approved and taken
with ``transferFrom``, shorts take sUSD as collateral and pay out sUSD. The
driver hides those differences so one set of tests covers all three.
"""
import logging
from typing import NamedTuple, Optional

from web3 import Web3

from collateral_prod.constants import LOCAL_NETWORK, RENBTC_SCALE
from collateral_prod.contracts import ContractHandle, at
from collateral_prod.deployment import Deployment, get_known_account
from collateral_prod.exceptions import MissingAccountError, UnsupportedCollateralError
from collateral_prod.network import fast_forward
from collateral_prod.units import multiply_decimal_round, to_bytes32, to_unit

logger = logging.getLogger(__name__)

COLLATERAL_ETH = "CollateralEth"
COLLATERAL_ERC20 = "CollateralErc20"
COLLATERAL_SHORT = "CollateralShort"
COLLATERAL_TYPES = (COLLATERAL_ETH, COLLATERAL_ERC20, COLLATERAL_SHORT)

RENBTC_HOLDER = "renBTCWallet"
# twice the deposit, so the borrower can top the loan up after opening it
RENBTC_TRANSFER_AMOUNT = 200_000_000
APPROVAL_AMOUNT = to_unit("10000")

# Contracts the loan flows read from, keyed by contract name
CONTRACT_REQUESTS = [
    {"contract_name": "CollateralManagerState"},
    {"contract_name": "CollateralManager"},
    {"contract_name": "CollateralErc20"},
    {"contract_name": "CollateralEth"},
    {"contract_name": "CollateralShort"},
    {"contract_name": "DebtCache"},
    {"contract_name": "ExchangeRates"},
    {"contract_name": "ReadProxyAddressResolver"},
    {"contract_name": "SynthsUSD", "abi_name": "Synth"},
]


class LoanScenario(NamedTuple):
    type: str
    collateral_currency: str
    amount_to_deposit: int
    borrow_currency: str
    amount_to_borrow: int
    extra_amount_to_deposit: int

    @property
    def name(self) -> str:
        return (
            f"{self.type}: deposit {self.amount_to_deposit} {self.collateral_currency}, "
            f"borrow {self.amount_to_borrow} {self.borrow_currency}"
        )

    @property
    def is_short(self) -> bool:
        return self.type == COLLATERAL_SHORT


SCENARIOS = {
    COLLATERAL_ETH: LoanScenario(
        type=COLLATERAL_ETH,
        collateral_currency="ETH",
        amount_to_deposit=to_unit("2"),
        borrow_currency="sUSD",
        amount_to_borrow=to_unit("0.5"),
        extra_amount_to_deposit=to_unit("1"),
    ),
    COLLATERAL_ERC20: LoanScenario(
        type=COLLATERAL_ERC20,
        collateral_currency="renBTC",
        amount_to_deposit=100_000_000,  # 1 renBTC, 8 decimals
        borrow_currency="sUSD",
        amount_to_borrow=to_unit("0.5"),
        extra_amount_to_deposit=100_000_000,
    ),
    COLLATERAL_SHORT: LoanScenario(
        type=COLLATERAL_SHORT,
        collateral_currency="sUSD",
        amount_to_deposit=to_unit("1000"),
        borrow_currency="sETH",
        amount_to_borrow=to_unit("0.01"),
        extra_amount_to_deposit=100_000_000,
    ),
}


class Loan(NamedTuple):
    id: int
    account: str
    collateral: int
    currency: bytes
    amount: int
    short: bool
    accrued_interest: int
    interest_index: int
    last_interaction: int


class CollateralLoanDriver:
    def __init__(
        self,
        w3: Web3,
        deployment: Deployment,
        contracts: dict,
        scenario: LoanScenario,
        network: str,
        owner: str,
    ):
        if scenario.type not in COLLATERAL_TYPES:
            raise UnsupportedCollateralError(scenario.type)

        self.w3 = w3
        self.deployment = deployment
        self.scenario = scenario
        self.network = network
        self.owner = owner
        self.currency = to_bytes32(scenario.borrow_currency)

        self.collateral: ContractHandle = contracts[scenario.type]
        self.susd: ContractHandle = contracts["SynthsUSD"]
        self.exchange_rates: Optional[ContractHandle] = contracts.get("ExchangeRates")

        if scenario.type == COLLATERAL_ETH:
            self.deposit_token = None
        elif scenario.type == COLLATERAL_ERC20:
            self.deposit_token = at(w3, "ERC20", self.collateral.underlyingContract(), deployment)
        else:
            self.deposit_token = self.susd
        self.borrow_token = self.susd

        self.state = at(w3, "CollateralState", self.collateral.state(), deployment)

    @property
    def is_eth(self) -> bool:
        return self.scenario.type == COLLATERAL_ETH

    def deposit_balance(self, account: str) -> int:
        if self.is_eth:
            return self.w3.eth.get_balance(account)
        return self.deposit_token.balanceOf(account)

    def borrow_balance(self, account: str) -> int:
        return self.borrow_token.balanceOf(account)

    def collateral_holder(self) -> str:
        """Account the renBTC collateral is taken from."""
        if self.network == LOCAL_NETWORK:
            return self.owner
        holder = get_known_account(self.network, RENBTC_HOLDER)
        if not holder:
            raise MissingAccountError(f"No known renBTC holder for network {self.network}")
        return holder

    def open(self, account: str):
        scenario = self.scenario
        if scenario.type == COLLATERAL_ERC20:
            holder = self.collateral_holder()
            self.deposit_token.transfer(account, RENBTC_TRANSFER_AMOUNT, sender=holder)
            self.deposit_token.approve(self.collateral.address, APPROVAL_AMOUNT, sender=account)
            receipt = self.collateral.open(
                scenario.amount_to_deposit, scenario.amount_to_borrow, self.currency, sender=account
            )
        elif scenario.type == COLLATERAL_SHORT:
            self.susd.approve(self.collateral.address, APPROVAL_AMOUNT, sender=account)
            receipt = self.collateral.open(
                scenario.amount_to_deposit, scenario.amount_to_borrow, self.currency, sender=account
            )
        else:
            receipt = self.collateral.open(
                scenario.amount_to_borrow, self.currency, sender=account, value=scenario.amount_to_deposit
            )
        logger.info("Opened %s", scenario.name)
        return receipt

    def loan_created(self, receipt):
        return self.collateral.get_event(receipt, "LoanCreated")

    def get_loan(self, account: str, loan_id: int) -> Loan:
        return Loan(*self.state.getLoan(account, loan_id))

    def collateral_ratio(self, loan: Loan) -> int:
        return self.collateral.collateralRatio(tuple(loan))

    def skip_interaction_delay(self):
        fast_forward(self.w3, self.collateral.interactionDelay())

    def deposit(self, account: str, loan_id: int, amount: int):
        if self.is_eth:
            return self.collateral.deposit(account, loan_id, sender=account, value=amount)
        return self.collateral.deposit(account, loan_id, amount, sender=account)

    def withdraw(self, account: str, loan_id: int, amount: int):
        receipt = self.collateral.withdraw(loan_id, amount, sender=account)
        # ETH collateral has to be pulled by the borrower
        if self.is_eth:
            self.collateral.claim(amount, sender=account)
        return receipt

    def repay(self, account: str, loan_id: int, amount: int):
        return self.collateral.repay(account, loan_id, amount, sender=account)

    def close(self, account: str, loan_id: int):
        receipt = self.collateral.close(loan_id, sender=account)
        if self.is_eth:
            self.collateral.claim(self.scenario.amount_to_deposit, sender=account)
        return receipt

    def net_amount_borrowed(self) -> int:
        """Borrow balance change on open: shorts pay out sUSD and keep the sUSD collateral."""
        if not self.scenario.is_short:
            return self.scenario.amount_to_borrow
        rate = self.exchange_rates.rateForCurrency(self.currency)
        return multiply_decimal_round(self.scenario.amount_to_borrow, rate) - self.scenario.amount_to_deposit

    def expected_event_collateral(self) -> int:
        if self.scenario.type == COLLATERAL_ERC20:
            return self.scenario.amount_to_deposit * RENBTC_SCALE
        return self.scenario.amount_to_deposit
