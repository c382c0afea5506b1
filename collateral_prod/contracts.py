"""
Contract handles bound from a deployment.

A handle exposes the contract's ABI functions as attributes. View functions
are called, everything else is sent as a transaction from ``sender`` and
returns the mined receipt::

    manager.owner()
    collateral.open(amount, currency, sender=user, value=deposit)
"""
import json
import logging
from pathlib import Path
from typing import Optional

from web3 import Web3
from web3.logs import DISCARD

from collateral_prod.deployment import Deployment
from collateral_prod.exceptions import EventNotFoundError, TransactionFailedError, UnknownContractError
from collateral_prod.network import unlock_account

logger = logging.getLogger(__name__)

ABI_DIR = Path(__file__).resolve().parent / "abis"

READ_ONLY = ("view", "pure")


def load_abi(name: str) -> list:
    abi_file = ABI_DIR / f"{name}.json"
    if not abi_file.exists():
        raise UnknownContractError(f"No bundled ABI for {name}")
    with open(abi_file, "r") as f:
        return json.load(f)


def _is_read_only(entry: dict) -> bool:
    if "stateMutability" in entry:
        return entry["stateMutability"] in READ_ONLY
    return bool(entry.get("constant"))


class ContractMethod:
    def __init__(self, handle: "ContractHandle", name: str, read_only: bool):
        self.handle = handle
        self.name = name
        self.read_only = read_only

    def __repr__(self):
        return f"<{self.handle.name}.{self.name}>"

    def __call__(self, *args, sender: Optional[str] = None, value: int = 0):
        fn = getattr(self.handle.contract.functions, self.name)(*args)
        if self.read_only:
            params = {"from": Web3.to_checksum_address(sender)} if sender else {}
            return fn.call(params)
        return self.handle.transact(fn, sender, value, self.name)


class ContractHandle:
    def __init__(self, w3: Web3, name: str, address: str, abi: list):
        self.w3 = w3
        self.name = name
        self.address = Web3.to_checksum_address(address)
        self.abi = abi
        self.contract = w3.eth.contract(address=self.address, abi=abi)
        self._read_only = {}
        for entry in abi:
            if entry.get("type") != "function":
                continue
            # an overloaded name is read only when every variant is
            flag = _is_read_only(entry)
            self._read_only[entry["name"]] = self._read_only.get(entry["name"], True) and flag

    def __repr__(self):
        return f"<{self.name} at {self.address}>"

    def __getattr__(self, name):
        read_only = self.__dict__.get("_read_only", {})
        if name not in read_only:
            raise AttributeError(f"{self.__dict__.get('name')} has no function {name}")
        return ContractMethod(self, name, read_only[name])

    def transact(self, fn, sender: str, value: int = 0, method: str = "?"):
        if sender is None:
            raise ValueError(f"{self.name}: a sender is required to send a transaction")
        sender = unlock_account(self.w3, sender)
        params = {"from": sender}
        if value:
            params["value"] = value
        tx_hash = fn.transact(params)
        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash)
        if receipt["status"] != 1:
            raise TransactionFailedError(Web3.to_hex(tx_hash), receipt)
        logger.debug("%s.%s mined in block %s", self.name, method, receipt["blockNumber"])
        return receipt

    def get_events(self, receipt, event_name: str) -> list:
        event = getattr(self.contract.events, event_name)()
        return [log["args"] for log in event.process_receipt(receipt, errors=DISCARD)]

    def get_event(self, receipt, event_name: str):
        events = self.get_events(receipt, event_name)
        if not events:
            raise EventNotFoundError(self.name, event_name)
        return events[0]


def at(w3: Web3, abi_name: str, address: str, deployment: Optional[Deployment] = None) -> ContractHandle:
    """Bind ``address`` with the ABI of ``abi_name``, from the deployment sources if present."""
    if deployment is not None and abi_name in deployment.sources:
        abi = deployment.abi_of(abi_name)
    else:
        abi = load_abi(abi_name)
    return ContractHandle(w3, abi_name, address, abi)


def connect_contract(
    w3: Web3,
    deployment: Deployment,
    contract_name: str,
    abi_name: Optional[str] = None,
    alias: Optional[str] = None,
) -> ContractHandle:
    target = deployment.get_target(contract_name)
    abi_name = abi_name or target.get("source") or contract_name
    if abi_name in deployment.sources:
        abi = deployment.abi_of(abi_name)
    else:
        abi = load_abi(abi_name)
    return ContractHandle(w3, alias or contract_name, target["address"], abi)


def connect_contracts(w3: Web3, deployment: Deployment, requests: list) -> dict:
    """
    Connect several contracts at once.

    ``requests`` holds dicts with ``contract_name`` and optionally ``abi_name``
    and ``alias``; the result is keyed by alias (contract name by default).
    """
    contracts = {}
    for request in requests:
        contract_name = request["contract_name"]
        alias = request.get("alias", contract_name)
        contracts[alias] = connect_contract(w3, deployment, contract_name, request.get("abi_name"), alias)
    return contracts
