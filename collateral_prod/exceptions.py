class ProdTestError(Exception):
    """Base class for precondition failures of the production suite."""


class DeploymentNotFoundError(ProdTestError):
    pass


class UnknownContractError(ProdTestError):
    pass


class MissingAccountError(ProdTestError):
    pass


class InsufficientBalanceError(ProdTestError):
    def __init__(self, account, balance, amount, asset="ETH"):
        self.account = account
        self.balance = balance
        self.amount = amount
        self.asset = asset
        super().__init__(
            f"Account {account} only has {balance} {asset} and cannot transfer {amount} {asset}"
        )


class UnsupportedCollateralError(ProdTestError):
    def __init__(self, collateral_type):
        self.collateral_type = collateral_type
        super().__init__(f"Unsupported collateral type {collateral_type}")


class RPCError(ProdTestError):
    def __init__(self, method, error):
        self.method = method
        self.error = error
        message = error.get("message", error) if isinstance(error, dict) else error
        super().__init__(f"{method} failed: {message}")


class TransactionFailedError(ProdTestError):
    def __init__(self, tx_hash, receipt=None):
        self.tx_hash = tx_hash
        self.receipt = receipt
        super().__init__(f"Transaction {tx_hash} failed")


class EventNotFoundError(ProdTestError):
    def __init__(self, contract, event_name):
        self.contract = contract
        self.event_name = event_name
        super().__init__(f"{contract} emitted no {event_name} event")
