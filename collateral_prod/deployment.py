"""
Access to deployment files produced by the deploy tooling.

A deployment directory holds ``deployment.json``::

    {
        "targets": {"CollateralEth": {"name": ..., "address": ..., "source": "CollateralEth"}},
        "sources": {"CollateralEth": {"abi": [...]}}
    }

and optionally ``users.json`` (``[{"name": "owner", "address": ...}]``).
"""
import json
import logging
from pathlib import Path
from typing import Optional

from collateral_prod.constants import (
    DEFAULT_OWNERS,
    DEPLOYMENT_FILENAME,
    KNOWN_ACCOUNTS,
    USERS_FILENAME,
)
from collateral_prod.exceptions import (
    DeploymentNotFoundError,
    MissingAccountError,
    UnknownContractError,
)

logger = logging.getLogger(__name__)


class Deployment:
    def __init__(self, network: str, targets: dict, sources: dict, users: Optional[list] = None, path=None):
        self.network = network
        self.targets = targets
        self.sources = sources
        self.users = users or []
        self.path = path

    @classmethod
    def load(cls, network: str, deployment_path) -> "Deployment":
        deployment_path = Path(deployment_path)
        deployment_file = deployment_path / DEPLOYMENT_FILENAME
        if not deployment_file.exists():
            raise DeploymentNotFoundError(f"No deployment for {network} at {deployment_file}")

        with open(deployment_file, "r") as f:
            data = json.load(f)

        users = []
        users_file = deployment_path / USERS_FILENAME
        if users_file.exists():
            with open(users_file, "r") as f:
                users = json.load(f)

        logger.info(
            "Loaded %s deployment from %s (%d targets)", network, deployment_path, len(data.get("targets", {}))
        )
        return cls(network, data.get("targets", {}), data.get("sources", {}), users, deployment_path)

    def has_target(self, contract: str) -> bool:
        return contract in self.targets

    def get_target(self, contract: str) -> dict:
        try:
            return self.targets[contract]
        except KeyError:
            raise UnknownContractError(f"{contract} is not deployed on {self.network}") from None

    def get_source(self, contract: str) -> dict:
        try:
            return self.sources[contract]
        except KeyError:
            raise UnknownContractError(f"No source for {contract} on {self.network}") from None

    def abi_of(self, abi_name: str) -> list:
        return self.get_source(abi_name)["abi"]

    def get_user(self, name: str = "owner") -> str:
        for user in self.users:
            if user["name"] == name:
                return user["address"]
        if name == "owner" and self.network in DEFAULT_OWNERS:
            return DEFAULT_OWNERS[self.network]
        raise MissingAccountError(f"No {name} user for network {self.network}")

    def implements_multi_collateral(self) -> bool:
        return self.has_target("CollateralManager")


def get_known_account(network: str, name: str) -> Optional[str]:
    for account in KNOWN_ACCOUNTS.get(network, []):
        if account["name"] == name:
            return account["address"]
    return None
