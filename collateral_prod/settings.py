import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from collateral_prod.constants import DEFAULT_DEPLOYMENT_ROOT, DEFAULT_RPC_TIMEOUT

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(Path(BASE_DIR, ".env"))

TRUTHY = ("1", "true", "yes", "on")


def env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in TRUTHY


@dataclass(frozen=True)
class Settings:
    provider_url: Optional[str] = None
    target_network: Optional[str] = None
    deployment_path: Optional[str] = None
    patch_fresh_deployment: bool = False
    use_ovm: bool = False
    rpc_timeout: int = DEFAULT_RPC_TIMEOUT

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            provider_url=os.getenv("WEB3_PROVIDER_URL") or None,
            target_network=os.getenv("TARGET_NETWORK") or None,
            deployment_path=os.getenv("DEPLOYMENT_PATH") or None,
            patch_fresh_deployment=env_flag("PATCH_FRESH_DEPLOYMENT"),
            use_ovm=env_flag("USE_OVM"),
            rpc_timeout=int(os.getenv("RPC_TIMEOUT") or DEFAULT_RPC_TIMEOUT),
        )

    def deployment_path_for(self, network: str) -> Path:
        if self.deployment_path:
            return Path(self.deployment_path)
        return Path(BASE_DIR, DEFAULT_DEPLOYMENT_ROOT, network)
