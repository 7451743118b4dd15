import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError


def _int_env(name: str, default: Optional[str]) -> Optional[int]:
    # blank values in .env fall back to the default
    raw = os.getenv(name) or default
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


@dataclass
class DeploymentConfig:
    """Runtime settings read from the environment (and .env file)"""
    rpc_url: str = "http://localhost:8545"
    private_key: Optional[str] = None
    chain_id: int = 31337
    network: str = "development"
    gas_limit: Optional[int] = None
    build_dir: str = os.path.join("build", "contracts")
    migrations_dir: str = "migrations"
    deployment_file: str = "deployment.json"

    # Notification settings
    slack_webhook: Optional[str] = None
    smtp_server: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    notification_email: Optional[str] = None

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "DeploymentConfig":
        load_dotenv(dotenv_path)

        return cls(
            rpc_url=os.getenv("RPC_URL") or cls.rpc_url,
            private_key=os.getenv("PRIVATE_KEY") or None,
            chain_id=_int_env("CHAIN_ID", str(cls.chain_id)),
            network=os.getenv("NETWORK") or cls.network,
            gas_limit=_int_env("GAS_LIMIT", None),
            build_dir=os.getenv("BUILD_DIR") or cls.build_dir,
            migrations_dir=os.getenv("MIGRATIONS_DIR") or cls.migrations_dir,
            deployment_file=os.getenv("DEPLOYMENT_FILE") or cls.deployment_file,
            slack_webhook=os.getenv("SLACK_WEBHOOK") or None,
            smtp_server=os.getenv("SMTP_SERVER") or cls.smtp_server,
            smtp_port=_int_env("SMTP_PORT", str(cls.smtp_port)),
            smtp_username=os.getenv("SMTP_USERNAME") or None,
            smtp_password=os.getenv("SMTP_PASSWORD") or None,
            notification_email=os.getenv("NOTIFICATION_EMAIL") or None,
        )

    def require_private_key(self) -> str:
        if not self.private_key:
            raise ConfigurationError("PRIVATE_KEY not found in environment")
        return self.private_key
