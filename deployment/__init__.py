"""
CredentialBox Deployment Tooling
================================

Deploys the CredentialBox contracts to an EVM network.

Structure:
- artifacts: compiled contract lookup
- deployer: web3 and dry-run deployers
- registry: deployed addresses and migration progress
- runner: numbered migration scripts
- notifications: Slack and email alerts
"""

from .artifacts import ArtifactResolver, ContractArtifact
from .config import DeploymentConfig
from .deployer import DeploymentReceipt, DryRunDeployer, Web3Deployer, connect
from .errors import (
    ArtifactError,
    ArtifactNotFoundError,
    ConfigurationError,
    DeploymentError,
    DeploymentToolError,
    MigrationError,
)
from .registry import DeploymentRegistry
from .runner import Migration, MigrationRunner, discover_migrations

__version__ = "1.0.0"

__all__ = [
    'ArtifactResolver',
    'ContractArtifact',
    'DeploymentConfig',
    'DeploymentReceipt',
    'DryRunDeployer',
    'Web3Deployer',
    'connect',
    'ArtifactError',
    'ArtifactNotFoundError',
    'ConfigurationError',
    'DeploymentError',
    'DeploymentToolError',
    'MigrationError',
    'DeploymentRegistry',
    'Migration',
    'MigrationRunner',
    'discover_migrations',
]
