"""Exceptions raised by the deployment tooling."""


class DeploymentToolError(Exception):
    """Base class for all deployment tooling errors"""


class ConfigurationError(DeploymentToolError):
    """Missing or malformed environment configuration"""


class ArtifactError(DeploymentToolError):
    """A compiled contract artifact is unusable"""


class ArtifactNotFoundError(ArtifactError):
    """No compiled artifact exists for the requested name"""


class DeploymentError(DeploymentToolError):
    """A contract creation transaction failed or reverted"""

    def __init__(self, contract_name, message, tx_hash=None):
        self.contract_name = contract_name
        self.tx_hash = tx_hash
        super().__init__(f"{contract_name}: {message}")


class MigrationError(DeploymentToolError):
    """A migration script could not be loaded or did not complete"""
