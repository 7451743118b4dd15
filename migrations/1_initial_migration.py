"""Deploys Migrations, then CredentialBox."""

ARTIFACTS = ("Migrations", "CredentialBox.sol")


def run(deployer):
    for name in ARTIFACTS:
        deployer.deploy(deployer.artifacts.require(name))
