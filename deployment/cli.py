#!/usr/bin/env python3
"""
credbox-migrate: run pending migrations against the configured network
"""

import argparse
import logging
import sys

from .artifacts import ArtifactResolver
from .config import DeploymentConfig
from .deployer import DryRunDeployer, Web3Deployer, connect
from .errors import ConfigurationError, DeploymentToolError
from .notifications import Notifier
from .registry import DeploymentRegistry
from .runner import MigrationRunner, discover_migrations

logger = logging.getLogger(__name__)


def configure_logging(log_file: str = 'deployment.log', level=logging.INFO):
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ]
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='credbox-migrate',
        description='Deploy the CredentialBox contracts by running pending migrations.',
    )
    parser.add_argument('--network', help='Network name recorded in the registry (default: $NETWORK)')
    parser.add_argument('--reset', action='store_true',
                        help='Forget previous progress on this chain and run all migrations')
    parser.add_argument('--to', type=int, metavar='N', help='Run migrations up to and including N')
    parser.add_argument('--dry-run', action='store_true',
                        help='Resolve artifacts and list deploy requests without sending transactions')
    parser.add_argument('--migrations-dir', help='Directory holding <n>_<name>.py scripts')
    parser.add_argument('--build-dir', help='Directory holding compiled contract artifacts')
    parser.add_argument('--registry', help='Deployment registry JSON file')
    parser.add_argument('--env-file', help='Path to a .env file')
    parser.add_argument('--log-file', default='deployment.log', help='Log file path')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    return parser


def apply_overrides(config: DeploymentConfig, args) -> DeploymentConfig:
    if args.network:
        config.network = args.network
    if args.migrations_dir:
        config.migrations_dir = args.migrations_dir
    if args.build_dir:
        config.build_dir = args.build_dir
    if args.registry:
        config.deployment_file = args.registry
    return config


def build_deployer(config: DeploymentConfig, registry: DeploymentRegistry, dry_run: bool, reset: bool):
    artifacts = ArtifactResolver(config.build_dir)

    if dry_run:
        return DryRunDeployer(
            artifacts,
            chain_id=config.chain_id,
            registry=None if reset else registry,
            network=config.network,
        )

    private_key = config.require_private_key()
    w3 = connect(config.rpc_url, config.chain_id)
    try:
        account = w3.eth.account.from_key(private_key)
    except (ValueError, TypeError) as e:
        raise ConfigurationError("PRIVATE_KEY is not a valid private key") from e
    logger.info(f"Using deployer account: {account.address}")

    return Web3Deployer(
        w3,
        account,
        chain_id=config.chain_id,
        artifacts=artifacts,
        registry=registry,
        gas_limit=config.gas_limit,
        network=config.network,
    )


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_file, logging.DEBUG if args.verbose else logging.INFO)

    notifier = None
    try:
        config = apply_overrides(DeploymentConfig.from_env(args.env_file), args)
        notifier = Notifier.from_config(config)

        registry = DeploymentRegistry(config.deployment_file, config.chain_id, config.network)
        deployer = build_deployer(config, registry, args.dry_run, args.reset)
        migrations = discover_migrations(config.migrations_dir)

        runner = MigrationRunner(deployer, registry, dry_run=args.dry_run)
        completed = runner.run(migrations, reset=args.reset, to=args.to)

    except KeyboardInterrupt:
        logger.info("Deployment stopped by user")
        return 130
    except (DeploymentToolError, ConnectionError) as e:
        logger.error(f"Deployment failed: {e}")
        if notifier is not None and not args.dry_run:
            notifier.send(f"Deployment failed: {e}")
        return 1

    if args.dry_run:
        for name, constructor_args in deployer.requests:
            logger.info(f"[dry run] deploy {name} {list(constructor_args)}")
        return 0

    if completed:
        fields = {
            name: entry['address']
            for name, entry in registry.contracts().items()
        }
        notifier.send(
            f"Ran {len(completed)} migration(s) on {config.network} (chain {config.chain_id})",
            fields,
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
