#!/usr/bin/env python3
"""
Contract deployers handed to migration scripts.

A deployer exposes ``artifacts`` (an ArtifactResolver) and
``deploy(artifact, *constructor_args, overwrite=True)``.
"""

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import requests
from web3 import Web3
from web3.exceptions import Web3Exception
from web3.middleware import ExtraDataToPOAMiddleware

from .artifacts import ArtifactResolver, ContractArtifact
from .errors import DeploymentError

logger = logging.getLogger(__name__)


@dataclass
class DeploymentReceipt:
    """Outcome of a single contract deployment"""
    contract_name: str
    address: str
    transaction_hash: Optional[str]
    block_number: Optional[int]
    chain_id: int
    deployed_at: str
    reused: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop('reused')
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], reused: bool = False) -> "DeploymentReceipt":
        return cls(
            contract_name=data['contract_name'],
            address=data['address'],
            transaction_hash=data.get('transaction_hash'),
            block_number=data.get('block_number'),
            chain_id=data['chain_id'],
            deployed_at=data['deployed_at'],
            reused=reused,
        )


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def connect(rpc_url: str, chain_id: Optional[int] = None) -> Web3:
    """Connects to a JSON-RPC node, raising ConnectionError if it is unreachable."""
    w3 = Web3(Web3.HTTPProvider(rpc_url))
    # Clique/POA chains carry extra data in the block header
    w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)

    if not w3.is_connected():
        raise ConnectionError(f"Could not connect to RPC URL: {rpc_url}")

    logger.info(f"Connected to blockchain at {rpc_url}")

    if chain_id is not None and w3.eth.chain_id != chain_id:
        logger.warning(f"Node reports chain id {w3.eth.chain_id}, but CHAIN_ID is {chain_id}")
    return w3


class Web3Deployer:
    """Signs and sends contract creation transactions from a local account"""

    def __init__(self, w3: Web3, account, chain_id: int, artifacts: ArtifactResolver,
                 registry=None, gas_limit: Optional[int] = None, network: str = "development"):
        self.w3 = w3
        self.account = account
        self.chain_id = chain_id
        self.artifacts = artifacts
        self.registry = registry
        self.gas_limit = gas_limit
        self.network = network

    def _existing(self, contract_name: str) -> Optional[DeploymentReceipt]:
        if self.registry is None:
            return None
        entry = self.registry.get(contract_name)
        if entry is None:
            return None
        return DeploymentReceipt.from_dict(entry, reused=True)

    def _build_transaction(self, artifact: ContractArtifact, constructor_args) -> Dict[str, Any]:
        contract = self.w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
        tx_params = {
            'from': self.account.address,
            'nonce': self.w3.eth.get_transaction_count(self.account.address),
            'gasPrice': self.w3.eth.gas_price,
            'chainId': self.chain_id,
        }
        # build_transaction estimates gas when no limit is given
        if self.gas_limit is not None:
            tx_params['gas'] = self.gas_limit
        return contract.constructor(*constructor_args).build_transaction(tx_params)

    def deploy(self, artifact: ContractArtifact, *constructor_args, overwrite: bool = True) -> DeploymentReceipt:
        name = artifact.contract_name

        if not overwrite:
            existing = self._existing(name)
            if existing is not None:
                logger.info(f"Reusing {name} at {existing.address}")
                return existing

        if not artifact.is_deployable:
            raise DeploymentError(name, "artifact has no bytecode (abstract contract or interface?)")

        logger.info(f"Deploying {name}...")
        try:
            tx = self._build_transaction(artifact, constructor_args)
            signed_tx = self.w3.eth.account.sign_transaction(tx, self.account.key)
            tx_hash = self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
            logger.info(f"{name} transaction sent: {Web3.to_hex(tx_hash)}")
            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash)
        except (Web3Exception, ValueError, requests.exceptions.RequestException) as e:
            raise DeploymentError(name, f"transaction failed: {e}") from e

        tx_hex = Web3.to_hex(tx_hash)
        if receipt['status'] != 1:
            raise DeploymentError(name, "contract creation reverted", tx_hash=tx_hex)

        result = DeploymentReceipt(
            contract_name=name,
            address=receipt['contractAddress'],
            transaction_hash=tx_hex,
            block_number=receipt['blockNumber'],
            chain_id=self.chain_id,
            deployed_at=_now(),
        )
        logger.info(f"{name} deployed at {result.address} (block {result.block_number})")

        if self.registry is not None:
            self.registry.record(result)
        return result


class DryRunDeployer:
    """Records deploy requests without touching the network"""

    def __init__(self, artifacts: ArtifactResolver, chain_id: int = 31337, registry=None,
                 network: str = "development"):
        self.artifacts = artifacts
        self.chain_id = chain_id
        self.registry = registry
        self.network = network
        self.requests: List[Tuple[str, tuple]] = []

    def deploy(self, artifact: ContractArtifact, *constructor_args, overwrite: bool = True) -> DeploymentReceipt:
        name = artifact.contract_name

        if not overwrite and self.registry is not None:
            entry = self.registry.get(name)
            if entry is not None:
                logger.info(f"[dry run] Would reuse {name} at {entry['address']}")
                return DeploymentReceipt.from_dict(entry, reused=True)

        if not artifact.is_deployable:
            raise DeploymentError(name, "artifact has no bytecode (abstract contract or interface?)")

        self.requests.append((name, constructor_args))
        seed = f"{self.chain_id}:{name}:{len(self.requests)}"
        address = Web3.to_checksum_address(Web3.keccak(text=seed)[-20:])
        logger.info(f"[dry run] Would deploy {name} with args {list(constructor_args)}")

        return DeploymentReceipt(
            contract_name=name,
            address=address,
            transaction_hash=None,
            block_number=None,
            chain_id=self.chain_id,
            deployed_at=_now(),
        )
