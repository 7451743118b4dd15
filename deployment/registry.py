"""
Deployment registry: addresses of deployed contracts and migration progress,
kept per chain id in a JSON file.

Layout::

    {
      "31337": {
        "network": "development",
        "contracts": {"Migrations": {"address": "0x...", ...}},
        "lastCompletedMigration": 1
      }
    }
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class DeploymentRegistry:
    def __init__(self, path: str, chain_id: int, network: str = "development"):
        self.path = path
        self.chain_id = chain_id
        self.network = network
        self._data = self._load()

    def _load(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Deployment file {self.path} is not valid JSON: {e}") from e

    def _save(self):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, 'w') as f:
            json.dump(self._data, f, indent=2, sort_keys=True)
        os.replace(tmp_path, self.path)

    @property
    def _chain(self) -> Dict[str, Any]:
        key = str(self.chain_id)
        if key not in self._data:
            self._data[key] = {
                'network': self.network,
                'contracts': {},
                'lastCompletedMigration': 0,
            }
        return self._data[key]

    def get(self, contract_name: str) -> Optional[Dict[str, Any]]:
        return self._data.get(str(self.chain_id), {}).get('contracts', {}).get(contract_name)

    def contracts(self) -> Dict[str, Dict[str, Any]]:
        return dict(self._data.get(str(self.chain_id), {}).get('contracts', {}))

    def address_of(self, contract_name: str) -> Optional[str]:
        entry = self.get(contract_name)
        return entry['address'] if entry else None

    def record(self, receipt) -> None:
        """Stores a deployment receipt and writes the file."""
        self._chain['contracts'][receipt.contract_name] = receipt.to_dict()
        self._save()
        logger.info(f"Recorded {receipt.contract_name} at {receipt.address} (chain {self.chain_id})")

    @property
    def last_completed_migration(self) -> int:
        return self._data.get(str(self.chain_id), {}).get('lastCompletedMigration', 0)

    def set_completed(self, number: int) -> None:
        self._chain['lastCompletedMigration'] = number
        self._save()

    def reset(self) -> None:
        """Forgets every deployment and migration on this chain."""
        self._data.pop(str(self.chain_id), None)
        self._save()
        logger.info(f"Registry reset for chain {self.chain_id}")
