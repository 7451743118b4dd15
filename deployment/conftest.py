import json
import os

import pytest

MIGRATIONS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'migrations')


def _write_artifact(build_dir, name, bytecode="0x6080604052", abi=None):
    path = os.path.join(str(build_dir), f"{name}.json")
    with open(path, 'w') as f:
        json.dump({
            'contractName': name,
            'abi': abi if abi is not None else [],
            'bytecode': bytecode,
        }, f)
    return path


@pytest.fixture
def write_artifact():
    """Writes a minimal Truffle-style artifact and returns its path"""
    return _write_artifact


@pytest.fixture
def build_dir(tmp_path):
    """Build directory holding the Migrations and CredentialBox artifacts"""
    directory = tmp_path / "build" / "contracts"
    directory.mkdir(parents=True)
    _write_artifact(directory, "Migrations")
    _write_artifact(directory, "CredentialBox", bytecode="0x60806040523480")
    return directory


@pytest.fixture
def migrations_dir():
    return MIGRATIONS_DIR
