#!/usr/bin/env python3
"""
Tests for migration discovery and the migration runner
"""

from unittest.mock import MagicMock

import pytest

from deployment.errors import DeploymentError, MigrationError
from deployment.registry import DeploymentRegistry
from deployment.runner import MigrationRunner, discover_migrations

RECORDING_SCRIPT = '''
def run(deployer):
    deployer.deploy({name!r})
'''


def write_migration(directory, filename, body):
    path = directory / filename
    path.write_text(body)
    return path


@pytest.fixture
def scripts(tmp_path):
    directory = tmp_path / "migrations"
    directory.mkdir()
    write_migration(directory, "1_initial_migration.py", RECORDING_SCRIPT.format(name="first"))
    write_migration(directory, "2_deploy_box.py", RECORDING_SCRIPT.format(name="second"))
    write_migration(directory, "10_later.py", RECORDING_SCRIPT.format(name="tenth"))
    write_migration(directory, "README.md", "not a migration")
    write_migration(directory, "helpers.py", "raise RuntimeError('never imported')")
    return directory


class TestDiscoverMigrations:
    def test_numeric_order(self, scripts):
        migrations = discover_migrations(str(scripts))

        assert [m.number for m in migrations] == [1, 2, 10]
        assert [m.name for m in migrations] == ["initial_migration", "deploy_box", "later"]

    def test_duplicate_numbers(self, scripts):
        write_migration(scripts, "2_other.py", RECORDING_SCRIPT.format(name="dup"))
        with pytest.raises(MigrationError, match="Duplicate migration number 2"):
            discover_migrations(str(scripts))

    def test_missing_directory(self, tmp_path):
        with pytest.raises(MigrationError, match="not found"):
            discover_migrations(str(tmp_path / "nope"))


class TestMigrationLoad:
    def test_script_without_run(self, tmp_path):
        write_migration(tmp_path, "1_empty.py", "VALUE = 1\n")
        migration = discover_migrations(str(tmp_path))[0]
        with pytest.raises(MigrationError, match="does not define run"):
            migration.load()

    def test_script_with_import_error(self, tmp_path):
        write_migration(tmp_path, "1_broken.py", "import does_not_exist_anywhere\n")
        migration = discover_migrations(str(tmp_path))[0]
        with pytest.raises(MigrationError, match="failed to import"):
            migration.load()


class TestMigrationRunner:
    """Test class for MigrationRunner"""

    def test_runs_all_in_order_and_records_progress(self, scripts, tmp_path):
        deployer = MagicMock()
        registry = DeploymentRegistry(str(tmp_path / "deployment.json"), 31337)

        completed = MigrationRunner(deployer, registry).run(discover_migrations(str(scripts)))

        assert [m.number for m in completed] == [1, 2, 10]
        assert [c.args[0] for c in deployer.deploy.call_args_list] == ["first", "second", "tenth"]
        assert registry.last_completed_migration == 10

    def test_skips_completed_migrations(self, scripts, tmp_path):
        deployer = MagicMock()
        registry = DeploymentRegistry(str(tmp_path / "deployment.json"), 31337)
        registry.set_completed(2)

        completed = MigrationRunner(deployer, registry).run(discover_migrations(str(scripts)))

        assert [m.number for m in completed] == [10]
        deployer.deploy.assert_called_once_with("tenth")

    def test_up_to_date(self, scripts, tmp_path):
        deployer = MagicMock()
        registry = DeploymentRegistry(str(tmp_path / "deployment.json"), 31337)
        registry.set_completed(10)

        assert MigrationRunner(deployer, registry).run(discover_migrations(str(scripts))) == []
        deployer.deploy.assert_not_called()

    def test_to_limits_range(self, scripts):
        deployer = MagicMock()
        completed = MigrationRunner(deployer).run(discover_migrations(str(scripts)), to=2)

        assert [m.number for m in completed] == [1, 2]

    def test_reset_reruns_everything(self, scripts, tmp_path):
        deployer = MagicMock()
        registry = DeploymentRegistry(str(tmp_path / "deployment.json"), 31337)
        registry.set_completed(10)

        completed = MigrationRunner(deployer, registry).run(discover_migrations(str(scripts)), reset=True)

        assert [m.number for m in completed] == [1, 2, 10]
        assert registry.last_completed_migration == 10

    def test_failure_stops_run_and_keeps_progress(self, scripts, tmp_path):
        deployer = MagicMock()
        deployer.deploy.side_effect = [None, DeploymentError("second", "contract creation reverted")]
        registry = DeploymentRegistry(str(tmp_path / "deployment.json"), 31337)

        with pytest.raises(MigrationError, match="2_deploy_box failed") as exc_info:
            MigrationRunner(deployer, registry).run(discover_migrations(str(scripts)))

        assert isinstance(exc_info.value.__cause__, DeploymentError)
        assert deployer.deploy.call_count == 2
        assert registry.last_completed_migration == 1

    def test_dry_run_does_not_write_progress(self, scripts, tmp_path):
        path = tmp_path / "deployment.json"
        registry = DeploymentRegistry(str(path), 31337)

        completed = MigrationRunner(MagicMock(), registry, dry_run=True).run(
            discover_migrations(str(scripts)), reset=True
        )

        assert len(completed) == 3
        assert registry.last_completed_migration == 0
        assert not path.exists()
