"""
Numbered migration scripts.

A migration is a Python file named ``<number>_<description>.py`` that defines
``run(deployer)``. Migrations run once per chain, in ascending order; the
registry remembers the last one that completed.
"""

import importlib.util
import logging
import os
import re
from dataclasses import dataclass
from typing import List, Optional

from .errors import MigrationError

logger = logging.getLogger(__name__)

MIGRATION_FILE_PATTERN = re.compile(r'^(\d+)_(\w+)\.py$')


@dataclass(frozen=True)
class Migration:
    number: int
    name: str
    path: str

    def load(self):
        """Imports the script and returns its run(deployer) callable."""
        module_name = f"_migration_{self.number}_{self.name}"
        spec = importlib.util.spec_from_file_location(module_name, self.path)
        if spec is None or spec.loader is None:
            raise MigrationError(f"Cannot load migration {self.path}")
        module = importlib.util.module_from_spec(spec)
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            raise MigrationError(f"Migration {os.path.basename(self.path)} failed to import: {e}") from e

        run = getattr(module, 'run', None)
        if not callable(run):
            raise MigrationError(f"Migration {os.path.basename(self.path)} does not define run(deployer)")
        return run


def discover_migrations(directory: str) -> List[Migration]:
    """Returns the migration scripts in a directory, ordered by number."""
    if not os.path.isdir(directory):
        raise MigrationError(f"Migrations directory not found: {directory}")

    by_number = {}
    for filename in os.listdir(directory):
        match = MIGRATION_FILE_PATTERN.match(filename)
        if not match:
            continue
        number = int(match.group(1))
        if number in by_number:
            raise MigrationError(
                f"Duplicate migration number {number}: {by_number[number].path} and {filename}"
            )
        by_number[number] = Migration(number, match.group(2), os.path.join(directory, filename))

    return [by_number[n] for n in sorted(by_number)]


class MigrationRunner:
    def __init__(self, deployer, registry=None, dry_run: bool = False):
        self.deployer = deployer
        self.registry = registry
        # dry runs read progress but never write it
        self.dry_run = dry_run

    def pending(self, migrations: List[Migration], to: Optional[int] = None, reset: bool = False) -> List[Migration]:
        last = 0
        if self.registry is not None and not reset:
            last = self.registry.last_completed_migration
        return [
            m for m in migrations
            if m.number > last and (to is None or m.number <= to)
        ]

    def run(self, migrations: List[Migration], reset: bool = False, to: Optional[int] = None) -> List[Migration]:
        """
        Runs pending migrations in order and stops at the first failure.

        Args:
            migrations: migrations as returned by discover_migrations
            reset: forget previous progress on this chain and run everything
            to: highest migration number to run

        Returns:
            Migrations that completed during this call
        """
        if reset and self.registry is not None and not self.dry_run:
            self.registry.reset()

        todo = self.pending(migrations, to, reset)
        if not todo:
            logger.info("Network up to date, no migrations to run")
            return []

        completed = []
        for migration in todo:
            logger.info(f"Running migration {migration.number}_{migration.name}")
            run = migration.load()
            try:
                run(self.deployer)
            except Exception as e:
                logger.error(f"Migration {migration.number}_{migration.name} failed: {e}")
                raise MigrationError(f"Migration {migration.number}_{migration.name} failed: {e}") from e

            if self.registry is not None and not self.dry_run:
                self.registry.set_completed(migration.number)
            completed.append(migration)
            logger.info(f"Migration {migration.number}_{migration.name} completed")

        return completed
