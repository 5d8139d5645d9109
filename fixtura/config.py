"""
Configuration loading for fixtura.

Supports YAML-based settings (where fixture data lives, which storage
backend to populate, which tables to create) and YAML declaration files
listing the fixtures to resolve.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from fixtura.fixtures.declarations import DeclarationList
from fixtura.fixtures.factory import FixtureFactory
from fixtura.sources import FileDataSource
from fixtura.storage import InMemoryStorage, SqliteStorage

MEMORY_STORAGE = "memory"
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class FixturaConfig(BaseModel):
    """Settings for building fixture collaborators.

    Example:
        >>> config = FixturaConfig(storage="fixtures.db", tables={"users": ["email"]})
        >>> factory = config.build_factory()
    """

    model_config = {"frozen": True, "extra": "forbid"}

    data_dir: Path = Field(
        default=Path("."),
        description="Root directory for relative fixture data files",
    )
    storage: str = Field(
        default=MEMORY_STORAGE,
        description="'memory' for in-memory storage, otherwise an SQLite path or ':memory:'",
        min_length=1,
    )
    tables: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Tables to create on the storage backend (table -> columns)",
    )
    import_fallback: bool = Field(
        default=True,
        description="Import unregistered fixture identifiers as dotted paths",
    )
    log_level: str = Field(
        default="WARNING",
        description="Logging level for the fixtura logger",
    )

    @field_validator("log_level")
    @classmethod
    def log_level_is_valid(cls, v: str) -> str:
        """Validate and normalise the log level name."""
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return level

    def build_storage(self) -> InMemoryStorage | SqliteStorage:
        """Create the configured storage backend with its tables."""
        storage: InMemoryStorage | SqliteStorage
        if self.storage == MEMORY_STORAGE:
            storage = InMemoryStorage()
        else:
            storage = SqliteStorage(self.storage)
        for table, columns in self.tables.items():
            storage.create_table(table, columns)
        return storage

    def build_data_source(self) -> FileDataSource:
        """Create a file data source rooted at ``data_dir``."""
        return FileDataSource(self.data_dir)

    def build_factory(self, **services: Any) -> FixtureFactory:
        """Create a fixture factory injecting storage and data source.

        Keyword arguments add or replace injected services; storage and data
        source are only built when not supplied.
        """
        injected: dict[str, Any] = dict(services)
        if "storage" not in injected:
            injected["storage"] = self.build_storage()
        if "data_source" not in injected:
            injected["data_source"] = self.build_data_source()
        return FixtureFactory(services=injected, import_fallback=self.import_fallback)


class ConfigLoader:
    """Load fixtura configuration from YAML files or dictionaries."""

    @classmethod
    def from_yaml(cls, path: str | Path) -> FixturaConfig:
        """
        Load configuration from a YAML file.

        Relative ``data_dir`` and SQLite paths are resolved against the
        directory containing the file.

        Args:
            path: Path to YAML configuration file

        Returns:
            FixturaConfig loaded from file
        """
        path = Path(path)
        if not path.exists():
            msg = f"Configuration file not found: {path}"
            raise FileNotFoundError(msg)

        with path.open() as f:
            data = yaml.safe_load(f) or {}

        base = path.parent
        if "data_dir" in data and not Path(data["data_dir"]).is_absolute():
            data["data_dir"] = str(base / data["data_dir"])
        storage = data.get("storage")
        if storage and storage not in (MEMORY_STORAGE, ":memory:"):
            if not Path(storage).is_absolute():
                data["storage"] = str(base / storage)

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FixturaConfig:
        """
        Create configuration from a dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            FixturaConfig from dictionary
        """
        return FixturaConfig.model_validate(data)

    @classmethod
    def generate_sample_config(cls) -> str:
        """
        Generate a sample YAML configuration file.

        Returns:
            YAML string for sample configuration
        """
        sample = {
            "data_dir": "tests/fixtures/data",
            "storage": "build/fixtures.db",
            "tables": {
                "users": ["email", "name"],
                "articles": ["title", "author_id"],
            },
            "import_fallback": True,
            "log_level": "INFO",
        }
        return yaml.dump(sample, default_flow_style=False, sort_keys=False)


class DeclarationFile(BaseModel):
    """A YAML file declaring fixtures to resolve.

    ``fixtures`` is either a mapping of alias -> declaration or a list of
    anonymous declarations. Each declaration is a dotted path or a mapping
    with a ``class`` key plus overrides::

        fixtures:
          users: app.fixtures.UserFixture
          articles:
            class: app.fixtures.ArticleFixture
            data_file: articles.yaml
    """

    model_config = {"frozen": True, "extra": "forbid"}

    fixtures: dict[str | int, Any] | list[Any] = Field(
        default_factory=dict,
        description="Fixture declarations by alias, or a list of anonymous declarations",
    )

    def declarations(self) -> DeclarationList:
        """Return the declarations in the shape the resolver accepts."""
        return self.fixtures

    @classmethod
    def from_yaml(cls, path: str | Path) -> "DeclarationFile":
        """Load a declaration file."""
        path = Path(path)
        if not path.exists():
            msg = f"Declaration file not found: {path}"
            raise FileNotFoundError(msg)

        with path.open() as f:
            data = yaml.safe_load(f) or {}
        return cls.model_validate(data)
