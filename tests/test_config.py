"""
Tests for fixtura.config and fixtura.logging_config modules.
"""

import io
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from sample_fixtures import RESOURCES, UserFixture

from fixtura.config import ConfigLoader, DeclarationFile, FixturaConfig
from fixtura.fixtures.base import canonical_identifier
from fixtura.logging_config import LOGGER_NAME, setup_logging
from fixtura.storage import InMemoryStorage, SqliteStorage

# =============================================================================
# FixturaConfig
# =============================================================================


class TestFixturaConfig:
    """Tests for FixturaConfig."""

    def test_defaults(self) -> None:
        """Defaults use in-memory storage and import fallback."""
        config = FixturaConfig()

        assert config.data_dir == Path(".")
        assert config.storage == "memory"
        assert config.tables == {}
        assert config.import_fallback is True
        assert config.log_level == "WARNING"

    def test_log_level_normalised(self) -> None:
        """Log levels are case-insensitive."""
        assert FixturaConfig(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self) -> None:
        """Unknown log levels are rejected."""
        with pytest.raises(ValidationError, match="Unknown log level"):
            FixturaConfig(log_level="chatty")

    def test_unknown_setting(self) -> None:
        """Unknown settings are rejected."""
        with pytest.raises(ValidationError):
            FixturaConfig(datadir="tests")  # type: ignore[call-arg]

    def test_frozen(self) -> None:
        """Configuration is immutable."""
        config = FixturaConfig()

        with pytest.raises(ValidationError):
            config.storage = "other.db"  # type: ignore[misc]

    def test_build_memory_storage(self) -> None:
        """'memory' builds an InMemoryStorage with the configured tables."""
        storage = FixturaConfig(tables={"users": ["email"]}).build_storage()

        assert isinstance(storage, InMemoryStorage)
        assert storage.has_table("users")

    def test_build_sqlite_storage(self) -> None:
        """Any other value is an SQLite path."""
        storage = FixturaConfig(storage=":memory:", tables={"users": ["email"]}).build_storage()

        try:
            assert isinstance(storage, SqliteStorage)
            assert storage.has_table("users")
        finally:
            storage.close()

    def test_build_factory_injects_collaborators(self) -> None:
        """The factory injects the configured storage and data source."""
        config = FixturaConfig(data_dir=RESOURCES, tables={"users": ["email"]})
        factory = config.build_factory()

        fixture = factory.construct(canonical_identifier(UserFixture))
        fixture.load()

        assert isinstance(fixture, UserFixture)
        assert len(fixture) == 2

    def test_build_factory_service_overrides(self) -> None:
        """Keyword services replace the built ones."""
        storage = InMemoryStorage(["users"])
        factory = FixturaConfig(import_fallback=False).build_factory(storage=storage)

        assert factory.services["storage"] is storage
        assert factory.import_fallback is False


# =============================================================================
# ConfigLoader
# =============================================================================


class TestConfigLoader:
    """Tests for ConfigLoader."""

    def test_from_yaml_resolves_relative_paths(self, tmp_path: Path) -> None:
        """Relative data_dir and storage paths are anchored at the file."""
        config_file = tmp_path / "fixtura.yaml"
        config_file.write_text(
            yaml.dump({"data_dir": "data", "storage": "build/fixtures.db", "log_level": "info"})
        )

        config = ConfigLoader.from_yaml(config_file)

        assert config.data_dir == tmp_path / "data"
        assert config.storage == str(tmp_path / "build" / "fixtures.db")
        assert config.log_level == "INFO"

    @pytest.mark.parametrize("storage", ["memory", ":memory:"])
    def test_from_yaml_keeps_memory_storage(self, tmp_path: Path, storage: str) -> None:
        """In-memory storage values are not treated as paths."""
        config_file = tmp_path / "fixtura.yaml"
        config_file.write_text(yaml.dump({"storage": storage}))

        assert ConfigLoader.from_yaml(config_file).storage == storage

    def test_from_yaml_empty_file(self, tmp_path: Path) -> None:
        """An empty file yields the defaults."""
        config_file = tmp_path / "fixtura.yaml"
        config_file.write_text("")

        assert ConfigLoader.from_yaml(config_file) == FixturaConfig()

    def test_from_yaml_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            ConfigLoader.from_yaml(tmp_path / "missing.yaml")

    def test_from_dict(self) -> None:
        """Dictionaries are validated into FixturaConfig."""
        config = ConfigLoader.from_dict({"tables": {"users": ["email"]}})

        assert config.tables == {"users": ["email"]}

    def test_sample_config_is_valid(self) -> None:
        """The sample configuration loads."""
        data = yaml.safe_load(ConfigLoader.generate_sample_config())

        config = ConfigLoader.from_dict(data)

        assert "users" in config.tables
        assert config.log_level == "INFO"


# =============================================================================
# DeclarationFile
# =============================================================================


class TestDeclarationFile:
    """Tests for DeclarationFile."""

    def test_mapping_declarations(self, tmp_path: Path) -> None:
        """Aliased declarations keep their order and overrides."""
        path = tmp_path / "fixtures.yaml"
        path.write_text(
            "fixtures:\n"
            "  users: sample_fixtures.UserFixture\n"
            "  articles:\n"
            "    class: sample_fixtures.ArticleFixture\n"
            "    data_file: other.yaml\n"
        )

        declarations = DeclarationFile.from_yaml(path).declarations()

        assert list(declarations) == ["users", "articles"]
        assert declarations["articles"]["data_file"] == "other.yaml"  # type: ignore[index]

    def test_list_declarations(self, tmp_path: Path) -> None:
        """A list declares anonymous fixtures."""
        path = tmp_path / "fixtures.yaml"
        path.write_text("fixtures:\n  - sample_fixtures.Leaf\n  - sample_fixtures.A\n")

        assert DeclarationFile.from_yaml(path).declarations() == [
            "sample_fixtures.Leaf",
            "sample_fixtures.A",
        ]

    def test_empty_file(self, tmp_path: Path) -> None:
        """An empty file declares nothing."""
        path = tmp_path / "fixtures.yaml"
        path.write_text("")

        assert DeclarationFile.from_yaml(path).declarations() == {}

    def test_unknown_key(self) -> None:
        """Only the fixtures key is allowed."""
        with pytest.raises(ValidationError):
            DeclarationFile.model_validate({"fixture": []})

    def test_missing_file(self, tmp_path: Path) -> None:
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="Declaration file not found"):
            DeclarationFile.from_yaml(tmp_path / "missing.yaml")


# =============================================================================
# Logging
# =============================================================================


class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.fixture(autouse=True)
    def restore_logger(self) -> Iterator[None]:
        """Remove handlers installed by the test."""
        logger = logging.getLogger(LOGGER_NAME)
        handlers, level = list(logger.handlers), logger.level
        yield
        logger.handlers = handlers
        logger.setLevel(level)

    def test_installs_rich_handler(self) -> None:
        """A single RichHandler is attached at the requested level."""
        logger = setup_logging("debug")

        assert logger.name == LOGGER_NAME
        assert logger.level == logging.DEBUG
        assert sum(isinstance(h, RichHandler) for h in logger.handlers) == 1

    def test_repeated_setup_replaces_handler(self) -> None:
        """Calling setup_logging twice keeps one handler."""
        setup_logging()
        logger = setup_logging(logging.INFO)

        assert sum(isinstance(h, RichHandler) for h in logger.handlers) == 1
        assert logger.level == logging.INFO

    def test_module_loggers_reach_console(self) -> None:
        """Records from package modules are written through the handler."""
        buffer = io.StringIO()
        setup_logging("INFO", console=Console(file=buffer, width=200))

        logging.getLogger("fixtura.fixtures.orchestrator").info("Loading 3 fixture(s)")

        assert "Loading 3 fixture(s)" in buffer.getvalue()
