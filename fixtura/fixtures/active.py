"""
Data-backed fixtures.

DataFixture owns a mapping of named rows retrieved from a data source.
ActiveFixture additionally writes those rows into a table through a storage
backend and keeps each row's generated primary key.

Example:
    >>> class UserFixture(ActiveFixture):
    ...     table = "users"
    ...     data_file = "users.yaml"
    ...
    >>> fixture = UserFixture(storage=storage, data_source=FileDataSource("tests/data"))
    >>> fixture.load()
    >>> fixture["user1"]
    {'email': 'user1@example.org', 'id': 1}
"""

import logging
from collections.abc import Iterator
from typing import Any, Literal

from fixtura.exceptions import ConfigError
from fixtura.fixtures.base import Fixture
from fixtura.sources import DataSource, FileDataSource, FixtureRows
from fixtura.storage import StorageBackend

logger = logging.getLogger(__name__)


class DataFixture(Fixture):
    """A fixture whose state is a mapping of row alias -> row.

    After ``load()`` the rows are available via ``data`` and through the
    mapping interface of the fixture itself (``len``, iteration, ``[]``,
    ``in``). Override ``get_data()`` to generate rows in code.
    """

    # Reference passed to the data source; None or False disables loading.
    data_file: str | Literal[False] | None = None

    def __init__(self, data_source: DataSource | None = None) -> None:
        self.data: FixtureRows = {}
        self.data_source: DataSource = data_source if data_source is not None else FileDataSource()

    def load(self) -> None:
        self.data = self.get_data()

    def unload(self) -> None:
        self.data = {}

    def get_data(self) -> FixtureRows:
        """Return the fixture rows.

        Raises:
            ConfigError: If ``data_file`` is set but the data source cannot
                find it.
        """
        if self.data_file is None or self.data_file is False:
            return {}

        rows = self.data_source.fetch(self.resolve_data_path())
        if rows is None:
            raise ConfigError(f"Fixture data file does not exist: {self.data_file}")
        return rows

    def resolve_data_path(self) -> str:
        """Return the reference handed to the data source."""
        return str(self.data_file)

    def __len__(self) -> int:
        return len(self.data)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.data)

    def __getitem__(self, alias: Any) -> dict[str, Any]:
        return self.data[alias]

    def __contains__(self, alias: object) -> bool:
        return alias in self.data


class ActiveFixture(DataFixture):
    """A data fixture backed by a table in a storage backend.

    ``table`` names the table directly; alternatively ``model_class`` names
    a model whose ``__tablename__`` is used. Loading clears the table and
    inserts every row, storing the generated key under ``primary_key``.
    Unloading clears the table.
    """

    table: str | None = None
    model_class: type | None = None
    primary_key: str = "id"

    def __init__(
        self,
        storage: StorageBackend | None = None,
        data_source: DataSource | None = None,
    ) -> None:
        super().__init__(data_source)
        self.storage = storage

    def load(self) -> None:
        self.data = {}
        table = self.get_table()
        # Rows are fetched first so a missing data file leaves the table intact.
        rows = self.get_data()
        self.reset_table()

        for alias, row in rows.items():
            key = self._storage().insert(table, row)
            self.data[alias] = {**row, self.primary_key: key}

        logger.debug("Inserted %d row(s) into '%s'", len(self.data), table)

    def unload(self) -> None:
        self.reset_table()
        super().unload()

    def reset_table(self) -> None:
        """Remove all existing rows from the fixture's table."""
        self._storage().clear(self.get_table())

    def get_table(self) -> str:
        """Return the table name, checking it exists.

        Raises:
            ConfigError: If neither ``table`` nor ``model_class`` is set, or
                the table does not exist.
        """
        table = self.table
        if table is None:
            if self.model_class is None:
                raise ConfigError('Either "model_class" or "table" must be set.')
            table = getattr(self.model_class, "__tablename__", None)
            if not table:
                raise ConfigError(
                    f"Model class {self.model_class.__name__} does not define __tablename__."
                )

        if not self._storage().has_table(table):
            raise ConfigError(f"Table does not exist: {table}")
        return table

    def _storage(self) -> StorageBackend:
        if self.storage is None:
            raise ConfigError(f"No storage backend configured for fixture '{self.identifier}'.")
        return self.storage
