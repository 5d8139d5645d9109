"""
Data-source collaborators for data-backed fixtures.

A data source maps a configured reference (usually a file path) to the
fixture's rows: an ordered mapping of row alias -> {column: value}. It
returns None when the reference does not exist, leaving the fixture to
decide whether that is an error.
"""

import json
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml

FixtureRows = dict[Any, dict[str, Any]]

YAML_SUFFIXES = {".yaml", ".yml"}
JSON_SUFFIXES = {".json"}


@runtime_checkable
class DataSource(Protocol):
    """Interface for retrieving fixture rows."""

    def fetch(self, reference: str) -> FixtureRows | None:
        """Return the rows for ``reference``, or None if it does not exist."""
        ...


def rows_from(data: Any, reference: str = "<data>") -> FixtureRows:
    """Coerce loaded data into fixture rows.

    A mapping keeps its keys as row aliases; a list is keyed by position.
    An empty document yields no rows.

    Raises:
        ValueError: If the data is not a mapping or list of mappings.
    """
    if data is None:
        return {}
    if isinstance(data, Mapping):
        items = list(data.items())
    elif isinstance(data, list):
        items = list(enumerate(data))
    else:
        raise ValueError(f"Fixture data in {reference} must be a mapping or a list")

    rows: FixtureRows = {}
    for alias, row in items:
        if not isinstance(row, Mapping):
            raise ValueError(f"Fixture row '{alias}' in {reference} must be a mapping")
        rows[alias] = dict(row)
    return rows


class FileDataSource:
    """Load fixture rows from YAML or JSON files.

    Relative references are resolved against ``root``.

    Example:
        >>> source = FileDataSource("tests/resources")
        >>> source.fetch("users.yaml")
        {'user1': {'email': 'user1@example.org'}, ...}
    """

    def __init__(self, root: str | Path = ".") -> None:
        self.root = Path(root)

    def resolve(self, reference: str) -> Path:
        """Return the file path a reference points to."""
        path = Path(reference)
        return path if path.is_absolute() else self.root / path

    def fetch(self, reference: str) -> FixtureRows | None:
        path = self.resolve(reference)
        if not path.is_file():
            return None

        text = path.read_text(encoding="utf-8")
        if path.suffix in JSON_SUFFIXES:
            data = json.loads(text) if text.strip() else None
        elif path.suffix in YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            raise ValueError(f"Unsupported fixture data format: {path.suffix or path.name}")
        return rows_from(data, str(path))

    def __repr__(self) -> str:
        return f"FileDataSource({str(self.root)!r})"


class CallableDataSource:
    """Produce fixture rows from functions.

    ``generators`` maps a reference to a zero-argument callable returning a
    mapping or list of rows (a generator function works too).
    """

    def __init__(self, generators: Mapping[str, Callable[[], Any]] | None = None) -> None:
        self.generators: dict[str, Callable[[], Any]] = dict(generators or {})

    def register(self, reference: str, generator: Callable[[], Any]) -> None:
        """Register ``generator`` under ``reference``."""
        self.generators[reference] = generator

    def fetch(self, reference: str) -> FixtureRows | None:
        generator = self.generators.get(reference)
        if generator is None:
            return None
        data = generator()
        if not isinstance(data, Mapping | list) and data is not None:
            data = list(data)
        return rows_from(data, reference)
