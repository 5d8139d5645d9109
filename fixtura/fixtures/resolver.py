"""
Fixture set resolution.

FixtureResolver turns a declaration list into a ResolvedFixtureSet: every
declared fixture plus every transitive dependency, each constructed once and
ordered so that no fixture precedes a fixture it depends on.

Resolution is an iterative depth-first expansion over an explicit work
stack. Visiting an unseen declaration marks its node IN_PROGRESS, then
pushes a Finalize item for the constructed instance followed by its
dependencies. Finalizing moves the node to the end of the result, after
everything expanded since it was first seen. Meeting an IN_PROGRESS node
again means the dependency graph has a cycle.
"""

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from fixtura.exceptions import CircularDependencyError
from fixtura.fixtures.base import Fixture, canonical_identifier
from fixtura.fixtures.declarations import (
    DeclarationKind,
    DeclarationList,
    FixtureDeclaration,
    normalize_declarations,
)
from fixtura.fixtures.factory import FixtureConstructor, FixtureFactory

logger = logging.getLogger(__name__)


class NodeStatus(str, Enum):
    """Resolution status of a node in the dependency graph."""

    UNVISITED = "unvisited"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


@dataclass
class _Node:
    status: NodeStatus
    fixture: Fixture | None = None


@dataclass(frozen=True)
class _Visit:
    declaration: FixtureDeclaration


@dataclass(frozen=True)
class _Finalize:
    name: str
    fixture: Fixture


class ResolvedFixtureSet(Mapping[str, Fixture]):
    """Ordered, read-only mapping of alias -> fixture instance.

    Iteration order is load order: a fixture never appears before any
    fixture it depends on.
    """

    def __init__(
        self, fixtures: Mapping[str, Fixture] | Iterable[tuple[str, Fixture]] = ()
    ) -> None:
        self._fixtures: dict[str, Fixture] = dict(fixtures)

    def __getitem__(self, alias: str) -> Fixture:
        return self._fixtures[alias]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fixtures)

    def __len__(self) -> int:
        return len(self._fixtures)

    def __reversed__(self) -> Iterator[str]:
        return reversed(self._fixtures)

    def aliases(self) -> list[str]:
        """Aliases in load order."""
        return list(self._fixtures)

    def index(self, alias: str) -> int:
        """Position of ``alias`` in load order.

        Raises:
            ValueError: If the alias is not in the set.
        """
        return self.aliases().index(alias)

    def in_load_order(self) -> list[Fixture]:
        """Fixture instances in load order."""
        return list(self._fixtures.values())

    def in_unload_order(self) -> list[Fixture]:
        """Fixture instances in reverse load order."""
        return list(reversed(self._fixtures.values()))

    def to_dict(self) -> list[dict[str, Any]]:
        """Describe the set as a list of plain dictionaries, in load order."""
        return [
            {
                "alias": alias,
                "identifier": fixture.identifier,
                "depends": [canonical_identifier(dep) for dep in fixture.depends],
                "state": fixture.state.value,
            }
            for alias, fixture in self._fixtures.items()
        ]

    def __repr__(self) -> str:
        return f"ResolvedFixtureSet({self.aliases()!r})"


class FixtureResolver:
    """Resolves fixture declarations into an ordered, duplicate-free set.

    Example:
        >>> resolver = FixtureResolver(FixtureFactory())
        >>> resolver.resolve({"articles": ArticleFixture}).aliases()
        ['tests.fixtures.UserFixture', 'articles']
    """

    def __init__(self, factory: FixtureConstructor | None = None) -> None:
        """Initialize the resolver.

        Args:
            factory: Collaborator that constructs fixtures by identifier.
                Defaults to a FixtureFactory with import fallback.
        """
        self.factory: FixtureConstructor = factory if factory is not None else FixtureFactory()

    def resolve(self, declarations: DeclarationList | None) -> ResolvedFixtureSet:
        """Create the declared fixtures and all of their dependencies.

        Args:
            declarations: Mapping of name-or-index -> declaration, or a
                sequence of declarations.

        Returns:
            The resolved set in load order.

        Raises:
            ConfigError: If a declaration is malformed.
            CircularDependencyError: If the dependency graph has a cycle.
        """
        normalized = normalize_declarations(declarations)

        # Only top-level declarations contribute aliases and configuration.
        aliases: dict[str, str] = {}
        configs: dict[str, FixtureDeclaration] = {}
        for declaration in normalized:
            aliases[declaration.identifier] = declaration.name
            if declaration.kind is not DeclarationKind.IDENTIFIER:
                configs[declaration.identifier] = declaration

        nodes: dict[str, _Node] = {}
        stack: list[_Visit | _Finalize] = [_Visit(d) for d in reversed(normalized)]

        while stack:
            item = stack.pop()

            if isinstance(item, _Finalize):
                # Re-insert so the fixture lands after everything it required.
                nodes.pop(item.name, None)
                nodes[item.name] = _Node(NodeStatus.RESOLVED, item.fixture)
                logger.debug("Resolved fixture '%s' (%s)", item.name, item.fixture.identifier)
                continue

            declaration = item.declaration
            name = aliases.get(declaration.identifier, declaration.identifier)
            status = self._status(nodes, name)

            if status is NodeStatus.UNVISITED:
                nodes[name] = _Node(NodeStatus.IN_PROGRESS)
                fixture = declaration.materialize(self.factory)
                stack.append(_Finalize(name, fixture))
                dependencies = [canonical_identifier(dep) for dep in fixture.depends]
                for dependency in reversed(dependencies):
                    dep_declaration = configs.get(dependency) or FixtureDeclaration.bare(dependency)
                    stack.append(_Visit(dep_declaration))
            elif status is NodeStatus.IN_PROGRESS:
                raise CircularDependencyError(declaration.identifier)

        resolved = ResolvedFixtureSet(
            (name, node.fixture) for name, node in nodes.items() if node.fixture is not None
        )
        logger.debug("Resolved %d fixture(s): %s", len(resolved), ", ".join(resolved))
        return resolved

    @staticmethod
    def _status(nodes: Mapping[str, _Node], name: str) -> NodeStatus:
        node = nodes.get(name)
        return node.status if node is not None else NodeStatus.UNVISITED
