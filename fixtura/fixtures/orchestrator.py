"""
Fixture lifecycle orchestration.

FixtureOrchestrator owns the resolved fixture set of one test context and
drives every fixture through the three-phase load and unload protocol:

- load:   before_load (forward), load (forward), after_load (reverse)
- unload: the set is reversed once, then before_unload, unload and
          after_unload all run over that reversed order

Any failing call propagates immediately; the remaining phases and fixtures
of the batch do not run and nothing is rolled back.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence

from fixtura.fixtures.base import NAMESPACE_SEPARATOR, Fixture, LifecyclePhase
from fixtura.fixtures.declarations import DeclarationList
from fixtura.fixtures.factory import FixtureConstructor
from fixtura.fixtures.resolver import FixtureResolver, ResolvedFixtureSet

logger = logging.getLogger(__name__)

FixtureBatch = Mapping[str, Fixture] | Iterable[Fixture]


class FixtureOrchestrator:
    """Resolves, loads and unloads the fixtures of a test context.

    Example:
        >>> orchestrator = FixtureOrchestrator(declarations={"articles": ArticleFixture})
        >>> orchestrator.load_all()
        >>> orchestrator.lookup("articles")
        ArticleFixture(state=ready)
        >>> orchestrator.unload_all()
    """

    def __init__(
        self,
        factory: FixtureConstructor | None = None,
        declarations: DeclarationList | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            factory: Collaborator used to construct fixtures by identifier.
            declarations: Default declarations used when ``resolve()`` is
                called without arguments.
        """
        self.resolver = FixtureResolver(factory)
        self.declarations = declarations
        self._fixtures: ResolvedFixtureSet | None = None

    @property
    def fixtures(self) -> ResolvedFixtureSet | None:
        """The memoised resolved set, or None if not resolved yet."""
        return self._fixtures

    def resolve(self, declarations: DeclarationList | None = None) -> ResolvedFixtureSet:
        """Resolve declarations once and reuse the result until invalidated.

        Args:
            declarations: Declarations to resolve. Defaults to the ones
                given at construction.

        Returns:
            The memoised resolved fixture set.
        """
        if self._fixtures is None:
            if declarations is None:
                declarations = self.declarations
            self._fixtures = self.resolver.resolve(declarations)
        return self._fixtures

    def invalidate(self) -> None:
        """Discard the memoised set so the next ``resolve()`` starts over."""
        self._fixtures = None

    def load_all(self, fixtures: FixtureBatch | None = None) -> None:
        """Load a batch of fixtures in dependency order.

        Args:
            fixtures: Ordered fixtures to load. Defaults to the resolved set.
        """
        batch = self._batch(fixtures)
        logger.info("Loading %d fixture(s)", len(batch))

        self._run(LifecyclePhase.BEFORE_LOAD, batch)
        self._run(LifecyclePhase.LOAD, batch)
        self._run(LifecyclePhase.AFTER_LOAD, batch[::-1])

        logger.debug("Loaded fixtures: %s", ", ".join(f.identifier for f in batch))

    def unload_all(self, fixtures: FixtureBatch | None = None) -> None:
        """Unload a batch of fixtures in reverse dependency order.

        Args:
            fixtures: Fixtures in load order. Defaults to the resolved set.
        """
        batch = self._batch(fixtures)[::-1]
        logger.info("Unloading %d fixture(s)", len(batch))

        self._run(LifecyclePhase.BEFORE_UNLOAD, batch)
        self._run(LifecyclePhase.UNLOAD, batch)
        self._run(LifecyclePhase.AFTER_UNLOAD, batch)

        logger.debug("Unloaded fixtures: %s", ", ".join(f.identifier for f in batch))

    def reinit(self) -> None:
        """Unload then reload the resolved set."""
        self.unload_all()
        self.load_all()

    def lookup(self, name: str) -> Fixture | None:
        """Return the fixture resolved under ``name``.

        Returns None when nothing has been resolved yet or the name is
        unknown. Leading namespace separators in ``name`` are ignored.
        """
        if self._fixtures is None:
            return None
        return self._fixtures.get(name.lstrip(NAMESPACE_SEPARATOR))

    def _batch(self, fixtures: FixtureBatch | None) -> Sequence[Fixture]:
        if fixtures is None:
            return self.resolve().in_load_order()
        if isinstance(fixtures, Mapping):
            return list(fixtures.values())
        return list(fixtures)

    @staticmethod
    def _run(phase: LifecyclePhase, batch: Sequence[Fixture]) -> None:
        for fixture in batch:
            logger.debug("%s: %s", phase.value, fixture.identifier)
            fixture.run_phase(phase)

    def __repr__(self) -> str:
        """Return a string representation of the orchestrator."""
        resolved = "unresolved" if self._fixtures is None else f"{len(self._fixtures)} fixtures"
        return f"FixtureOrchestrator({resolved})"
