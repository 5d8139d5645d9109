"""
Test-case integration.

FixtureTestMixin gives a test class the fixture surface: declare fixtures in
``fixtures()``, then load, unload, reinitialise and look them up. With
``autoload_fixtures`` set, pytest's ``setup_method``/``teardown_method`` load
the fixtures before each test and unload them after.

Example:
    >>> class TestArticles(FixtureTestMixin):
    ...     autoload_fixtures = True
    ...
    ...     def fixtures(self):
    ...         return {"articles": ArticleFixture}
    ...
    ...     def test_has_articles(self):
    ...         assert len(self.get_fixture("articles")) == 2
"""

from typing import Any, ClassVar

from fixtura.fixtures.base import Fixture
from fixtura.fixtures.declarations import DeclarationList
from fixtura.fixtures.factory import FixtureConstructor, FixtureFactory
from fixtura.fixtures.orchestrator import FixtureBatch, FixtureOrchestrator
from fixtura.fixtures.resolver import ResolvedFixtureSet


class FixtureTestMixin:
    """Mixin providing fixture loading for a test class."""

    autoload_fixtures: ClassVar[bool] = False

    _fixture_orchestrator: FixtureOrchestrator | None = None

    def fixtures(self) -> DeclarationList:
        """Declare the fixtures needed by the current test case.

        Return a mapping such as::

            {
                0: ArticleFixture,               # anonymous fixture
                "articles": ArticleFixture,      # "articles" fixture
                "users": {"class": UserFixture, "data_file": "users.yaml"},
            }
        """
        return {}

    def fixture_factory(self) -> FixtureConstructor:
        """Return the factory used to construct fixtures."""
        return FixtureFactory()

    @property
    def fixture_orchestrator(self) -> FixtureOrchestrator:
        """Orchestrator owning this test's fixtures, created on first use."""
        if self._fixture_orchestrator is None:
            self._fixture_orchestrator = FixtureOrchestrator(
                factory=self.fixture_factory(),
                declarations=self.fixtures(),
            )
        return self._fixture_orchestrator

    def load_fixtures(self, fixtures: FixtureBatch | None = None) -> None:
        """Load the given fixtures, or all fixtures of this test case."""
        self.fixture_orchestrator.load_all(fixtures)

    def unload_fixtures(self, fixtures: FixtureBatch | None = None) -> None:
        """Unload the given fixtures, or all fixtures of this test case."""
        self.fixture_orchestrator.unload_all(fixtures)

    def init_fixtures(self) -> None:
        """Unload and reload all fixtures of this test case."""
        self.fixture_orchestrator.reinit()

    def get_fixtures(self) -> ResolvedFixtureSet:
        """Return the fixtures of this test case, resolving them if needed."""
        return self.fixture_orchestrator.resolve()

    def get_fixture(self, name: str) -> Fixture | None:
        """Return the named fixture, or None if it does not exist."""
        self.get_fixtures()
        return self.fixture_orchestrator.lookup(name)

    def setup_method(self, method: Any) -> None:
        """pytest hook: load fixtures before each test when autoloading."""
        self._fixture_orchestrator = None
        if self.autoload_fixtures:
            self.load_fixtures()

    def teardown_method(self, method: Any) -> None:
        """pytest hook: unload fixtures after each test when autoloading."""
        if self.autoload_fixtures and self._fixture_orchestrator is not None:
            self.unload_fixtures()
        self._fixture_orchestrator = None
