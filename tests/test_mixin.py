"""
Tests for fixtura.fixtures.mixin module.
"""

from sample_fixtures import RESOURCES, A, ArticleFixture, B, UserFixture

from fixtura.fixtures.base import FixtureState, canonical_identifier
from fixtura.fixtures.factory import FixtureFactory
from fixtura.fixtures.mixin import FixtureTestMixin
from fixtura.sources import FileDataSource
from fixtura.storage import InMemoryStorage


class ArticleCase(FixtureTestMixin):
    """Test case declaring articles under an alias."""

    def fixtures(self) -> dict:
        return {"articles": ArticleFixture}

    def fixture_factory(self) -> FixtureFactory:
        self.storage = InMemoryStorage(["users", "articles"])
        return FixtureFactory(
            services={"storage": self.storage, "data_source": FileDataSource(RESOURCES)}
        )


class AutoloadArticleCase(ArticleCase):
    autoload_fixtures = True


# =============================================================================
# Manual Loading
# =============================================================================


class TestFixtureTestMixin:
    """Tests for the mixin surface without autoloading."""

    def test_no_fixtures_by_default(self) -> None:
        """A bare mixin declares nothing."""
        case = FixtureTestMixin()

        assert len(case.get_fixtures()) == 0

    def test_get_fixture_resolves_lazily(self) -> None:
        """get_fixture() resolves without loading."""
        case = ArticleCase()

        articles = case.get_fixture("articles")

        assert isinstance(articles, ArticleFixture)
        assert articles.state is FixtureState.UNLOADED
        assert case.storage.rows("articles") == []

    def test_get_fixture_unknown(self) -> None:
        """Unknown names return None."""
        assert ArticleCase().get_fixture("comments") is None

    def test_get_fixtures_in_load_order(self) -> None:
        """Dependencies come before the declared fixture."""
        case = ArticleCase()

        assert case.get_fixtures().aliases() == [canonical_identifier(UserFixture), "articles"]

    def test_load_and_unload(self) -> None:
        """load_fixtures() and unload_fixtures() drive the whole set."""
        case = ArticleCase()

        case.load_fixtures()
        assert len(case.storage.rows("articles")) == 3
        users = case.get_fixture(canonical_identifier(UserFixture))
        assert isinstance(users, UserFixture)
        assert len(users) == 2

        case.unload_fixtures()
        assert case.storage.rows("users") == []
        assert case.storage.rows("articles") == []

    def test_init_fixtures(self) -> None:
        """init_fixtures() reloads without duplicating rows."""
        case = ArticleCase()
        case.load_fixtures()

        case.init_fixtures()

        assert len(case.storage.rows("articles")) == 3

    def test_load_explicit_fixtures(self) -> None:
        """Explicit batches bypass the declared set."""
        log: list[str] = []
        case = ArticleCase()

        case.load_fixtures([A(log=log), B(log=log)])

        assert log[:2] == ["before_load:A", "before_load:B"]
        assert case.fixture_orchestrator.fixtures is None


# =============================================================================
# Autoloading
# =============================================================================


class TestAutoloadHooks:
    """Tests for the setup_method/teardown_method hooks."""

    def test_setup_loads_and_teardown_unloads(self) -> None:
        """Autoloading cases load before and unload after each test."""
        case = AutoloadArticleCase()

        case.setup_method(None)
        storage = case.storage
        assert len(storage.rows("articles")) == 3
        assert case.get_fixture("articles").state is FixtureState.READY  # type: ignore[union-attr]

        case.teardown_method(None)
        assert storage.rows("articles") == []
        assert case._fixture_orchestrator is None

    def test_setup_without_autoload(self) -> None:
        """Cases without autoloading do nothing in the hooks."""
        case = ArticleCase()

        case.setup_method(None)
        assert case._fixture_orchestrator is None

        case.teardown_method(None)
        assert case._fixture_orchestrator is None

    def test_each_test_gets_fresh_fixtures(self) -> None:
        """A new orchestrator is built for every test."""
        case = AutoloadArticleCase()
        case.setup_method(None)
        first = case.get_fixture("articles")
        case.teardown_method(None)

        case.setup_method(None)
        second = case.get_fixture("articles")
        case.teardown_method(None)

        assert first is not second


class TestAutoloadIntegration(FixtureTestMixin):
    """pytest drives the hooks for mixin-based test classes."""

    autoload_fixtures = True

    def fixtures(self) -> dict:
        return {"users": UserFixture}

    def fixture_factory(self) -> FixtureFactory:
        self.storage = InMemoryStorage(["users"])
        return FixtureFactory(
            services={"storage": self.storage, "data_source": FileDataSource(RESOURCES)}
        )

    def test_fixtures_loaded_before_test(self) -> None:
        """Rows exist when the test body runs."""
        users = self.get_fixture("users")

        assert isinstance(users, UserFixture)
        assert users["user1"]["email"] == "user1@example.org"
        assert len(self.storage.rows("users")) == 2
