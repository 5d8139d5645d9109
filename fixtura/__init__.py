"""
Fixtura - Dependency-ordered test fixtures.

Declare the fixtures a test needs; fixtura resolves their dependencies,
loads them in dependency order and unloads them in reverse.

Usage:
    fixtura resolve <declarations.yaml>   # Show load order
    fixtura load <declarations.yaml>      # Load into configured storage
    fixtura unload <declarations.yaml>    # Clear loaded fixtures
"""

__version__ = "0.1.0"

from fixtura.exceptions import (
    CircularDependencyError,
    ConfigError,
    DuplicateFixtureError,
    FixturaError,
    FixtureNotFoundError,
)
from fixtura.fixtures import (
    ActiveFixture,
    DataFixture,
    Fixture,
    FixtureFactory,
    FixtureOrchestrator,
    FixtureResolver,
    FixtureTestMixin,
    ResolvedFixtureSet,
)

__all__ = [
    "__version__",
    "ActiveFixture",
    "CircularDependencyError",
    "ConfigError",
    "DataFixture",
    "DuplicateFixtureError",
    "FixturaError",
    "Fixture",
    "FixtureFactory",
    "FixtureNotFoundError",
    "FixtureOrchestrator",
    "FixtureResolver",
    "FixtureTestMixin",
    "ResolvedFixtureSet",
]
