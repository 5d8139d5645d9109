"""
Fixtura fixture engine.

Fixture contracts, declaration normalisation, dependency resolution and
lifecycle orchestration.
"""

from fixtura.fixtures.active import ActiveFixture, DataFixture
from fixtura.fixtures.base import (
    Fixture,
    FixtureState,
    LifecyclePhase,
    canonical_identifier,
)
from fixtura.fixtures.declarations import (
    DeclarationKind,
    FixtureDeclaration,
    normalize_declaration,
    normalize_declarations,
)
from fixtura.fixtures.factory import FixtureConstructor, FixtureFactory
from fixtura.fixtures.mixin import FixtureTestMixin
from fixtura.fixtures.orchestrator import FixtureOrchestrator
from fixtura.fixtures.resolver import FixtureResolver, NodeStatus, ResolvedFixtureSet

__all__ = [
    # Fixture contracts
    "ActiveFixture",
    "DataFixture",
    "Fixture",
    "FixtureState",
    "LifecyclePhase",
    "canonical_identifier",
    # Declarations
    "DeclarationKind",
    "FixtureDeclaration",
    "normalize_declaration",
    "normalize_declarations",
    # Construction
    "FixtureConstructor",
    "FixtureFactory",
    # Resolution and lifecycle
    "FixtureOrchestrator",
    "FixtureResolver",
    "FixtureTestMixin",
    "NodeStatus",
    "ResolvedFixtureSet",
]
