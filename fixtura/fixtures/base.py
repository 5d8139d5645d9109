"""
Fixture base contract.

A fixture represents a fixed state of a test environment. Each fixture type
declares the fixtures it depends on in ``depends`` and implements ``load()``
and ``unload()``. The four batch hooks (``before_load``, ``after_load``,
``before_unload``, ``after_unload``) run once per batch of fixtures and are
no-ops by default.

Lifecycle (driven by FixtureOrchestrator through ``run_phase``)::

    UNLOADED -(before_load)-> LOADING -(load)-> LOADED -(after_load)-> READY
    READY -(before_unload)-> UNLOADING -(unload)-> UNLOADED -(after_unload)-> IDLE
"""

from collections.abc import Sequence
from enum import Enum
from typing import ClassVar

from fixtura.exceptions import ConfigError

NAMESPACE_SEPARATOR = "."

FixtureRef = str | type


def canonical_identifier(ref: FixtureRef) -> str:
    """Return the canonical identifier for a fixture reference.

    Classes are named by their dotted import path; strings have leading
    namespace separators and surrounding whitespace stripped.

    Raises:
        ConfigError: If the reference is not a string or class, or is empty.
    """
    if isinstance(ref, type):
        return f"{ref.__module__}.{ref.__qualname__}"
    if not isinstance(ref, str):
        raise ConfigError(f"Invalid fixture reference: {ref!r}")
    identifier = ref.strip().lstrip(NAMESPACE_SEPARATOR)
    if not identifier:
        raise ConfigError(f"Invalid fixture reference: {ref!r}")
    return identifier


class FixtureState(str, Enum):
    """Lifecycle states of a fixture instance."""

    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"
    READY = "ready"
    UNLOADING = "unloading"
    IDLE = "idle"


class LifecyclePhase(str, Enum):
    """The six lifecycle calls, valued by the fixture method they invoke."""

    BEFORE_LOAD = "before_load"
    LOAD = "load"
    AFTER_LOAD = "after_load"
    BEFORE_UNLOAD = "before_unload"
    UNLOAD = "unload"
    AFTER_UNLOAD = "after_unload"

    @property
    def target_state(self) -> FixtureState:
        """State a fixture is in once this phase has returned."""
        return _PHASE_TARGETS[self]


_PHASE_TARGETS: dict[LifecyclePhase, FixtureState] = {
    LifecyclePhase.BEFORE_LOAD: FixtureState.LOADING,
    LifecyclePhase.LOAD: FixtureState.LOADED,
    LifecyclePhase.AFTER_LOAD: FixtureState.READY,
    LifecyclePhase.BEFORE_UNLOAD: FixtureState.UNLOADING,
    LifecyclePhase.UNLOAD: FixtureState.UNLOADED,
    LifecyclePhase.AFTER_UNLOAD: FixtureState.IDLE,
}


class Fixture:
    """A named unit of test setup/teardown state.

    Example:
        >>> class UserFixture(Fixture):
        ...     def load(self) -> None:
        ...         self.users = ["alice", "bob"]
        ...
        ...     def unload(self) -> None:
        ...         self.users = []
        ...
        >>> class ArticleFixture(Fixture):
        ...     depends = [UserFixture]
    """

    # Fixtures that must be loaded before this one, as classes or dotted paths.
    depends: ClassVar[Sequence[FixtureRef]] = ()

    state: FixtureState = FixtureState.UNLOADED

    @property
    def identifier(self) -> str:
        """Canonical identifier of this fixture's type."""
        return canonical_identifier(type(self))

    def load(self) -> None:
        """Load the fixture.

        Override this method to set up the fixture's state.
        """

    def unload(self) -> None:
        """Unload the fixture.

        Override this method to reverse ``load()``.
        """

    def before_load(self) -> None:
        """Called BEFORE any fixture of the current batch is loaded."""

    def after_load(self) -> None:
        """Called AFTER all fixtures of the current batch have been loaded."""

    def before_unload(self) -> None:
        """Called BEFORE any fixture of the current batch is unloaded."""

    def after_unload(self) -> None:
        """Called AFTER all fixtures of the current batch have been unloaded."""

    def run_phase(self, phase: LifecyclePhase) -> None:
        """Invoke the hook for ``phase`` and record the resulting state.

        The state only advances when the hook returns; if it raises, the
        fixture keeps its previous state and the exception propagates.
        """
        getattr(self, phase.value)()
        self.state = phase.target_state

    def __repr__(self) -> str:
        return f"{type(self).__name__}(state={self.state.value})"
