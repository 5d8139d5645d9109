"""Exceptions for fixtura."""


# =============================================================================
# Base Exception
# =============================================================================


class FixturaError(Exception):
    """
    Base exception for all fixtura errors.

    Errors raised by collaborators (data sources, storage backends, fixture
    constructors) are not wrapped in this hierarchy; they reach the caller
    with their original type and message.
    """

    pass


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigError(FixturaError):
    """Raised when fixtures are not properly configured.

    Covers malformed declarations, unknown override attributes, missing
    backing tables and missing data files.
    """

    @property
    def name(self) -> str:
        """The user-friendly name of this exception."""
        return "Invalid Configuration"


class CircularDependencyError(ConfigError):
    """Raised when a circular dependency among fixtures is detected."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"A circular dependency is detected for fixture '{identifier}'.")


# =============================================================================
# Registry Errors
# =============================================================================


class DuplicateFixtureError(FixturaError, ValueError):
    """Raised when attempting to register a fixture with an existing identifier."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Fixture '{identifier}' is already registered")


class FixtureNotFoundError(FixturaError, KeyError):
    """Raised when a fixture identifier cannot be constructed by the factory."""

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Fixture '{identifier}' not found in registry")

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0])
