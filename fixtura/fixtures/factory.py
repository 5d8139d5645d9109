"""
Fixture construction.

FixtureFactory turns a fixture identifier into a fresh fixture instance. It
keeps a registry of identifier -> provider (a Fixture class or any callable
returning a fixture) and, unless disabled, falls back to importing the
identifier as a dotted path. Constructor keyword parameters are filled by
name from the ``services`` mapping, so collaborators such as ``storage`` and
``data_source`` are injected without the fixture looking them up.
"""

import importlib
import inspect
from collections.abc import Callable, Iterator, Mapping
from typing import Any, Protocol, runtime_checkable

from fixtura.exceptions import ConfigError, DuplicateFixtureError, FixtureNotFoundError
from fixtura.fixtures.base import Fixture, FixtureRef, canonical_identifier

Provider = Callable[..., Fixture]


@runtime_checkable
class FixtureConstructor(Protocol):
    """Anything that can build a fixture instance from its identifier."""

    def construct(self, identifier: str) -> Fixture:
        """Return a new fixture instance for ``identifier``."""
        ...


class FixtureFactory:
    """Registry-backed fixture factory with keyword injection.

    Example:
        >>> factory = FixtureFactory(services={"storage": InMemoryStorage()})
        >>> factory.register(UserFixture)
        >>> factory.construct("tests.fixtures.UserFixture")
        UserFixture(state=unloaded)
    """

    def __init__(
        self,
        services: Mapping[str, Any] | None = None,
        import_fallback: bool = True,
    ) -> None:
        """Initialize an empty factory.

        Args:
            services: Values injected into provider keyword parameters of
                the same name.
            import_fallback: Import unregistered identifiers as dotted paths.
        """
        self._providers: dict[str, Provider] = {}
        self.services: dict[str, Any] = dict(services or {})
        self.import_fallback = import_fallback

    def register(self, provider: Provider, identifier: FixtureRef | None = None) -> str:
        """Register a fixture class or provider callable.

        Args:
            provider: A Fixture subclass or a callable returning a fixture.
            identifier: Identifier to register under. Defaults to the
                canonical identifier of ``provider`` when it is a class.

        Returns:
            The canonical identifier the provider was registered under.

        Raises:
            DuplicateFixtureError: If the identifier is already registered.
            ConfigError: If no identifier can be derived.
        """
        if identifier is None:
            if not isinstance(provider, type):
                raise ConfigError("An identifier is required to register a provider callable.")
            identifier = provider
        key = canonical_identifier(identifier)
        if key in self._providers:
            raise DuplicateFixtureError(key)
        self._providers[key] = provider
        return key

    def has(self, identifier: FixtureRef) -> bool:
        """Check if a provider is registered for ``identifier``."""
        return canonical_identifier(identifier) in self._providers

    def construct(self, identifier: str) -> Fixture:
        """Build a new fixture instance.

        Raises:
            FixtureNotFoundError: If nothing is registered under the
                identifier and import fallback is disabled.
            ConfigError: If the provider does not produce a Fixture.
        """
        identifier = canonical_identifier(identifier)
        provider = self._providers.get(identifier)
        if provider is None:
            if not self.import_fallback:
                raise FixtureNotFoundError(identifier)
            provider = self._import(identifier)

        fixture = provider(**self._injectable(provider))
        if not isinstance(fixture, Fixture):
            raise ConfigError(f"'{identifier}' did not produce a Fixture instance.")
        return fixture

    def _injectable(self, provider: Provider) -> dict[str, Any]:
        """Select the services matching the provider's keyword parameters."""
        if not self.services:
            return {}
        try:
            signature = inspect.signature(provider)
        except (TypeError, ValueError):
            return {}
        kwargs: dict[str, Any] = {}
        for param in signature.parameters.values():
            if param.kind in (param.POSITIONAL_OR_KEYWORD, param.KEYWORD_ONLY):
                if param.name in self.services:
                    kwargs[param.name] = self.services[param.name]
        return kwargs

    @staticmethod
    def _import(identifier: str) -> Provider:
        """Resolve a dotted path ``module.QualName`` to an attribute.

        The longest importable module prefix wins, so nested classes resolve.
        The first import error propagates unchanged if no prefix imports.
        A module that exists but fails to import propagates its own error.
        """
        parts = identifier.split(".")
        if len(parts) < 2:
            raise FixtureNotFoundError(identifier)
        error: ImportError | None = None
        for split in range(len(parts) - 1, 0, -1):
            module_name = ".".join(parts[:split])
            try:
                target: Any = importlib.import_module(module_name)
            except ModuleNotFoundError as exc:
                if not _is_missing_prefix(module_name, exc.name):
                    raise
                error = error or exc
                continue
            for attribute in parts[split:]:
                target = getattr(target, attribute)
            provider: Provider = target
            return provider
        assert error is not None
        raise error

    def __len__(self) -> int:
        """Return the number of registered providers."""
        return len(self._providers)

    def __contains__(self, identifier: object) -> bool:
        """Support 'in' operator for registered identifiers."""
        if not isinstance(identifier, str | type):
            return False
        return self.has(identifier)

    def __iter__(self) -> Iterator[str]:
        """Iterate over registered identifiers."""
        return iter(self._providers)

    def __repr__(self) -> str:
        """Return a string representation of the factory."""
        return f"FixtureFactory({len(self._providers)} fixtures)"


def _is_missing_prefix(module_name: str, missing: str | None) -> bool:
    """Check whether ``missing`` is ``module_name`` or one of its parent packages."""
    if missing is None:
        return False
    return module_name == missing or module_name.startswith(missing + ".")
