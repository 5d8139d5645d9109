"""
Fixture declarations.

Test contexts request fixtures with heterogeneous values: a bare reference
(class or dotted path), a mapping holding a ``"class"`` reference plus
configuration overrides, or a pre-built Fixture instance. This module
normalises all three into the FixtureDeclaration variant before resolution.

Example:
    >>> normalize_declarations({
    ...     "users": UserFixture,
    ...     "articles": {"class": "app.fixtures.ArticleFixture", "data_file": "a.yaml"},
    ...     0: "app.fixtures.TagFixture",
    ... })
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from fixtura.exceptions import ConfigError
from fixtura.fixtures.base import Fixture, FixtureRef, canonical_identifier

if TYPE_CHECKING:
    from fixtura.fixtures.factory import FixtureConstructor

CLASS_KEY = "class"

DeclarationList = Mapping[str | int, Any] | Sequence[Any]


class DeclarationKind(str, Enum):
    """Shape a fixture declaration was given in."""

    IDENTIFIER = "identifier"
    OVERRIDES = "overrides"
    INSTANCE = "instance"


@dataclass(frozen=True)
class FixtureDeclaration:
    """A normalised fixture declaration.

    ``alias`` is None when the declaration is anonymous; ``name`` then falls
    back to the identifier.
    """

    kind: DeclarationKind
    identifier: str
    alias: str | None = None
    overrides: Mapping[str, Any] = field(default_factory=dict)
    instance: Fixture | None = None

    @classmethod
    def bare(cls, ref: FixtureRef, alias: str | None = None) -> "FixtureDeclaration":
        """Declare a fixture by reference with no overrides."""
        return cls(DeclarationKind.IDENTIFIER, canonical_identifier(ref), alias)

    @classmethod
    def with_overrides(
        cls,
        ref: FixtureRef,
        overrides: Mapping[str, Any],
        alias: str | None = None,
    ) -> "FixtureDeclaration":
        """Declare a fixture by reference with configuration overrides."""
        return cls(
            DeclarationKind.OVERRIDES,
            canonical_identifier(ref),
            alias,
            overrides=dict(overrides),
        )

    @classmethod
    def of_instance(cls, instance: Fixture, alias: str | None = None) -> "FixtureDeclaration":
        """Declare a pre-constructed fixture, used as-is."""
        return cls(DeclarationKind.INSTANCE, instance.identifier, alias, instance=instance)

    @property
    def name(self) -> str:
        """Alias if one was given, otherwise the identifier."""
        return self.alias if self.alias is not None else self.identifier

    def materialize(self, factory: "FixtureConstructor") -> Fixture:
        """Return the fixture instance for this declaration.

        Instance declarations return their instance; the other kinds are
        constructed by ``factory`` and have their overrides applied.
        """
        if self.instance is not None:
            return self.instance
        fixture = factory.construct(self.identifier)
        apply_overrides(fixture, self.overrides)
        return fixture


def apply_overrides(fixture: Fixture, overrides: Mapping[str, Any]) -> None:
    """Set each override on ``fixture``.

    Raises:
        ConfigError: If an override names an attribute the fixture lacks.
    """
    for attribute, value in overrides.items():
        if not hasattr(fixture, attribute):
            raise ConfigError(
                f"Unknown property '{attribute}' for fixture '{fixture.identifier}'."
            )
        setattr(fixture, attribute, value)


def normalize_declaration(name: str | int, raw: Any) -> FixtureDeclaration:
    """Normalise one top-level declaration.

    Args:
        name: The key the declaration was given under. Integer keys are
            anonymous; string keys become the alias.
        raw: A reference, a mapping with a ``"class"`` key, a Fixture
            instance, or an already normalised FixtureDeclaration.

    Raises:
        ConfigError: If the declaration has neither a usable reference nor
            an instance.
    """
    alias = name if isinstance(name, str) else None

    if isinstance(raw, FixtureDeclaration):
        if raw.alias is not None or alias is None:
            return raw
        return FixtureDeclaration(raw.kind, raw.identifier, alias, raw.overrides, raw.instance)
    if isinstance(raw, Fixture):
        return FixtureDeclaration.of_instance(raw, alias)
    if isinstance(raw, Mapping):
        if CLASS_KEY not in raw:
            raise ConfigError(f"You must specify '{CLASS_KEY}' for the fixture '{name}'.")
        overrides = {key: value for key, value in raw.items() if key != CLASS_KEY}
        return FixtureDeclaration.with_overrides(raw[CLASS_KEY], overrides, alias)
    if isinstance(raw, str | type):
        return FixtureDeclaration.bare(raw, alias)
    raise ConfigError(f"Invalid declaration for the fixture '{name}': {raw!r}")


def normalize_declarations(declarations: DeclarationList | None) -> list[FixtureDeclaration]:
    """Normalise a declaration list, keeping its order.

    Accepts a mapping of name-or-index to declaration, or a plain sequence
    whose positions act as anonymous indices.
    """
    if declarations is None:
        return []
    if isinstance(declarations, Mapping):
        items = list(declarations.items())
    elif isinstance(declarations, str | bytes):
        raise ConfigError(
            f"Fixture declarations must be a mapping or a list, got {declarations!r}"
        )
    else:
        items = list(enumerate(declarations))
    return [normalize_declaration(name, raw) for name, raw in items]
