"""Reference registries: ``@name`` lookup with overlays, fallbacks and alias chains."""

from __future__ import annotations

from typing import Any, Callable, Generic, Mapping, NamedTuple, Optional, Sequence, TypeVar, Union

from tablebook.contracts.book import Definitions, is_reference
from tablebook.contracts.common import ObjectPath, Result, processing_issue

T = TypeVar("T")

# A fallback is either a mapping or a callable returning the value (or None
# when the name is not its own). A callable may raise LookupError to report
# a name it recognises but cannot satisfy.
DefinitionLookup = Union[Mapping[str, Any], Callable[[str], Any]]


class DefinitionResolver(NamedTuple):
    """Fallback lookups for each definition kind."""

    colors: Optional[DefinitionLookup] = None
    styles: Optional[DefinitionLookup] = None
    themes: Optional[DefinitionLookup] = None
    numerics: Optional[DefinitionLookup] = None
    temporals: Optional[DefinitionLookup] = None
    types: Optional[DefinitionLookup] = None


class ReferenceRegistry(Generic[T]):
    """Named values of one kind.

    Names missing locally fall through to the parent registry (for overlays)
    or to the fallback lookups in order (for the root). Fallback hits and
    resolved alias chains are memoised, so a second resolution of the same
    name is a single dictionary hit.
    """

    def __init__(
        self,
        refs: Mapping[str, Any] | None = None,
        lookups: Sequence[DefinitionLookup | None] | None = None,
        *,
        parent: ReferenceRegistry[T] | None = None,
    ) -> None:
        self._refs: dict[str, Any] = dict(refs or {})
        self._lookups = [lookup for lookup in (lookups or []) if lookup is not None]
        self._parent = parent

    def overlay(self, refs: Mapping[str, Any] | None) -> ReferenceRegistry[T]:
        """Child registry shadowing this one; ``self`` when there is nothing to add."""
        if not refs:
            return self
        return ReferenceRegistry(refs, parent=self)

    def __contains__(self, name: str) -> bool:
        return name in self._refs

    def resolve(self, reference: str, path: ObjectPath) -> Result[T]:
        visited = [reference]

        while True:
            name = reference[1:]

            if name in self._refs:
                value = self._refs[name]
            elif self._parent is not None:
                found = self._parent.resolve(reference, path)
                if not found.ok:
                    return found
                value = found.value
            else:
                found = self._lookup(name, reference, path)
                if not found.ok:
                    return found
                value = found.value

            if not is_reference(value):
                for alias in visited:
                    self._refs[alias[1:]] = value
                return Result.success(value)

            if value in visited:
                return Result.failure([
                    processing_issue("Circular reference", path, [*visited, value])
                ])

            visited.append(value)
            reference = value

    def _lookup(self, name: str, reference: str, path: ObjectPath) -> Result[T]:
        issues = []
        for lookup in self._lookups:
            if callable(lookup):
                try:
                    value = lookup(name)
                except LookupError as e:
                    issues.append(processing_issue(str(e.args[0]) if e.args else str(e), path, reference))
                    continue
            else:
                value = lookup.get(name)

            if value is not None:
                self._refs[name] = value
                return Result.success(value)

        if issues:
            return Result.failure(issues)
        return Result.failure([processing_issue("Missing reference", path, reference)])


class DefinitionsRegistry:
    """The six registries of one compilation scope."""

    KINDS = ("colors", "styles", "themes", "numerics", "temporals", "types")

    def __init__(
        self,
        colors: ReferenceRegistry,
        styles: ReferenceRegistry,
        themes: ReferenceRegistry,
        numerics: ReferenceRegistry,
        temporals: ReferenceRegistry,
        types: ReferenceRegistry,
    ) -> None:
        self.colors = colors
        self.styles = styles
        self.themes = themes
        self.numerics = numerics
        self.temporals = temporals
        self.types = types

    @classmethod
    def new(
        cls,
        definitions: Definitions | None = None,
        resolvers: Sequence[DefinitionResolver] = (),
    ) -> DefinitionsRegistry:
        return cls(**{
            kind: ReferenceRegistry(
                getattr(definitions, kind) if definitions else None,
                [getattr(resolver, kind) for resolver in resolvers],
            )
            for kind in cls.KINDS
        })

    def overlay(self, definitions: Definitions | None) -> DefinitionsRegistry:
        if definitions is None:
            return self
        return DefinitionsRegistry(**{
            kind: getattr(self, kind).overlay(getattr(definitions, kind))
            for kind in self.KINDS
        })
