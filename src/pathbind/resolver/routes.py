from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union

from pathbind.domain.types import EndpointKind, RelationInfo, TypeRef
from pathbind.errors import ConfigurationError, ProgrammingError
from pathbind.resolver.naming import path_variable


@dataclass(frozen=True)
class CollectionRoute:
    kind = EndpointKind.COLLECTION


@dataclass(frozen=True)
class ItemRoute:
    kind = EndpointKind.ITEM


@dataclass(frozen=True)
class SearchRoute:
    kind = EndpointKind.SEARCH


@dataclass(frozen=True)
class DetailRoute:
    """Nested sub-resource reached by walking `chain` from the root entity."""

    chain: tuple[RelationInfo, ...]
    kind = EndpointKind.DETAIL

    @property
    def last(self) -> RelationInfo:
        return self.chain[-1]

    @property
    def field_path(self) -> str:
        # items.tags
        return ".".join(r.field_name for r in self.chain)


Route = Union[CollectionRoute, ItemRoute, SearchRoute, DetailRoute]


def route_for(
    kind: EndpointKind,
    detail_chain: Optional[Sequence[RelationInfo]],
    entity: TypeRef,
) -> Route:
    """
    Build the route variant for an endpoint kind.

    The chain only matters for DETAIL; for DETAIL it must be present and non-empty.
    """
    if kind == EndpointKind.COLLECTION:
        return CollectionRoute()
    if kind == EndpointKind.ITEM:
        return ItemRoute()
    if kind == EndpointKind.SEARCH:
        return SearchRoute()
    if kind == EndpointKind.DETAIL:
        if detail_chain is None or len(detail_chain) == 0:
            raise ConfigurationError(f"Missing details information for {entity}")
        return DetailRoute(chain=tuple(detail_chain))
    raise ProgrammingError(f"Unsupported endpoint kind {kind!r} on {entity}")


def build_request_path(route: Route, base_path: str, entity: TypeRef) -> str:
    """
    URL template for a route:
      COLLECTION  pets
      ITEM        pets/{pet}
      SEARCH      pets/search
      DETAIL      orders/{order}/items/{item}/tags
    """
    base = base_path.lower()

    if isinstance(route, CollectionRoute):
        return base
    if isinstance(route, ItemRoute):
        return f"{base}/{path_variable(entity)}"
    if isinstance(route, SearchRoute):
        return f"{base}/search"
    if isinstance(route, DetailRoute):
        parts = [base]
        cur = entity
        for rel in route.chain:
            parts.append(f"/{path_variable(cur)}/{rel.field_name}")
            cur = rel.child_entity_type
        return "".join(parts)

    raise ProgrammingError(f"Unsupported route {route!r} on {entity}")
