from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class EndpointKind(str, Enum):
    COLLECTION = "COLLECTION"
    ITEM = "ITEM"
    SEARCH = "SEARCH"
    DETAIL = "DETAIL"


@dataclass(frozen=True, order=True)
class TypeRef:
    """Reference to a declared type by its qualified name (e.g. com.shop.Order)."""

    qualified_name: str

    @property
    def simple_name(self) -> str:
        return self.qualified_name.rsplit(".", 1)[-1]

    def __str__(self) -> str:
        return self.qualified_name


@dataclass(frozen=True)
class RelationInfo:
    """One navigable hop from a parent entity to a child entity through a field."""

    field_name: str
    child_entity_type: TypeRef


@dataclass(frozen=True)
class IdentityInfo:
    identifier_field: str
    identifier_type: TypeRef


@dataclass(frozen=True)
class ServiceDescriptor:
    entity_type: TypeRef
    service_type: TypeRef  # destination type


@dataclass(frozen=True)
class ServiceBinding:
    """A handle the generated endpoint holds on the service for one entity."""

    entity_type: TypeRef
    field_name: str
    service_type: TypeRef
