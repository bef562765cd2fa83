from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union

from pathbind.domain.types import (
    EndpointKind,
    IdentityInfo,
    RelationInfo,
    ServiceBinding,
    ServiceDescriptor,
    TypeRef,
)
from pathbind.errors import ConfigurationError
from pathbind.resolver.bindings import ServiceBindingTable, binding_for_service
from pathbind.resolver.routes import DetailRoute, Route, build_request_path, route_for

logger = logging.getLogger(__name__)

ServiceRef = Union[TypeRef, ServiceDescriptor]


@dataclass(frozen=True)
class LastLevel:
    """Deepest hop of a detail chain: the level the endpoint operates on."""

    relation: RelationInfo
    entity_type: TypeRef
    service_binding: ServiceBinding

    @property
    def service_type(self) -> TypeRef:
        return self.service_binding.service_type


@dataclass(frozen=True)
class ResolvedController:
    root_entity: TypeRef
    root_service: TypeRef
    root_service_binding: ServiceBinding
    root_descriptor: ServiceDescriptor
    identifier_field: str
    identifier_type: TypeRef
    endpoint_kind: EndpointKind
    base_path: str
    request_path: str
    route: Route
    detail_bindings: ServiceBindingTable
    last_level: Optional[LastLevel] = None

    @property
    def detail_chain(self) -> tuple[RelationInfo, ...]:
        if isinstance(self.route, DetailRoute):
            return self.route.chain
        return ()

    @property
    def key(self) -> str:
        # stable across runs: controller:DETAIL com.shop.Order items.tags
        k = f"controller:{self.endpoint_kind.value} {self.root_entity}"
        if isinstance(self.route, DetailRoute):
            k = f"{k} {self.route.field_path}"
        return k

    def binding_for(self, entity: TypeRef) -> Optional[ServiceBinding]:
        """Service binding for an entity; the root entity resolves to the root binding."""
        if entity == self.root_entity:
            return self.root_service_binding
        return self.detail_bindings.get(entity)

    def service_descriptor_for(self, entity: TypeRef) -> Optional[ServiceDescriptor]:
        if entity == self.root_entity:
            return self.root_descriptor
        return self.detail_bindings.descriptor(entity)

    def all_bindings(self) -> list[ServiceBinding]:
        """Root binding first, then detail bindings in declaration order."""
        return [self.root_service_binding, *self.detail_bindings.values()]

    def to_dict(self) -> dict[str, Any]:
        def _binding(b: ServiceBinding) -> dict[str, str]:
            return {
                "entity": str(b.entity_type),
                "field": b.field_name,
                "service": str(b.service_type),
            }

        last = None
        if self.last_level is not None:
            last = {
                "field": self.last_level.relation.field_name,
                "entity": str(self.last_level.entity_type),
                "binding": _binding(self.last_level.service_binding),
            }

        return {
            "key": self.key,
            "entity": str(self.root_entity),
            "service": str(self.root_service),
            "type": self.endpoint_kind.value,
            "path": self.base_path,
            "request_path": self.request_path,
            "identifier": {
                "field": self.identifier_field,
                "type": str(self.identifier_type),
            },
            "service_binding": _binding(self.root_service_binding),
            "detail_chain": [
                {"field": r.field_name, "entity": str(r.child_entity_type)}
                for r in self.detail_chain
            ],
            "detail_bindings": [_binding(b) for b in self.detail_bindings.values()],
            "last_level": last,
        }


def _as_descriptor(entity: TypeRef, service: ServiceRef) -> ServiceDescriptor:
    if isinstance(service, ServiceDescriptor):
        if service.entity_type != entity:
            raise ConfigurationError(
                f"Service {service.service_type} declared for {service.entity_type}, "
                f"expected {entity}"
            )
        return service
    return ServiceDescriptor(entity_type=entity, service_type=service)


def _require(value: Any, aspect: str, entity: Any) -> None:
    if value is None or value == "":
        raise ConfigurationError(f"Missing {aspect} for {entity}")


def resolve_controller(
    root_entity: TypeRef,
    root_service: ServiceRef,
    base_path: str,
    endpoint_kind: EndpointKind,
    identity: IdentityInfo,
    detail_chain: Optional[Sequence[RelationInfo]] = None,
    service_lookup: Optional[Mapping[TypeRef, ServiceRef]] = None,
) -> ResolvedController:
    """
    Resolve request path, service bindings and identity for one controller.

    - root binding is always present
    - DETAIL adds one binding per hop destination, in first-visit order,
      looked up in `service_lookup`
    - the deepest hop is exposed as `last_level`

    Raises ConfigurationError on missing inputs (including a DETAIL controller
    without relations or without a service for one of the chain entities).
    """
    _require(root_entity, "root entity", "controller")
    _require(root_service, "service", root_entity)
    _require(base_path, "path", root_entity)
    _require(endpoint_kind, "controller type", root_entity)
    _require(identity, "identifier information", root_entity)
    _require(identity.identifier_field, "identifier field", root_entity)
    _require(identity.identifier_type, "identifier type", root_entity)

    route = route_for(endpoint_kind, detail_chain, root_entity)
    request_path = build_request_path(route, base_path, root_entity)

    root_descriptor = _as_descriptor(root_entity, root_service)
    root_binding = binding_for_service(root_entity, root_descriptor.service_type)

    table = ServiceBindingTable()
    last_level: Optional[LastLevel] = None

    if isinstance(route, DetailRoute):
        lookup = service_lookup or {}
        for rel in route.chain:
            entity = rel.child_entity_type
            service = lookup.get(entity)
            if service is None:
                raise ConfigurationError(
                    f"Missing service for {entity} (field '{rel.field_name}') "
                    f"in details of {root_entity}"
                )
            table.register(_as_descriptor(entity, service))

        last = route.last
        last_level = LastLevel(
            relation=last,
            entity_type=last.child_entity_type,
            service_binding=table[last.child_entity_type],
        )

    table.seal()

    logger.debug(
        "Resolved %s %s -> %s (%d detail bindings)",
        route.kind.value,
        root_entity,
        request_path,
        len(table),
    )

    return ResolvedController(
        root_entity=root_entity,
        root_service=root_descriptor.service_type,
        root_service_binding=root_binding,
        root_descriptor=root_descriptor,
        identifier_field=identity.identifier_field,
        identifier_type=identity.identifier_type,
        endpoint_kind=route.kind,
        base_path=base_path,
        request_path=request_path,
        route=route,
        detail_bindings=table,
        last_level=last_level,
    )
