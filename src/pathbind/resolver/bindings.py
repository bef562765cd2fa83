from __future__ import annotations

from collections.abc import Mapping
from typing import Iterator

from pathbind.domain.types import ServiceBinding, ServiceDescriptor, TypeRef
from pathbind.errors import ProgrammingError
from pathbind.resolver.naming import field_name_for


def binding_for_service(entity: TypeRef, service_type: TypeRef) -> ServiceBinding:
    return ServiceBinding(
        entity_type=entity,
        field_name=field_name_for(service_type),
        service_type=service_type,
    )


class ServiceBindingTable(Mapping):
    """
    Entity type -> ServiceBinding, in the order entities were first registered.

    Iteration order drives the order bindings get declared in generated code,
    so it is part of the contract. Built once per resolution, then sealed.
    """

    def __init__(self) -> None:
        self._bindings: dict[TypeRef, ServiceBinding] = {}
        self._descriptors: dict[TypeRef, ServiceDescriptor] = {}
        self._sealed = False

    def register(self, descriptor: ServiceDescriptor) -> ServiceBinding:
        if self._sealed:
            raise ProgrammingError("binding table is sealed")

        # an entity seen again keeps its first slot
        existing = self._bindings.get(descriptor.entity_type)
        if existing is not None:
            return existing

        binding = binding_for_service(descriptor.entity_type, descriptor.service_type)
        self._bindings[descriptor.entity_type] = binding
        self._descriptors[descriptor.entity_type] = descriptor
        return binding

    def seal(self) -> "ServiceBindingTable":
        self._sealed = True
        return self

    @property
    def sealed(self) -> bool:
        return self._sealed

    def descriptor(self, entity: TypeRef) -> ServiceDescriptor | None:
        return self._descriptors.get(entity)

    def __getitem__(self, entity: TypeRef) -> ServiceBinding:
        return self._bindings[entity]

    def __iter__(self) -> Iterator[TypeRef]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __eq__(self, other: object) -> bool:
        # order-sensitive, unlike plain Mapping equality
        if isinstance(other, ServiceBindingTable):
            return list(self._bindings.items()) == list(other._bindings.items())
        if isinstance(other, Mapping):
            return dict(self._bindings) == dict(other.items())
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(self._bindings.items()))

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}: {v.field_name}" for k, v in self._bindings.items())
        return f"ServiceBindingTable({{{inner}}})"
