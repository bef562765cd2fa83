from __future__ import annotations

from pathbind.domain.types import TypeRef


def uncapitalize(name: str) -> str:
    # only the first character changes: "OrderService" -> "orderService", "URL" -> "uRL"
    if not name:
        return name
    return name[0].lower() + name[1:]


def field_name_for(service_type: TypeRef) -> str:
    return uncapitalize(service_type.simple_name)


def path_variable(entity_type: TypeRef) -> str:
    # Order -> "{order}"
    return "{" + uncapitalize(entity_type.simple_name) + "}"
