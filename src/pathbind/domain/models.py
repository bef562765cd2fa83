from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from pathbind.domain.types import EndpointKind


class IdentifierDecl(BaseModel):
    field: str
    type: str


class EntityDecl(BaseModel):
    name: str  # qualified, e.g. com.shop.Order
    identifier: Optional[IdentifierDecl] = None
    relations: dict[str, str] = Field(default_factory=dict)  # field name -> child entity


class ServiceDecl(BaseModel):
    entity: str
    service: str


class ControllerDecl(BaseModel):
    entity: str
    path: str
    type: EndpointKind = EndpointKind.COLLECTION
    detail: str = ""  # dotted relation path, e.g. items.tags
    name: str = ""

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        label = f"{self.entity} {self.type.value}"
        if self.detail:
            label = f"{label} {self.detail}"
        return label


class ProjectDecl(BaseModel):
    entities: list[EntityDecl] = Field(default_factory=list)
    services: list[ServiceDecl] = Field(default_factory=list)
    controllers: list[ControllerDecl] = Field(default_factory=list)
