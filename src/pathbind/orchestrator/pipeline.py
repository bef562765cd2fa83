from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from pathbind.domain.models import ControllerDecl, EntityDecl, ProjectDecl
from pathbind.domain.types import (
    EndpointKind,
    IdentityInfo,
    RelationInfo,
    ServiceDescriptor,
    TypeRef,
)
from pathbind.errors import ConfigurationError
from pathbind.resolver.controller import ResolvedController, resolve_controller

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolveResult:
    controllers: list[ResolvedController]
    errors: list[tuple[str, str]]  # (controller name, message)


def load_project(path: Path) -> ProjectDecl:
    """Read and validate a project document (JSON)."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigurationError(f"Project file does not exist: {path}") from None
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e

    try:
        project = ProjectDecl.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid project document {path}: {e}") from e

    logger.debug(
        "Loaded %s: %d entities, %d services, %d controllers",
        path,
        len(project.entities),
        len(project.services),
        len(project.controllers),
    )
    return project


class ProjectIndex:
    """
    Lookups over a project document, standing in for the identity provider,
    relation discovery and service registry.
    """

    def __init__(self, project: ProjectDecl):
        self.project = project
        self._entities: dict[str, EntityDecl] = {}
        for e in project.entities:
            if e.name in self._entities:
                raise ConfigurationError(f"Entity declared twice: {e.name}")
            self._entities[e.name] = e

        self._services: dict[TypeRef, ServiceDescriptor] = {}
        for s in project.services:
            entity = TypeRef(s.entity)
            if entity in self._services:
                raise ConfigurationError(f"Service declared twice for {s.entity}")
            self._services[entity] = ServiceDescriptor(
                entity_type=entity, service_type=TypeRef(s.service)
            )

    def entity(self, name: str) -> EntityDecl:
        decl = self._entities.get(name)
        if decl is None:
            raise ConfigurationError(f"Unknown entity: {name}")
        return decl

    def identity_for(self, name: str) -> IdentityInfo:
        ident = self.entity(name).identifier
        if ident is None:
            raise ConfigurationError(f"Missing identifier information for {name}")
        return IdentityInfo(identifier_field=ident.field, identifier_type=TypeRef(ident.type))

    def relation_chain(self, name: str, detail: str) -> list[RelationInfo]:
        """
        Walk a dotted relation path from an entity.

        relation_chain("com.shop.Order", "items.tags")
          -> [RelationInfo("items", Item), RelationInfo("tags", Tag)]
        """
        chain: list[RelationInfo] = []
        if not detail:
            return chain

        fields = detail.split(".")
        cur = self.entity(name)
        for i, field_name in enumerate(fields):
            child = cur.relations.get(field_name)
            if child is None:
                raise ConfigurationError(
                    f"Unknown relation '{field_name}' on {cur.name} (detail '{detail}' of {name})"
                )
            chain.append(RelationInfo(field_name=field_name, child_entity_type=TypeRef(child)))
            # the last child only needs a service, not an entity declaration
            if i + 1 < len(fields):
                cur = self.entity(child)
        return chain

    def service_registry(self) -> dict[TypeRef, ServiceDescriptor]:
        return dict(self._services)

    def service_for(self, name: str) -> ServiceDescriptor:
        svc = self._services.get(TypeRef(name))
        if svc is None:
            raise ConfigurationError(f"Missing service for {name}")
        return svc


def resolve_declared(index: ProjectIndex, decl: ControllerDecl) -> ResolvedController:
    """Resolve one declared controller through the project lookups."""
    identity = index.identity_for(decl.entity)
    root_service = index.service_for(decl.entity)

    chain = None
    lookup = None
    if decl.type == EndpointKind.DETAIL:
        chain = index.relation_chain(decl.entity, decl.detail)
        # pre-populate only what the chain needs
        registry = index.service_registry()
        lookup = {
            r.child_entity_type: registry[r.child_entity_type]
            for r in chain
            if r.child_entity_type in registry
        }

    return resolve_controller(
        root_entity=TypeRef(decl.entity),
        root_service=root_service,
        base_path=decl.path,
        endpoint_kind=decl.type,
        identity=identity,
        detail_chain=chain,
        service_lookup=lookup,
    )


def resolve_project(project: ProjectDecl, fail_fast: bool = True) -> ResolveResult:
    """
    Resolve every declared controller, in declaration order.

    fail_fast=False collects configuration errors per controller instead of
    raising the first one.
    """
    index = ProjectIndex(project)

    resolved: list[ResolvedController] = []
    errors: list[tuple[str, str]] = []

    for decl in project.controllers:
        try:
            resolved.append(resolve_declared(index, decl))
        except ConfigurationError as e:
            if fail_fast:
                raise
            logger.warning("Skipping %s: %s", decl.display_name, e)
            errors.append((decl.display_name, str(e)))

    logger.debug("Resolved %d controllers (%d errors)", len(resolved), len(errors))
    return ResolveResult(controllers=resolved, errors=errors)
