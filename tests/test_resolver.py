import pytest

from pathbind.domain.types import (
    EndpointKind,
    IdentityInfo,
    RelationInfo,
    ServiceDescriptor,
    TypeRef,
)
from pathbind.errors import ConfigurationError
from pathbind.resolver.controller import resolve_controller

PET = TypeRef("com.zoo.Pet")
ORDER = TypeRef("com.shop.Order")
ITEM = TypeRef("com.shop.Item")
TAG = TypeRef("com.shop.Tag")

LONG = TypeRef("java.lang.Long")
ID = IdentityInfo(identifier_field="id", identifier_type=LONG)


def _service(entity: TypeRef) -> TypeRef:
    return TypeRef(f"com.shop.service.{entity.simple_name}Service")


SERVICES = {e: ServiceDescriptor(e, _service(e)) for e in (ORDER, ITEM, TAG)}


def _detail(chain, base="orders"):
    return resolve_controller(
        root_entity=ORDER,
        root_service=_service(ORDER),
        base_path=base,
        endpoint_kind=EndpointKind.DETAIL,
        identity=ID,
        detail_chain=chain,
        service_lookup=SERVICES,
    )


def test_item_collection_search_paths():
    def path(kind, base):
        return resolve_controller(PET, TypeRef("com.zoo.PetService"), base, kind, ID).request_path

    assert path(EndpointKind.ITEM, "pets") == "pets/{pet}"
    assert path(EndpointKind.COLLECTION, "Pets") == "pets"
    assert path(EndpointKind.SEARCH, "pets") == "pets/search"


@pytest.mark.parametrize("kind", [EndpointKind.COLLECTION, EndpointKind.ITEM, EndpointKind.SEARCH])
def test_non_detail_has_no_detail_bindings(kind):
    c = resolve_controller(
        PET,
        TypeRef("com.zoo.PetService"),
        "/Pets",
        kind,
        ID,
        detail_chain=[RelationInfo("owners", TypeRef("com.zoo.Owner"))],  # ignored
    )
    assert len(c.detail_bindings) == 0
    assert c.last_level is None
    assert c.detail_chain == ()
    assert c.request_path.startswith("/pets")
    assert c.binding_for(PET) == c.root_service_binding
    assert c.root_service_binding.field_name == "petService"
    assert c.identifier_field == "id"
    assert c.identifier_type == LONG


def test_single_hop_detail():
    c = _detail([RelationInfo("items", ITEM)])

    assert c.request_path == "orders/{order}/items"
    assert list(c.detail_bindings) == [ITEM]
    assert c.last_level is not None
    assert c.last_level.entity_type == ITEM
    assert c.last_level.relation.field_name == "items"
    assert c.last_level.service_binding.field_name == "itemService"
    assert c.last_level.service_type == _service(ITEM)


def test_two_hop_detail_keeps_chain_order():
    c = _detail([RelationInfo("items", ITEM), RelationInfo("tags", TAG)])

    assert c.request_path == "orders/{order}/items/{item}/tags"
    assert list(c.detail_bindings) == [ITEM, TAG]
    assert c.last_level.relation.field_name == "tags"
    assert c.last_level.entity_type == TAG
    assert [b.field_name for b in c.all_bindings()] == ["orderService", "itemService", "tagService"]
    assert c.key == "controller:DETAIL com.shop.Order items.tags"


def test_detail_base_path_is_lowercased():
    c = _detail([RelationInfo("items", ITEM)], base="/Orders")
    assert c.request_path == "/orders/{order}/items"


def test_repeated_entity_keeps_first_position():
    chain = [
        RelationInfo("tags", TAG),
        RelationInfo("items", ITEM),
        RelationInfo("related", TAG),
    ]
    c = _detail(chain)
    assert list(c.detail_bindings) == [TAG, ITEM]
    assert c.last_level.entity_type == TAG
    assert c.last_level.relation.field_name == "related"


@pytest.mark.parametrize("chain", [None, []])
@pytest.mark.parametrize("base", ["orders", "Orders", "/api/orders"])
def test_detail_without_chain_fails(chain, base):
    with pytest.raises(ConfigurationError, match="Missing details information"):
        _detail(chain, base=base)


def test_missing_service_for_chain_entity():
    with pytest.raises(ConfigurationError, match="com.shop.Tag"):
        resolve_controller(
            ORDER,
            _service(ORDER),
            "orders",
            EndpointKind.DETAIL,
            ID,
            detail_chain=[RelationInfo("items", ITEM), RelationInfo("tags", TAG)],
            service_lookup={ITEM: SERVICES[ITEM]},
        )


def test_missing_inputs_are_configuration_errors():
    with pytest.raises(ConfigurationError, match="path"):
        resolve_controller(PET, TypeRef("PetService"), "", EndpointKind.ITEM, ID)
    with pytest.raises(ConfigurationError, match="identifier"):
        resolve_controller(PET, TypeRef("PetService"), "pets", EndpointKind.ITEM, None)  # type: ignore[arg-type]
    with pytest.raises(ConfigurationError, match="identifier field"):
        resolve_controller(
            PET, TypeRef("PetService"), "pets", EndpointKind.ITEM, IdentityInfo("", LONG)
        )


def test_resolution_is_idempotent():
    chain = [RelationInfo("items", ITEM), RelationInfo("tags", TAG)]
    assert _detail(chain) == _detail(chain)


def test_binding_and_descriptor_lookup():
    c = _detail([RelationInfo("items", ITEM)])

    assert c.binding_for(ORDER) == c.root_service_binding
    assert c.binding_for(ITEM) == c.detail_bindings[ITEM]
    assert c.binding_for(TAG) is None

    assert c.service_descriptor_for(ORDER) == ServiceDescriptor(ORDER, _service(ORDER))
    assert c.service_descriptor_for(ITEM) == SERVICES[ITEM]
    assert c.service_descriptor_for(TAG) is None


def test_result_is_immutable():
    c = _detail([RelationInfo("items", ITEM)])
    with pytest.raises(AttributeError):
        c.request_path = "x"  # type: ignore[misc]
    assert c.detail_bindings.sealed


def test_to_dict_preserves_binding_order():
    d = _detail([RelationInfo("items", ITEM), RelationInfo("tags", TAG)]).to_dict()

    assert d["type"] == "DETAIL"
    assert d["request_path"] == "orders/{order}/items/{item}/tags"
    assert [b["field"] for b in d["detail_bindings"]] == ["itemService", "tagService"]
    assert d["last_level"]["field"] == "tags"
    assert d["identifier"] == {"field": "id", "type": "java.lang.Long"}


def test_service_declared_for_another_entity_is_rejected():
    line_item = TypeRef("com.shop.LineItem")
    with pytest.raises(ConfigurationError, match="expected com.shop.Item"):
        resolve_controller(
            ORDER,
            _service(ORDER),
            "orders",
            EndpointKind.DETAIL,
            ID,
            detail_chain=[RelationInfo("items", ITEM)],
            service_lookup={ITEM: ServiceDescriptor(line_item, _service(line_item))},
        )

    with pytest.raises(ConfigurationError, match="expected com.shop.Order"):
        resolve_controller(
            ORDER, ServiceDescriptor(ITEM, _service(ITEM)), "orders", EndpointKind.ITEM, ID
        )


def test_results_are_hashable_and_empty_bindings_compare_to_empty_mapping():
    c = resolve_controller(ORDER, _service(ORDER), "orders", EndpointKind.ITEM, ID)
    assert c.detail_bindings == {}
    assert hash(c) == hash(resolve_controller(ORDER, _service(ORDER), "orders", EndpointKind.ITEM, ID))

    chain = [RelationInfo("items", ITEM), RelationInfo("tags", TAG)]
    assert len({_detail(chain), _detail(chain)}) == 1
