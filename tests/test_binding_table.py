import pytest

from pathbind.domain.types import ServiceDescriptor, TypeRef
from pathbind.errors import ProgrammingError
from pathbind.resolver.bindings import ServiceBindingTable

ITEM = TypeRef("com.shop.Item")
TAG = TypeRef("com.shop.Tag")


def _svc(entity: TypeRef) -> ServiceDescriptor:
    return ServiceDescriptor(entity, TypeRef(f"com.shop.service.{entity.simple_name}Service"))


def test_registers_in_insertion_order_and_keeps_first_slot():
    table = ServiceBindingTable()
    table.register(_svc(TAG))
    table.register(_svc(ITEM))
    again = table.register(_svc(TAG))

    assert list(table) == [TAG, ITEM]
    assert again is table[TAG]
    assert table[ITEM].field_name == "itemService"
    assert table.descriptor(ITEM) == _svc(ITEM)
    assert table.descriptor(TypeRef("Nope")) is None


def test_sealed_table_rejects_registration():
    table = ServiceBindingTable().seal()
    assert table.sealed
    with pytest.raises(ProgrammingError):
        table.register(_svc(ITEM))


def test_equality_is_order_sensitive():
    a = ServiceBindingTable()
    a.register(_svc(ITEM))
    a.register(_svc(TAG))

    b = ServiceBindingTable()
    b.register(_svc(TAG))
    b.register(_svc(ITEM))

    c = ServiceBindingTable()
    c.register(_svc(ITEM))
    c.register(_svc(TAG))

    assert a != b
    assert a == c
