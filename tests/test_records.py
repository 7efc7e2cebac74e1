"""
Tests for the deepequal.records file.
"""

import collections
import pytest
from dataclasses import dataclass, field, fields
from deepequal.pytypes import MISSING
from deepequal.records import (EXPORTED_METADATA_KEY, FieldDescriptor, exported_field, field_value, is_exported_name,
    private_field, record_fields)


@dataclass
class _TempDataclass:
    b: int
    a: int
    _c: int = 0
    _d: int = exported_field(default=0)
    e: int = private_field(default=0, metadata={'other': 'thing'})
    f: list = field(default_factory=list)


class _TempBase:
    __slots__ = ('a', '__b')


class _TempChild(_TempBase):
    __slots__ = 'c'


class _TempPlain:
    __deepequal_fields__ = {'_hidden': True, 'shown': False}

    def __init__(self):
        self.shown = 1
        self._hidden = 2
        self.other = 3


class _TempBadDeclaration:
    __deepequal_fields__ = ['a']

    def __init__(self):
        self.a = 1


_TempPoint = collections.namedtuple('_TempPoint', ['y', 'x'])


def test_exported_names():
    assert is_exported_name('Name')
    assert is_exported_name('name')
    assert not is_exported_name('_name')
    assert not is_exported_name('__name')


def test_dataclass_fields():
    """Tests declaration order and visibility of dataclass fields"""
    obj = _TempDataclass(1, 2)
    assert record_fields(obj, obj) == [
        FieldDescriptor('b', True),
        FieldDescriptor('a', True),
        FieldDescriptor('_c', False),
        FieldDescriptor('_d', True),
        FieldDescriptor('e', False),
        FieldDescriptor('f', True),
    ]

    # Metadata passed in is kept
    e_field = next(f for f in fields(_TempDataclass) if f.name == 'e')
    assert e_field.metadata == {'other': 'thing', EXPORTED_METADATA_KEY: False}


def test_namedtuple_fields():
    obj = _TempPoint(1, 2)
    assert record_fields(obj, obj) == [FieldDescriptor('y', True), FieldDescriptor('x', True)]


def test_slotted_fields():
    """Tests slots are found through base classes, with private names mangled"""
    obj = _TempChild()
    assert record_fields(obj, obj) == [
        FieldDescriptor('a', True),
        FieldDescriptor('_TempBase__b', False),
        FieldDescriptor('c', True),
    ]

    assert field_value(obj, 'a') is MISSING
    obj.a = 10
    assert field_value(obj, 'a') == 10


def test_plain_fields():
    """Tests instance attributes of both objects are used, and that declared visibility wins"""
    a, b = _TempPlain(), _TempPlain()
    b.extra = 4
    assert record_fields(a, b) == [
        FieldDescriptor('shown', False),
        FieldDescriptor('_hidden', True),
        FieldDescriptor('other', True),
        FieldDescriptor('extra', True),
    ]
    assert field_value(a, 'extra') is MISSING
    assert field_value(b, 'extra') == 4


def test_bad_declaration():
    obj = _TempBadDeclaration()
    with pytest.raises(TypeError):
        record_fields(obj, obj)
