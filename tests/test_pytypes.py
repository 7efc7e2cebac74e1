"""
Tests for the deepequal.pytypes file.
"""

import collections
import functools
import io
import types
import weakref
import numpy as np
from dataclasses import dataclass
from enum import Enum
from deepequal.pytypes import HARD_KINDS, MISSING, Kind, is_dataclass_instance, is_namedtuple, kind_of


class _TempEnum(Enum):
    A = 0
    B = 'thing'


@dataclass
class _TempDataclass:
    x: int = 0


class _TempPlain:
    def __init__(self):
        self.x = 1

    def method(self):
        pass


class _TempSlotted:
    __slots__ = ('x',)


class _TempDeclared:
    __deepequal_fields__ = {}


class _TempCustomEq:
    def __init__(self):
        self.x = 1

    def __eq__(self, other):
        return isinstance(other, _TempCustomEq)


class _TempError(Exception):
    pass


class _TempStringIO(io.StringIO):
    pass


_TempPoint = collections.namedtuple('_TempPoint', ['x', 'y'])


def _check_kinds(kind, *objs):
    for obj in objs:
        assert kind_of(obj) is kind, "Expected %s to be of kind %s, got %s" % (repr(obj), kind, kind_of(obj))


def test_scalars():
    """Tests objects compared with built-in __eq__"""
    _check_kinds(Kind.SCALAR, True, 0, 'a', b'a', bytearray(b'a'), np.int64(3), np.bool_(True),
        _TempEnum.A, int, _TempDataclass, types, None, Ellipsis, NotImplemented, MISSING, object(), {1, 2},
        frozenset(), _TempCustomEq(), ValueError('a'), _TempError(), io.StringIO('a'), _TempStringIO())


def test_floats():
    _check_kinds(Kind.FLOAT, 1.0, float('nan'), np.float16(1), np.float32(1), np.float64(1), complex(1, 1),
        np.complex64(1), np.datetime64('NaT'), np.datetime64('2020-01-01'), np.timedelta64(1, 's'))


def test_containers():
    """Tests arrays, sequences and mappings"""
    _check_kinds(Kind.ARRAY, (), (1, 2), np.zeros(3), np.array(1.0), np.empty(2, dtype=object))
    _check_kinds(Kind.SEQUENCE, [], [1], collections.deque())
    _check_kinds(Kind.MAPPING, {}, collections.OrderedDict(), collections.defaultdict(list),
        types.MappingProxyType({}))


def test_records():
    """Tests dataclasses, namedtuples and plain objects"""
    _check_kinds(Kind.RECORD, _TempDataclass(), _TempPoint(1, 2), _TempPlain(), _TempSlotted(), _TempDeclared())

    assert is_namedtuple(_TempPoint(1, 2))
    assert not is_namedtuple((1, 2))
    assert is_dataclass_instance(_TempDataclass())
    assert not is_dataclass_instance(_TempDataclass)


def test_pointers_and_callables():
    plain = _TempPlain()
    _check_kinds(Kind.POINTER, weakref.ref(plain))
    _check_kinds(Kind.CALLABLE, len, lambda: 0, plain.method, [].append, functools.partial(int), np.add,
        str.upper, object.__init__, plain.__init__)


def test_hard_kinds():
    """Tests which kinds go through the visited-set guard"""
    assert HARD_KINDS == {Kind.ARRAY, Kind.SEQUENCE, Kind.MAPPING, Kind.RECORD}
