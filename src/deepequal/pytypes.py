"""
Python types and the shape classification used by the comparator.

Every runtime value is mapped to exactly one :class:`Kind`. The comparator dispatches on the kind, never on ad-hoc
isinstance() chains, so adding a supported type only means teaching :func:`kind_of` about it.

Kinds:
    - FLOAT: float, complex, np.floating, np.complexfloating, np.datetime64, np.timedelta64 (NaN compares equal to
      NaN, NaT to NaT)
    - ARRAY: tuple, np.ndarray (fixed-size containers)
    - SEQUENCE: list, collections.deque (variable-size containers)
    - MAPPING: dict, types.MappingProxyType
    - RECORD: dataclass instances, namedtuples, and plain objects without a custom __eq__
    - POINTER: weakref.ref
    - CALLABLE: functions, methods, builtins, functools.partial
    - SCALAR: everything else, compared with '=='
"""

import collections
import dataclasses
import functools
import types
import weakref
import numpy as np
from enum import Enum
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any


SingletonObjects = (None, Ellipsis, NotImplemented)

CallableTypes = (types.FunctionType, types.BuiltinFunctionType, types.MethodType, types.BuiltinMethodType,
    types.MethodWrapperType, types.WrapperDescriptorType, types.MethodDescriptorType, functools.partial, np.ufunc)
MappingTypes = (dict, types.MappingProxyType)
SequenceTypes = (list, collections.deque)
FloatTypes = (float, complex, np.floating, np.complexfloating, np.datetime64, np.timedelta64)

# Name of the class attribute a record can use to declare field visibility explicitly: {field_name: exported_bool}
FIELDS_DECLARATION_ATTR = '__deepequal_fields__'

# Py_TPFLAGS_HEAPTYPE: set on classes created by class statements, unset on C types
_HEAPTYPE_FLAG = 1 << 9


class _MissingType:
    """Type of the :data:`MISSING` sentinel"""
    def __repr__(self):
        return 'MISSING'


# Stands in for a value that does not exist at all: a key absent from a mapping, an unset slot, an attribute only one
# of two records carries
MISSING = _MissingType()


class Kind(Enum):
    SCALAR = 'scalar'
    FLOAT = 'float'
    ARRAY = 'array'
    SEQUENCE = 'sequence'
    MAPPING = 'mapping'
    RECORD = 'record'
    POINTER = 'pointer'
    CALLABLE = 'callable'


# Kinds that are structurally descended into and therefore go through the visited-set guard
HARD_KINDS = frozenset((Kind.ARRAY, Kind.SEQUENCE, Kind.MAPPING, Kind.RECORD))


def is_namedtuple(obj: 'Any') -> 'bool':
    """True if obj is an instance of a collections.namedtuple()/typing.NamedTuple class"""
    return isinstance(obj, tuple) and isinstance(getattr(type(obj), '_fields', None), tuple)


def is_dataclass_instance(obj: 'Any') -> 'bool':
    return dataclasses.is_dataclass(obj) and not isinstance(obj, type)


def _is_python_class(cls) -> 'bool':
    """True if cls and all of its bases but object are defined in python, so all of their state is in attributes"""
    return all(c.__flags__ & _HEAPTYPE_FLAG for c in cls.__mro__[:-1])


def _is_plain_record(obj: 'Any') -> 'bool':
    """Plain instances are records only if they rely on identity equality and actually carry attributes"""
    cls = type(obj)
    if cls.__eq__ is not object.__eq__:
        return False
    if issubclass(cls, BaseException) or not _is_python_class(cls):
        return False
    if hasattr(cls, FIELDS_DECLARATION_ATTR):
        return True
    return hasattr(obj, '__dict__') or any('__slots__' in vars(c) for c in cls.__mro__[:-1])


def kind_of(obj: 'Any') -> 'Kind':
    """Returns the comparator :class:`Kind` of the given object

    The order of the checks matters: bools/enums/numpy scalars must be caught as scalars before anything that would
    otherwise look like a record, and namedtuples must be caught before plain tuples.

    Args:
        obj (Any): the object to classify. None is classified as a SCALAR, the comparator handles it separately.

    Returns:
        Kind: the kind of the object
    """
    if isinstance(obj, FloatTypes):
        return Kind.FLOAT
    if isinstance(obj, (bool, int, str, bytes, bytearray, Enum, np.generic, type, types.ModuleType)) \
            or any(obj is x for x in SingletonObjects) or obj is MISSING:
        return Kind.SCALAR
    if isinstance(obj, CallableTypes):
        return Kind.CALLABLE
    if isinstance(obj, weakref.ReferenceType):
        return Kind.POINTER
    if is_namedtuple(obj):
        return Kind.RECORD
    if isinstance(obj, (tuple, np.ndarray)):
        return Kind.ARRAY
    if isinstance(obj, SequenceTypes):
        return Kind.SEQUENCE
    if isinstance(obj, MappingTypes):
        return Kind.MAPPING
    if is_dataclass_instance(obj) or _is_plain_record(obj):
        return Kind.RECORD
    return Kind.SCALAR
