"""
Field descriptors for record (struct-like) objects.

A record is compared field by field in declaration order. Each field is either exported (public, compared) or private.
Visibility comes from, in order of precedence:

    1. a ``__deepequal_fields__`` class attribute mapping field names to booleans
    2. dataclass field metadata, see :func:`exported_field` and :func:`private_field`
    3. the naming convention: a name starting with an underscore is private
"""

import dataclasses
from .pytypes import FIELDS_DECLARATION_ATTR, MISSING, is_dataclass_instance, is_namedtuple
from typing import NamedTuple, TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, Dict, Iterator, List


EXPORTED_METADATA_KEY = 'exported'

# Attribute names that show up in __slots__ but are not fields
_NON_FIELD_SLOTS = ('__dict__', '__weakref__')


class FieldDescriptor(NamedTuple):
    """A single record field: its (attribute) name and whether it takes part in comparison"""
    name: str
    exported: bool


def exported_field(**kwargs: 'Any') -> 'Any':
    """dataclasses.field() that is always compared, even if its name starts with an underscore"""
    return _field_with_visibility(True, kwargs)


def private_field(**kwargs: 'Any') -> 'Any':
    """dataclasses.field() that is treated as private, no matter its name"""
    return _field_with_visibility(False, kwargs)


def _field_with_visibility(exported, kwargs):
    metadata = dict(kwargs.pop('metadata', None) or {})
    metadata[EXPORTED_METADATA_KEY] = exported
    return dataclasses.field(metadata=metadata, **kwargs)


def is_exported_name(name: 'str') -> 'bool':
    return not name.startswith('_')


def _declared_visibility(cls) -> 'Dict[str, bool]':
    declared = getattr(cls, FIELDS_DECLARATION_ATTR, None)
    if declared is None:
        return {}
    if not isinstance(declared, dict):
        raise TypeError("`%s.%s` must be a dict of field name to bool, not %s"
            % (cls.__name__, FIELDS_DECLARATION_ATTR, repr(type(declared).__name__)))
    return declared


def _mangle(cls, name):
    """Applies python's private name mangling to slot names like '__x'"""
    if name.startswith('__') and not name.endswith('__'):
        return '_%s%s' % (cls.__name__.lstrip('_'), name)
    return name


def _slot_names(cls) -> 'Iterator[str]':
    """Yields all slot attribute names of cls, base classes first"""
    for c in reversed(cls.__mro__[:-1]):
        slots = vars(c).get('__slots__', ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name not in _NON_FIELD_SLOTS:
                yield _mangle(c, name)


def _field_names(obj: 'Any') -> 'List[str]':
    """Field names of a single record object, in declaration order"""
    if is_namedtuple(obj):
        return list(type(obj)._fields)
    if is_dataclass_instance(obj):
        return [f.name for f in dataclasses.fields(obj)]

    names = list(_slot_names(type(obj)))
    names.extend(k for k in getattr(obj, '__dict__', {}) if k not in names)
    return names


def record_fields(a: 'Any', b: 'Any') -> 'List[FieldDescriptor]':
    """Returns the fields to compare between two records of the same type, in declaration order

    Instance attributes of plain objects can differ between two objects of the same class, so the fields of `a` come
    first, followed by any field only `b` carries.

    Args:
        a (Any): first record
        b (Any): second record, of the same type as `a`

    Returns:
        List[FieldDescriptor]: the field descriptors
    """
    names = _field_names(a)
    names.extend(n for n in _field_names(b) if n not in names)

    declared = _declared_visibility(type(a))
    metadata = {f.name: f.metadata for f in dataclasses.fields(a)} if is_dataclass_instance(a) else {}

    ret = []
    for name in names:
        if name in declared:
            exported = bool(declared[name])
        elif EXPORTED_METADATA_KEY in metadata.get(name, {}):
            exported = bool(metadata[name][EXPORTED_METADATA_KEY])
        else:
            exported = is_exported_name(name)
        ret.append(FieldDescriptor(name, exported))
    return ret


def field_value(obj: 'Any', name: 'str') -> 'Any':
    """Returns the value of the given field, or :data:`~deepequal.pytypes.MISSING` if it is unset/absent"""
    try:
        return getattr(obj, name)
    except AttributeError:
        return MISSING
