"""
Deep structural equality that explains itself.

:func:`compare` and :func:`compare_s` determine whether two objects are deeply equal and, if they are not, return a
reason describing the first point of divergence found, as a path from the root of the objects:

    >>> compare(Point(1, [0, 1, 2]), Point(1, [0, 1, 4]))
    (False, 'struct.coords [2] scalar values differ')

Handled kinds (see :mod:`deepequal.pytypes`):
    - float, np.floating: NaN is equal to NaN
    - tuple, np.ndarray: compared element-wise
    - list, deque: None and an empty list are NOT equal
    - dict, mappingproxy: values compared at every key of the first mapping
    - records (dataclasses, namedtuples, plain objects): fields compared in declaration order
    - weakref.ref: compared by their referents
    - functions: never equal, unless both are None
    - falls back on built-in __eq__

The two entry points only differ in how private record fields are handled: :func:`compare` fails on the first private
field it meets, while :func:`compare_s` stops comparing that record and reports it as equal.

Self-referencing objects are safe to compare. Every container pair being compared is remembered, and a pair met again
is assumed equal.
"""

import cmath
import logging
import math
import numpy as np
from enum import Enum
from .pytypes import HARD_KINDS, MISSING, Kind, kind_of
from .records import field_value, record_fields
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, Optional, Tuple

    ComparisonResult = Tuple[bool, str]


_LOGGER = logging.getLogger(__name__)

_MAX_STR_LEN = 1000

# numpy dtype kinds that have a NaN value
_NAN_DTYPE_KINDS = 'fcmM'

# Reasons are part of the output contract, keep them stable
REASON_NIL_TYPES = 'nil values are of different types'
REASON_DIFFERENT_TYPES = 'values are of different types'
REASON_DIFFERING_TYPES = 'values are of differing types'
REASON_INVALID = 'invalid values are not equal'
REASON_SCALAR = 'scalar values differ'
REASON_ARRAY_LENGTHS = 'arrays have different lengths'
REASON_ARRAY_SHAPES = 'arrays have different shapes'
REASON_NIL_SLICE = 'one slice is nil, the other is not'
REASON_SLICE_LENGTHS = 'slices have different lengths'
REASON_NIL_INTERFACE = 'both interfaces must be nil'
REASON_NIL_MAP = 'one map is nil, one is not'
REASON_MAP_LENGTHS = 'maps have different lengths'
REASON_FUNCTIONS = 'non-nil functions never compare equal'
REASON_UNEXPORTED = 'unexported'

_EQUAL = (True, '')


class Policy(Enum):
    """How private record fields are treated"""
    STRICT = 'strict'           # Fail on the first private field
    PERMISSIVE = 'permissive'   # Stop comparing a record at its first private field and report it equal


def compare(a: 'Any', b: 'Any', raise_err: 'bool' = False, max_depth: 'Optional[int]' = None) -> 'ComparisonResult':
    """
    Tests for deep equality, failing on private fields.

    Uses normal '==' equality where possible but scans elements of tuples, arrays, lists, mappings and fields of
    records. Functions are equal only if they are both None. An empty list is not equal to None.

    If a private record field is found, returns ``(False, 'struct.NAME unexported')``.

    Args:
        a (Any): object to check equality
        b (Any): object to check equality
        raise_err (bool): if True, then an ``EqualityError`` will be raised whenever `a` and `b` are unequal, with the
            reason in its message. Defaults to False.
        max_depth (Optional[int]): if not None, the maximum recursion depth to descend to before raising a
            ``ComparisonDepthError``. Defaults to None.

    Returns:
        Tuple[bool, str]: whether the objects are equal, and the reason they are not ('' if they are equal)
    """
    return deep_equal(a, b, policy=Policy.STRICT, raise_err=raise_err, max_depth=max_depth)


def compare_s(a: 'Any', b: 'Any', raise_err: 'bool' = False, max_depth: 'Optional[int]' = None) -> 'ComparisonResult':
    """
    Tests for deep equality, stopping at private fields.

    Same as :func:`compare`, except that a private record field ends the comparison of the record holding it: the
    record is considered equal and its remaining fields are never looked at. Only fields declared before the first
    private one can make two records unequal.
    """
    return deep_equal(a, b, policy=Policy.PERMISSIVE, raise_err=raise_err, max_depth=max_depth)


# Aliases matching the names other language bindings use
Compare = compare
CompareS = compare_s


def deep_equal(a: 'Any', b: 'Any', policy: 'Policy' = Policy.STRICT, raise_err: 'bool' = False,
    max_depth: 'Optional[int]' = None) -> 'ComparisonResult':
    """
    Shared entry point of :func:`compare` and :func:`compare_s`.

    Args:
        a (Any): object to check equality
        b (Any): object to check equality
        policy (Policy): how private record fields are treated. Defaults to Policy.STRICT.
        raise_err (bool): if True, raise an ``EqualityError`` instead of returning an unequal result. Defaults to False.
        max_depth (Optional[int]): maximum recursion depth, or None for no limit. Defaults to None.

    Returns:
        Tuple[bool, str]: whether the objects are equal, and the reason they are not ('' if they are equal)
    """
    if not isinstance(policy, Policy):
        raise TypeError("`policy` must be a Policy, not %s" % repr(type(policy).__name__))
    if max_depth is not None and (isinstance(max_depth, bool) or not isinstance(max_depth, int) or max_depth < 0):
        raise ValueError("`max_depth` must be None or a non-negative int: %s" % repr(max_depth))

    _LOGGER.debug("Comparing %s and %s objects with policy=%s", type(a).__name__, type(b).__name__, policy.value)

    if a is None or b is None:
        result = _EQUAL if a is b else (False, REASON_NIL_TYPES)
    elif type(a) is not type(b):
        result = (False, REASON_DIFFERENT_TYPES)
    else:
        try:
            result = _deep_value_equal(a, b, {}, 0, policy, max_depth)
        except RecursionError as e:
            raise ComparisonDepthError("%s objects are nested too deeply to compare" % repr(type(a).__name__)) from e

    if not result[0]:
        _LOGGER.debug("Objects are not equal: %s", result[1])
        if raise_err:
            raise EqualityError(a, b, result[1])
    return result


def _deep_value_equal(a, b, visited, depth, policy, max_depth) -> 'ComparisonResult':
    """
    Recursive comparison. `visited` tracks the container pairs whose comparison is in progress (or done), and the
    comparison assumes all of those are equal when it meets them again.
    """
    if max_depth is not None and depth > max_depth:
        raise ComparisonDepthError("Maximum comparison depth of %d exceeded" % max_depth)

    if a is MISSING or b is MISSING:
        return _EQUAL if a is b else (False, REASON_INVALID)

    # None is the absent value of every kind
    if a is None or b is None:
        return _EQUAL if a is b else (False, _nil_reason(a if b is None else b))

    if type(a) is not type(b):
        return False, REASON_DIFFERING_TYPES

    kind = kind_of(a)

    if kind in HARD_KINDS:
        if a is b:
            return _EQUAL

        id_a, id_b = id(a), id(b)
        if id_a > id_b:
            # Canonicalize order to reduce number of entries in visited
            id_a, id_b = id_b, id_a
        key = (id_a, id_b, type(a))
        if key in visited:
            return _EQUAL

        # Keeping both objects alive keeps their ids from being reused during this comparison
        visited[key] = (a, b)

    if kind is Kind.FLOAT:
        if (_is_nan(a) and _is_nan(b)) or a == b:
            return _EQUAL
        return False, REASON_SCALAR

    elif kind is Kind.ARRAY:
        if isinstance(a, np.ndarray):
            return _ndarray_equal(a, b, visited, depth, policy, max_depth)
        if len(a) != len(b):
            return False, REASON_ARRAY_LENGTHS
        return _elements_equal(a, b, visited, depth, policy, max_depth)

    elif kind is Kind.SEQUENCE:
        if len(a) != len(b):
            return False, REASON_SLICE_LENGTHS
        return _elements_equal(a, b, visited, depth, policy, max_depth)

    elif kind is Kind.POINTER:
        return _deep_value_equal(a(), b(), visited, depth + 1, policy, max_depth)

    elif kind is Kind.RECORD:
        return _record_equal(a, b, visited, depth, policy, max_depth)

    elif kind is Kind.MAPPING:
        if len(a) != len(b):
            return False, REASON_MAP_LENGTHS
        for k in a:
            equal, reason = _deep_value_equal(a[k], b.get(k, MISSING), visited, depth + 1, policy, max_depth)
            if not equal:
                return False, '[%s] %s' % (str(k), reason)
        return _EQUAL

    elif kind is Kind.CALLABLE:
        # Can't do better than this
        return False, REASON_FUNCTIONS

    try:
        equal = bool(a == b)
    except RecursionError:
        raise
    except Exception as e:
        raise EqualityCheckingError("Could not determine equality between objects using built-in __eq__\na: %s\nb: %s"
            % (_limit_str(a), _limit_str(b))) from e
    return _EQUAL if equal else (False, REASON_SCALAR)


def _is_nan(value: 'Any') -> 'bool':
    """NaN check for every FLOAT kind type: NaT for numpy datetimes, either part being NaN for complex numbers"""
    if isinstance(value, (np.datetime64, np.timedelta64)):
        return bool(np.isnat(value))
    if isinstance(value, (complex, np.complexfloating)):
        return cmath.isnan(value)
    return math.isnan(value)


def _nil_reason(present: 'Any') -> 'str':
    """Reason for a None facing a present value, which depends on the kind of the present value"""
    kind = kind_of(present)
    if kind is Kind.SEQUENCE:
        return REASON_NIL_SLICE
    if kind is Kind.MAPPING:
        return REASON_NIL_MAP
    if kind is Kind.CALLABLE:
        return REASON_FUNCTIONS
    return REASON_NIL_INTERFACE


def _elements_equal(a, b, visited, depth, policy, max_depth) -> 'ComparisonResult':
    """Element-wise comparison of two equal-length sequences"""
    for i, (_checking_a, _checking_b) in enumerate(zip(a, b)):
        equal, reason = _deep_value_equal(_checking_a, _checking_b, visited, depth + 1, policy, max_depth)
        if not equal:
            return False, '[%d] %s' % (i, reason)
    return _EQUAL


def _record_equal(a, b, visited, depth, policy, max_depth) -> 'ComparisonResult':
    """Field-wise comparison of two records. The first private field ends the comparison, whatever the policy."""
    try:
        fields = record_fields(a, b)
    except TypeError as e:
        raise EqualityCheckingError("Could not determine the fields of %s objects" % repr(type(a).__name__)) from e

    for field in fields:
        if not field.exported:
            if policy is Policy.PERMISSIVE:
                return _EQUAL
            return False, 'struct.%s %s' % (field.name, REASON_UNEXPORTED)

        try:
            _checking_a, _checking_b = field_value(a, field.name), field_value(b, field.name)
        except RecursionError:
            raise
        except Exception as e:
            raise EqualityCheckingError("Could not read field %s of %s objects"
                % (repr(field.name), repr(type(a).__name__))) from e

        equal, reason = _deep_value_equal(_checking_a, _checking_b, visited, depth + 1, policy, max_depth)
        if not equal:
            return False, 'struct.%s %s' % (field.name, reason)
    return _EQUAL


def _ndarray_equal(a, b, visited, depth, policy, max_depth) -> 'ComparisonResult':
    """Compares two numpy arrays. Numeric arrays are compared all at once, object arrays element by element."""
    if a.dtype != b.dtype:
        return False, REASON_DIFFERING_TYPES
    if a.shape != b.shape:
        return False, REASON_ARRAY_SHAPES

    if a.dtype.kind == 'O':
        for idx in np.ndindex(a.shape):
            equal, reason = _deep_value_equal(a[idx], b[idx], visited, depth + 1, policy, max_depth)
            if not equal:
                return False, _prefix_index(idx, reason)
        return _EQUAL

    try:
        diff = np.asarray(a != b)
        if a.dtype.kind in _NAN_DTYPE_KINDS:
            diff &= ~(np.isnan(a) & np.isnan(b))
    except Exception as e:
        raise EqualityCheckingError("Could not compare numpy arrays of dtype %s" % a.dtype) from e

    if not diff.any():
        return _EQUAL
    idx = tuple(int(i) for i in np.argwhere(diff)[0])
    return False, _prefix_index(idx, REASON_SCALAR)


def _prefix_index(idx: 'Tuple[int, ...]', reason: 'str') -> 'str':
    """Prefixes an n-dimensional array index to the reason. 0-d arrays have no index to show."""
    if len(idx) == 0:
        return reason
    return '[%s] %s' % (', '.join(str(i) for i in idx), reason)


def _limit_str(a, limit=_MAX_STR_LEN):
    a_str = repr(a)
    return a_str if len(a_str) < limit else (a_str[:limit] + '...')


class EqualityError(Exception):
    """Error raised whenever a :func:`~deepequal.equality.compare` check is unequal and `raise_err=True`"""

    def __init__(self, a, b, message=None):
        message = "Values are not equal" if message is None else message
        self.reason = message
        super().__init__("Object a (%s) is not equal to object b (%s)\na: %s\nb: %s\nReason: %s" % \
            (repr(type(a).__name__), repr(type(b).__name__), _limit_str(a), _limit_str(b), message))


class EqualityCheckingError(Exception):
    """Error raised whenever there is an unexpected problem attempting to check equality between two objects"""


class ComparisonDepthError(EqualityCheckingError):
    """Error raised when objects are nested deeper than the comparison is allowed to descend"""
