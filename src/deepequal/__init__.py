from .equality import (Compare, CompareS, ComparisonDepthError, EqualityCheckingError, EqualityError, Policy, compare,
    compare_s, deep_equal)
from .records import exported_field, private_field

__all__ = ['compare', 'compare_s', 'deep_equal', 'Compare', 'CompareS', 'Policy', 'EqualityError',
    'EqualityCheckingError', 'ComparisonDepthError', 'exported_field', 'private_field']
