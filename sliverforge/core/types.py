"""Type definitions for sliverforge operations.

This module defines enums for policy parameters and result kinds used
throughout the library.
"""

from enum import Enum
from typing import Type, TypeVar, Union

E = TypeVar('E', bound=Enum)

# Feature identifier meaning "no identifier".
NO_FID = -1


class MergePolicy(Enum):
    """Policy for choosing the neighbour an eliminated polygon merges into.

    Every policy breaks ties the same way: among neighbours sharing the
    extreme value, the one discovered first wins.

    Attributes:
        LARGEST_AREA: Merge into the touching neighbour with the greatest area (default)
        SMALLEST_AREA: Merge into the touching neighbour with the least area
        LONGEST_BOUNDARY: Merge into the neighbour sharing the longest boundary

    Examples:
        >>> from sliverforge import eliminate_records, MergePolicy
        >>> result = eliminate_records(records, fids, policy=MergePolicy.LONGEST_BOUNDARY)
    """
    LARGEST_AREA = 'largest_area'
    SMALLEST_AREA = 'smallest_area'
    LONGEST_BOUNDARY = 'longest_boundary'


class ErrorKind(Enum):
    """Outcome of a complete elimination run.

    Attributes:
        NONE: Success (per-feature problems are reported as warnings only)
        UNSUPPORTED_OPERATION: Layer or kernel cannot support the operation,
            e.g. missing or multiple geometry columns
        FAILURE: Configuration, I/O or driver error
    """
    NONE = 'none'
    UNSUPPORTED_OPERATION = 'unsupported_operation'
    FAILURE = 'failure'


def coerce_enum(value: Union[E, str], enum_type: Type[E]) -> E:
    """Return ``value`` as a member of ``enum_type``.

    Accepts enum members, member values (``"largest_area"``) and member
    names (``"LARGEST_AREA"``).

    Raises:
        ValueError: If ``value`` does not name a member of ``enum_type``
    """
    if isinstance(value, enum_type):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower().replace('-', '_')
        for member in enum_type:
            if member.value == normalized or member.name.lower() == normalized:
                return member
    choices = ', '.join(repr(m.value) for m in enum_type)
    raise ValueError(f"Unknown {enum_type.__name__}: {value!r} (expected one of {choices})")


__all__ = [
    'NO_FID',
    'MergePolicy',
    'ErrorKind',
    'coerce_enum',
]
