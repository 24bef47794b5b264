from __future__ import annotations

import collections.abc
import types
from typing import Any, TypeGuard, Union, get_args, get_origin

_SEQUENCE_ORIGINS: tuple[Any, ...] = (
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Iterable,
    collections.abc.Collection,
    collections.abc.Set,
)
_VARIADIC_TUPLE_ARGS = 2


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def strip_optional(annotation: Any) -> Any:
    """Return ``T`` for ``T | None`` / ``Optional[T]``; other annotations pass through."""
    origin = get_origin(annotation)
    if origin is not Union and origin is not types.UnionType:
        return annotation
    members = [arg for arg in get_args(annotation) if arg is not type(None)]
    if len(members) == 1:
        return members[0]
    return annotation


def sequence_element_type(annotation: Any) -> tuple[Any, Any] | None:
    """Return ``(container_origin, element_type)`` for homogeneous sequence annotations.

    ``list[T]``, ``tuple[T, ...]``, ``Sequence[T]`` and similar collection
    annotations unwrap to ``T``. Fixed-length tuples and bare collections
    return ``None``.

    Args:
        annotation: Parameter annotation to inspect.

    """
    origin = get_origin(annotation)
    if origin not in _SEQUENCE_ORIGINS:
        return None
    args = get_args(annotation)
    if origin is tuple:
        if len(args) == _VARIADIC_TUPLE_ARGS and args[1] is Ellipsis:
            return origin, args[0]
        return None
    if len(args) != 1:
        return None
    return origin, args[0]


__all__ = ["is_runtime_class", "sequence_element_type", "strip_optional"]
