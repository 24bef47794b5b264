from __future__ import annotations

from collections.abc import Callable
from typing import Annotated, Any, NamedTuple, TypeVar, get_args, get_origin

F = TypeVar("F", bound=Callable[..., Any])

INJECT_MARKER_ATTR = "__scopewire_inject__"
CONSTRUCTOR_MARKER_ATTR = "__scopewire_constructor__"
_ANNOTATED_MARKER_MIN_ARGS = 2


class Named(NamedTuple):
    """Constrain a constructor parameter to bindings registered under a name.

    Attach ``Named`` metadata to ``typing.Annotated``; the parameter is then
    resolved with a request that only matches bindings added with the same
    ``name``.

    Examples:
        .. code-block:: python

            class Report:
                def __init__(self, db: Annotated[Database, Named("replica")]) -> None:
                    self.db = db

    """

    value: str


def inject(func: F) -> F:
    """Mark a constructor as preferred, or a method for method injection.

    On ``__init__`` or on a ``@constructor`` classmethod the marker gives the
    candidate the highest possible score. On a regular method, the method is
    called with resolved arguments right after the instance is built.

    Args:
        func: Function to mark.

    Returns:
        The same function.

    """
    target = func.__func__ if isinstance(func, classmethod) else func
    setattr(target, INJECT_MARKER_ATTR, True)
    return func


def constructor(func: Any) -> classmethod[Any, Any, Any]:
    """Declare a classmethod as an alternative constructor candidate.

    Candidates are scored together with ``__init__``; the one with the most
    satisfiable parameters wins and ties go to the earliest declaration.

    Args:
        func: Plain function or ``classmethod`` object returning an instance
            of the owning class.

    Returns:
        A ``classmethod`` wrapping ``func``.

    Examples:
        .. code-block:: python

            class Baz:
                def __init__(self) -> None:
                    self.bar = None

                @constructor
                def with_bar(cls, bar: Bar) -> Baz:
                    instance = cls()
                    instance.bar = bar
                    return instance

    """
    method = func if isinstance(func, classmethod) else classmethod(func)
    setattr(method.__func__, CONSTRUCTOR_MARKER_ATTR, True)
    return method


def has_inject_marker(func: object) -> bool:
    return bool(getattr(func, INJECT_MARKER_ATTR, False))


def has_constructor_marker(func: object) -> bool:
    return bool(getattr(func, CONSTRUCTOR_MARKER_ATTR, False))


def split_annotated(annotation: Any) -> tuple[Any, str | None]:
    """Strip ``Annotated`` metadata and return the base key plus a ``Named`` value."""
    if get_origin(annotation) is not Annotated:
        return annotation, None
    args = get_args(annotation)
    if len(args) < _ANNOTATED_MARKER_MIN_ARGS:
        return annotation, None
    name: str | None = None
    for metadata in args[1:]:
        if isinstance(metadata, Named):
            name = metadata.value
    return args[0], name


__all__ = [
    "Named",
    "constructor",
    "has_constructor_marker",
    "has_inject_marker",
    "inject",
    "split_annotated",
]
