from __future__ import annotations

import datetime
import decimal
import enum
import inspect
import pathlib
import uuid
from dataclasses import dataclass
from typing import Any, TypeGuard

from scopewire._internal.type_checks import is_runtime_class

_NEVER_SELF_BOUND_PACKAGES = frozenset({"builtins", "typing", "collections", "scopewire"})


@dataclass(frozen=True, slots=True)
class SelfBindingPolicy:
    """Decide which unregistered classes a scope may bind to themselves.

    Value-like types (paths, dates, identifiers, enums) are never built
    implicitly: an unregistered ``UUID`` parameter is a missing binding, not
    a fresh random identifier.
    """

    ignored_base_types: tuple[type[Any], ...] = (
        pathlib.PurePath,
        datetime.datetime,
        datetime.date,
        datetime.time,
        datetime.timedelta,
        uuid.UUID,
        decimal.Decimal,
        enum.Enum,
        BaseException,
    )

    def is_self_bindable(self, candidate: object) -> TypeGuard[type[Any]]:
        """Return whether ``candidate`` is a concrete class a scope may build on demand.

        Args:
            candidate: Requested service key.

        """
        if not is_runtime_class(candidate):
            return False
        if candidate.__module__.partition(".")[0] in _NEVER_SELF_BOUND_PACKAGES:
            return False
        if inspect.isabstract(candidate):
            return False
        if getattr(candidate, "_is_protocol", False):
            return False
        if issubclass(candidate, type):
            return False
        return not issubclass(candidate, self.ignored_base_types)


__all__ = ["SelfBindingPolicy"]
