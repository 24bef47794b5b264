from __future__ import annotations

import logging
import sys
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from scopewire._internal.components import ScopeComponent
from scopewire._internal.markers import has_constructor_marker, has_inject_marker
from scopewire._internal.targets import Target, TargetExtractor
from scopewire.exceptions import describe_service

if TYPE_CHECKING:
    from scopewire._internal.activation import Context
    from scopewire._internal.scope import ScopeBase

logger = logging.getLogger(__name__)

INJECT_SCORE = sys.maxsize
"""Score of candidates carrying the ``@inject`` marker."""
UNSATISFIABLE_PENALTY = -sys.maxsize - 1


@dataclass(frozen=True, slots=True)
class ConstructorCandidate:
    """One way of building ``implementation``: ``__init__`` or a ``@constructor`` classmethod."""

    implementation: type[Any]
    factory: Callable[..., Any]
    targets: tuple[Target, ...]
    has_inject_marker: bool
    order: int
    name: str = "__init__"


@dataclass(frozen=True, slots=True)
class InjectionMethod:
    """Instance method marked with ``@inject``, called after construction."""

    name: str
    targets: tuple[Target, ...]


class Selector(ScopeComponent):
    """Discover constructor candidates and injection methods of classes.

    Discovery results are cached per class; the cache is read and written
    under a lock and discovery itself runs outside it.
    """

    def __init__(self, scope: ScopeBase) -> None:
        super().__init__(scope)
        self._extractor = TargetExtractor()
        self._lock = threading.Lock()
        self._constructors: dict[type[Any], tuple[ConstructorCandidate, ...]] = {}
        self._methods: dict[type[Any], tuple[InjectionMethod, ...]] = {}

    def select_constructors(self, implementation: type[Any]) -> tuple[ConstructorCandidate, ...]:
        """Return constructor candidates of ``implementation`` in declaration order.

        ``__init__`` always comes first, followed by ``@constructor``
        classmethods from the class and its bases.

        Args:
            implementation: Class to inspect.

        """
        with self._lock:
            cached = self._constructors.get(implementation)
        if cached is not None:
            return cached
        candidates = tuple(self._discover_constructors(implementation))
        with self._lock:
            return self._constructors.setdefault(implementation, candidates)

    def select_injection_methods(self, implementation: type[Any]) -> tuple[InjectionMethod, ...]:
        """Return ``@inject`` instance methods of ``implementation``.

        Args:
            implementation: Class to inspect.

        """
        with self._lock:
            cached = self._methods.get(implementation)
        if cached is not None:
            return cached
        methods = tuple(self._discover_methods(implementation))
        with self._lock:
            return self._methods.setdefault(implementation, methods)

    def dispose(self) -> None:
        with self._lock:
            self._constructors.clear()
            self._methods.clear()

    def _discover_constructors(self, implementation: type[Any]) -> list[ConstructorCandidate]:
        init = getattr(implementation, "__init__", None)
        hints_sources: tuple[Callable[..., Any], ...] = (init,) if callable(init) else ()
        candidates = [
            ConstructorCandidate(
                implementation=implementation,
                factory=implementation,
                targets=self._extractor.extract(implementation, hints_sources=hints_sources),
                has_inject_marker=has_inject_marker(init),
                order=0,
            ),
        ]
        seen: set[str] = set()
        for klass in implementation.__mro__:
            for name, attribute in vars(klass).items():
                if name in seen or not isinstance(attribute, classmethod):
                    continue
                seen.add(name)
                if not has_constructor_marker(attribute.__func__):
                    continue
                factory = getattr(implementation, name)
                candidates.append(
                    ConstructorCandidate(
                        implementation=implementation,
                        factory=factory,
                        targets=self._extractor.extract(
                            factory,
                            hints_sources=(attribute.__func__,),
                        ),
                        has_inject_marker=has_inject_marker(attribute.__func__),
                        order=len(candidates),
                        name=name,
                    ),
                )
        return candidates

    def _discover_methods(self, implementation: type[Any]) -> list[InjectionMethod]:
        methods: list[InjectionMethod] = []
        seen: set[str] = {"__init__"}
        for klass in implementation.__mro__:
            for name, attribute in vars(klass).items():
                if name in seen:
                    continue
                seen.add(name)
                if not callable(attribute) or isinstance(attribute, (classmethod, staticmethod)):
                    continue
                if not has_inject_marker(attribute):
                    continue
                # Drop ``self``: the method is called bound to the instance.
                targets = self._extractor.extract(attribute)[1:]
                methods.append(InjectionMethod(name=name, targets=targets))
        return methods


class ConstructorScorer(ScopeComponent, ABC):
    """Rank constructor candidates for an activation context."""

    @abstractmethod
    def score(self, context: Context, candidate: ConstructorCandidate) -> int:
        """Return the score of ``candidate``; higher wins."""


class StandardConstructorScorer(ConstructorScorer):
    """Prefer the candidate with the most satisfiable parameters.

    ``@inject`` candidates score the maximum. Otherwise the score starts at
    one and grows by one per parameter; the first parameter that is neither
    supplied by an argument nor backed by an explicit binding or a default
    value pushes the score below every candidate without such a parameter.
    """

    def score(self, context: Context, candidate: ConstructorCandidate) -> int:
        if candidate.has_inject_marker:
            return INJECT_SCORE
        score = 1
        for target in candidate.targets:
            if self.argument_exists(context, target):
                score += 1
                continue
            if self.binding_exists(context, target):
                score += 1
                continue
            score += 1
            if score > 0:
                score += UNSATISFIABLE_PENALTY
        return score

    def argument_exists(self, context: Context, target: Target) -> bool:
        return context.can_supply(target)

    def binding_exists(self, context: Context, target: Target) -> bool:
        return self.binding_exists_in(context.scope, target)

    def binding_exists_in(self, scope: ScopeBase, target: Target) -> bool:
        if target.has_default:
            return True
        if not target.has_service:
            return False
        return scope.has_explicit_binding(target.element_service)


class ChildScopeConstructorScorer(StandardConstructorScorer):
    """Count explicit bindings declared anywhere up the chain of parent scopes.

    A parameter backed only by a parent's binding is as satisfiable as one
    backed locally, since resolution falls back to the parent.
    """

    def binding_exists(self, context: Context, target: Target) -> bool:
        scope: ScopeBase | None = context.scope
        while scope is not None:
            if self.binding_exists_in(scope, target):
                return True
            scope = scope.parent_scope
        return False


def select_constructor(
    context: Context,
    candidates: Sequence[ConstructorCandidate],
    scorer: ConstructorScorer,
) -> ConstructorCandidate:
    """Return the best scoring candidate; ties go to the earliest declared one."""
    best = candidates[0]
    best_score = scorer.score(context, best)
    for candidate in candidates[1:]:
        score = scorer.score(context, candidate)
        if score > best_score:
            best, best_score = candidate, score
    if len(candidates) > 1:
        logger.debug(
            "Selected constructor %s.%s (score=%s)",
            describe_service(best.implementation),
            best.name,
            best_score,
        )
    return best


__all__ = [
    "INJECT_SCORE",
    "ChildScopeConstructorScorer",
    "ConstructorCandidate",
    "ConstructorScorer",
    "InjectionMethod",
    "Selector",
    "StandardConstructorScorer",
    "select_constructor",
]
