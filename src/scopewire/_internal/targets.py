from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from inspect import Parameter
from typing import Any, get_type_hints

from scopewire._internal.markers import split_annotated
from scopewire._internal.type_checks import sequence_element_type, strip_optional

MISSING: Any = Parameter.empty
"""Sentinel for parameters without annotation or default value."""

_VARIADIC_KINDS = (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)


@dataclass(frozen=True, slots=True)
class Target:
    """Describe one injectable parameter of a constructor, factory, or method."""

    name: str
    service: Any
    """Dependency key with ``Optional``/``Annotated`` wrappers removed."""
    kind: Any
    """The ``inspect.Parameter`` kind, used to pass positional-only arguments."""
    default: Any = MISSING
    binding_name: str | None = None
    """Value of a ``Named`` marker found in ``Annotated`` metadata."""
    sequence_origin: Any = None
    """Collection origin (``list``, ``tuple``, ...) when ``service`` is a sequence."""
    element_service: Any = MISSING
    """Element type for sequences, otherwise the same as ``service``."""
    is_optional: bool = False
    """Whether the annotation admits ``None`` (``T | None``, ``Optional[T]``)."""

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    @property
    def is_sequence(self) -> bool:
        return self.sequence_origin is not None

    @property
    def has_service(self) -> bool:
        return self.service is not MISSING


@dataclass(slots=True)
class TargetExtractor:
    """Build ``Target`` descriptions from callable signatures and type hints."""

    def extract(
        self,
        provider: Callable[..., Any],
        *,
        hints_sources: tuple[Callable[..., Any], ...] = (),
    ) -> tuple[Target, ...]:
        """Return injection targets for every non-variadic parameter of ``provider``.

        Args:
            provider: Callable whose signature describes the parameters. Bound
                methods and classes already exclude ``self``/``cls``.
            hints_sources: Callables to read type hints from, in priority
                order, when they differ from ``provider`` (for example the
                ``__init__`` of a class followed by the class itself).

        """
        annotations: dict[str, Any] = {}
        for source in hints_sources or (provider,):
            for parameter_name, annotation in self._resolved_type_hints(source).items():
                annotations.setdefault(parameter_name, annotation)
        targets: list[Target] = []
        for parameter in self._parameters(provider):
            annotation = annotations.get(parameter.name, MISSING)
            if annotation is MISSING:
                raw_annotation = parameter.annotation
                if raw_annotation is not Parameter.empty and not isinstance(raw_annotation, str):
                    annotation = raw_annotation
            targets.append(self._build_target(parameter, annotation))
        return tuple(targets)

    def _build_target(self, parameter: Parameter, annotation: Any) -> Target:
        if annotation is MISSING:
            return Target(
                name=parameter.name,
                service=MISSING,
                kind=parameter.kind,
                default=parameter.default,
            )

        unwrapped = strip_optional(annotation)
        annotated, binding_name = split_annotated(unwrapped)
        service = strip_optional(annotated)
        is_optional = unwrapped is not annotation or service is not annotated
        sequence = sequence_element_type(service)
        if sequence is None:
            return Target(
                name=parameter.name,
                service=service,
                kind=parameter.kind,
                default=parameter.default,
                binding_name=binding_name,
                element_service=service,
                is_optional=is_optional,
            )

        origin, element = sequence
        element, element_name = split_annotated(element)
        return Target(
            name=parameter.name,
            service=service,
            kind=parameter.kind,
            default=parameter.default,
            binding_name=element_name or binding_name,
            sequence_origin=origin,
            element_service=element,
            is_optional=is_optional,
        )

    def _parameters(self, provider: Callable[..., Any]) -> tuple[Parameter, ...]:
        try:
            parameters = tuple(inspect.signature(provider).parameters.values())
        except (TypeError, ValueError):
            return ()
        return tuple(parameter for parameter in parameters if parameter.kind not in _VARIADIC_KINDS)

    def _resolved_type_hints(self, provider: Callable[..., Any]) -> dict[str, Any]:
        try:
            return get_type_hints(provider, include_extras=True)
        except (AttributeError, NameError, TypeError):
            return {}


__all__ = ["MISSING", "Target", "TargetExtractor"]
