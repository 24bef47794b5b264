from __future__ import annotations

from enum import Enum


class Lifetime(str, Enum):
    """Define how long an instance produced by a binding is reused."""

    TRANSIENT = "transient"
    """A new instance is created every time the binding is resolved."""

    SINGLETON = "singleton"
    """One instance per binding, kept by the scope that owns the binding until it is disposed."""
