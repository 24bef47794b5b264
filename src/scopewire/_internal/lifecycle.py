from __future__ import annotations

from abc import ABC, abstractmethod


class Initializable(ABC):
    """Instances notified once their dependencies are injected.

    ``initialize`` runs after constructor and method injection, at most once
    per instance across a whole scope tree.
    """

    @abstractmethod
    def initialize(self) -> None:
        """Finish setting up the instance."""


class Disposable(ABC):
    """Instances notified when the scope that cached them releases them.

    Only cached (singleton) instances are deactivated: on ``release`` or when
    the owning scope is disposed.
    """

    @abstractmethod
    def dispose(self) -> None:
        """Release resources held by the instance."""


__all__ = ["Disposable", "Initializable"]
