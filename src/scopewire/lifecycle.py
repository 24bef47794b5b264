from scopewire._internal.lifecycle import Disposable, Initializable

__all__ = ["Disposable", "Initializable"]
