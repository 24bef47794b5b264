from scopewire._internal.markers import Named, constructor, inject

__all__ = ["Named", "constructor", "inject"]
