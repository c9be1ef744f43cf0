from __future__ import annotations
from typing import Dict, Type, Callable
from importlib import import_module

class AppRegistry:
    """Maps a Dify app type name ("chat", "workflow", ...) to its client class."""
    _classes: Dict[str, Type] = {}

    @classmethod
    def register(cls, name: str) -> Callable[[Type], Type]:
        name = name.lower()
        def deco(klass: Type) -> Type:
            cls._classes[name] = klass
            return klass
        return deco

    @classmethod
    def get(cls, name: str) -> Type:
        key = name.lower()
        if key not in cls._classes:
            raise KeyError(f"App type '{name}' not registered")
        return cls._classes[key]

    @classmethod
    def names(cls) -> list[str]:
        return sorted(cls._classes)

    @classmethod
    def ensure_imports(cls) -> None:
        """
        Import built-in app clients so their @register decorators run.
        Call once at bootstrap before get().
        """
        import_module("dify_dispatch.apps.chat")
        import_module("dify_dispatch.apps.completion")
        import_module("dify_dispatch.apps.workflow")
        import_module("dify_dispatch.apps.knowledge")
