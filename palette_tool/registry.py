"""Technique registry.

A technique is any module in palette_tool/techniques/ exposing a module-level
`technique` (a core.types.Technique). Modules are found with pkgutil, so a
new technique only needs a new file.
"""

import importlib
import pkgutil

from palette_tool.core.types import Technique

_registry: dict[str, Technique] = {}


def _module_names() -> list[str]:
    import palette_tool.techniques as package

    return [name for _finder, name, _ispkg in pkgutil.iter_modules(package.__path__) if not name.startswith('_')]


def discover() -> dict[str, Technique]:
    """Import every technique module once and return name -> Technique."""
    if not _registry:
        for name in _module_names():
            found = getattr(importlib.import_module(f'palette_tool.techniques.{name}'), 'technique', None)
            if isinstance(found, Technique):
                _registry[found.name] = found
    return _registry


def get(name: str) -> Technique:
    techniques = discover()
    try:
        return techniques[name]
    except KeyError:
        raise KeyError(f'Unknown technique: {name}. Available: {", ".join(sorted(techniques))}') from None


def all_techniques() -> dict[str, Technique]:
    return discover()
