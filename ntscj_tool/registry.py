"""Dither strategy auto-discovery and registration.

Scans ntscj_tool/dithers/ with pkgutil for modules that define a `dither`
object of type Dither and collects them into a dict keyed by name.
"""

import importlib
import pkgutil

from ntscj_tool.core.types import Dither

DEFAULT_DITHER = 'quasirandom'

_registry: dict[str, Dither] = {}


def discover() -> dict[str, Dither]:
    """Import all dither modules and return the registry."""
    if _registry:
        return _registry

    import ntscj_tool.dithers as pkg

    for _importer, modname, _ispkg in pkgutil.iter_modules(pkg.__path__):
        if modname.startswith('_'):
            continue
        module = importlib.import_module(f'ntscj_tool.dithers.{modname}')
        strategy = getattr(module, 'dither', None)
        if isinstance(strategy, Dither):
            _registry[strategy.name] = strategy

    return _registry


def get(name: str) -> Dither:
    """Get a dither strategy by name."""
    reg = discover()
    if name not in reg:
        raise KeyError(f'Unknown dither: {name}. Available: {", ".join(sorted(reg))}')
    return reg[name]


def all_dithers() -> dict[str, Dither]:
    """Return all registered dither strategies."""
    return discover()


def module_for(name: str) -> object:
    """Return the raw module behind a dither name (for docstring access)."""
    return importlib.import_module(f'ntscj_tool.dithers.{get(name).name.replace("-", "_")}')
