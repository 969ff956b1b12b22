"""Module path resolver for guards and actions named in machine files.

Examples
--------
>>> from hexchart.kernel.resolver import resolve_callable
>>> resolve_callable("operator.not_")  # doctest: +ELLIPSIS
<built-in function not_>
>>> resolve_callable("increment", {"increment": lambda ctx, e: ctx})  # doctest: +ELLIPSIS
<function <lambda> at ...>
"""

from __future__ import annotations

import importlib
from collections.abc import Callable, Mapping
from typing import Any

from hexchart.kernel.exceptions import ResolveError

__all__ = ["resolve_callable"]


def resolve_callable(
    ref: str, registry: Mapping[str, Callable[..., Any]] | None = None
) -> Callable[..., Any]:
    """Resolve ``ref`` to a callable.

    ``registry`` names are checked first; anything else must be a full
    ``module.path.attribute`` reference.

    Raises
    ------
    ResolveError
        If the reference is unknown, cannot be imported, or is not callable
    """
    if registry is not None and ref in registry:
        return registry[ref]

    if "." not in ref:
        known = sorted(registry) if registry else []
        reason = "Must be a full module path (e.g., 'myapp.actions.increment')"
        if known:
            reason += f" or one of: {', '.join(known[:10])}"
        raise ResolveError(ref, reason)

    module_path, attr_name = ref.rsplit(".", 1)
    try:
        module = importlib.import_module(module_path)
    except ModuleNotFoundError as e:
        raise ResolveError(ref, f"Module '{module_path}' not found: {e}") from e
    except ImportError as e:
        raise ResolveError(ref, f"Failed to import '{module_path}': {e}") from e

    try:
        target = getattr(module, attr_name)
    except AttributeError as e:
        available = [name for name in dir(module) if not name.startswith("_")]
        raise ResolveError(
            ref,
            f"'{attr_name}' not found in '{module_path}'. Available: {', '.join(available[:10])}",
        ) from e

    if not callable(target):
        raise ResolveError(ref, f"'{attr_name}' is not callable (got {type(target).__name__})")
    return target
