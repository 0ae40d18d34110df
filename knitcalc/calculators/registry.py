"""
Calculator registry.

A simple mapping from calculator_type string to a callable that returns a
calculator instance.

Usage
-----
Calculators self-register at import time by calling ``register()``.  Import
the ``knitcalc.calculators`` package to ensure all built-in calculators are
registered::

    import knitcalc.calculators
    from knitcalc.calculators.registry import get, list_types

    body = get("body")
"""

from __future__ import annotations

from collections.abc import Callable

from knitcalc.calculators.base import Calculator

_REGISTRY: dict[str, Callable[[], Calculator]] = {}


def register(calculator_type: str, factory: Callable[[], Calculator]) -> None:
    """Register *factory* under *calculator_type*.

    Calling ``factory()`` must return a calculator whose ``calculator_type``
    attribute equals the registered key.  Registering an existing key
    replaces the previous factory.
    """
    _REGISTRY[calculator_type] = factory


def get(calculator_type: str) -> Calculator:
    """Return a fresh calculator for *calculator_type*.

    Raises
    ------
    KeyError
        If *calculator_type* has not been registered.
    """
    if calculator_type not in _REGISTRY:
        raise KeyError(f"Unknown calculator type: {calculator_type!r}")
    return _REGISTRY[calculator_type]()


def list_types() -> list[str]:
    """Return a sorted list of all registered calculator type keys."""
    return sorted(_REGISTRY.keys())
