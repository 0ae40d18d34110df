"""
Calculator execution ordering derived from declared dependencies.

Each calculator names, via ``get_dependencies()``, the calculator types whose
pieces it builds on (the sleeve and neckline follow the body; the raglan yoke
follows body and sleeve).  ``derive_calculator_order`` performs a topological
sort (Kahn's algorithm) over those declarations so that the run order never
depends on the order in which calculators happen to be registered.  When
several calculators are ready at once, the order of the active list is kept
as the tiebreaker.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from knitcalc.calculators.base import Calculator


def derive_calculator_order(
    active: Sequence[str],
    calculators: Mapping[str, Calculator],
) -> list[str]:
    """Return the *active* calculator types in dependency order.

    Parameters
    ----------
    active:
        Calculator types selected for this run, in configuration order.
    calculators:
        Instances for at least every type in *active*.

    Returns
    -------
    list[str]
        The active types, each placed after all of its active dependencies.
        Dependencies on calculators that are not active are ignored.

    Raises
    ------
    ValueError
        If the active calculators' dependencies form a cycle.
    """
    names = list(dict.fromkeys(active))
    index = {name: i for i, name in enumerate(names)}

    remaining: dict[str, set[str]] = {
        name: {dep for dep in calculators[name].get_dependencies() if dep in index and dep != name}
        for name in names
    }

    result: list[str] = []
    placed: set[str] = set()

    while len(result) < len(names):
        available = sorted(
            (name for name in names if name not in placed and not remaining[name]),
            key=lambda n: index[n],
        )
        if not available:
            cycle_members = [name for name in names if name not in placed]
            raise ValueError(
                f"Cycle detected in calculator dependencies among: {cycle_members}"
            )

        node = available[0]
        result.append(node)
        placed.add(node)
        for dep_set in remaining.values():
            dep_set.discard(node)

    return result
