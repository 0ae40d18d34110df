"""resolver: cross-piece interdependency checks."""

from knitcalc.resolver.interdependency import (
    InterdependencyResolutionResult,
    InterdependencyResolver,
    Resolver,
    ResolverTolerances,
)

__all__ = [
    "InterdependencyResolutionResult",
    "InterdependencyResolver",
    "Resolver",
    "ResolverTolerances",
]
