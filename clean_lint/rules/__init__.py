"""Built-in rules. Importing this package registers every rule in REGISTRY.

Rules by category:
    naming        short-name, naming-convention, redundant-context
    functions     max-params, function-length, flag-argument, global-statement,
                  mutable-default, unreachable-code
    conditionals  max-nesting, negated-condition, type-check-chain, complex-condition
    variables     magic-number
    objects       law-of-demeter, too-many-methods, deep-inheritance, accessor-pair
    errors        bare-except, ignored-exception
    comments      commented-out-code, journal-comment, positional-marker
"""

from clean_lint.registry import REGISTRY
from clean_lint.rules import (  # noqa: F401
    comments,
    conditionals,
    errors,
    functions,
    naming,
    objects,
    variables,
)

__all__ = ["REGISTRY"]
