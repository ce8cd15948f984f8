"""modstore — in-memory module store with hooks, relations, and undo."""

from modstore.domain.errors import DuplicateItemError, PreconditionError
from modstore.domain.hooks import HookDecision
from modstore.domain.predicates import FunctionPredicate, KeyPredicate, Predicate
from modstore.infrastructure.store import Store

__version__ = "0.3.0"

__all__ = [
    "DuplicateItemError",
    "FunctionPredicate",
    "HookDecision",
    "KeyPredicate",
    "PreconditionError",
    "Predicate",
    "Store",
    "__version__",
]
