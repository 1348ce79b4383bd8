"""The observe engine: grouping, execution, aggregation and results."""

from .aggregate import Reduction, reduce, term_expectation
from .api import observe, observe_async, shutdown_async
from .driver import GroupResult, execute_groups, run_group
from .options import CancellationToken, ObserveOptions
from .result import ObserveResult

__all__ = [
    "observe",
    "observe_async",
    "shutdown_async",
    "ObserveOptions",
    "CancellationToken",
    "ObserveResult",
    "GroupResult",
    "run_group",
    "execute_groups",
    "Reduction",
    "reduce",
    "term_expectation",
]
