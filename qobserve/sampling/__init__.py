"""Sampling and outcome statistics."""

from .bitstrings import (
    index_to_bitstring,
    probability_table,
    sample_counts,
)
from .counts import (
    GLOBAL_REGISTER_NAME,
    CountsMap,
    Evidence,
    ProbabilityTable,
    SampleResult,
)

__all__ = [
    "GLOBAL_REGISTER_NAME",
    "Evidence",
    "CountsMap",
    "ProbabilityTable",
    "SampleResult",
    "index_to_bitstring",
    "sample_counts",
    "probability_table",
]
