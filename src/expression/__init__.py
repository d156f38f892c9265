"""Differential expression and count normalisation."""

from .differential import (
    DifferentialExpressionConfig,
    DifferentialResult,
    log_normalized,
    normalized_counts,
    run_differential_expression,
)

__all__ = [
    "DifferentialExpressionConfig",
    "DifferentialResult",
    "log_normalized",
    "normalized_counts",
    "run_differential_expression",
]
