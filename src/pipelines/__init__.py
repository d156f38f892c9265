"""Shared table-reshaping helpers for the analysis sections."""

from .reshape import attach_sample_annotation, filter_by_total, filter_low_counts, group_counts, to_long, top_n

__all__ = [
    "attach_sample_annotation",
    "filter_by_total",
    "filter_low_counts",
    "group_counts",
    "to_long",
    "top_n",
]
