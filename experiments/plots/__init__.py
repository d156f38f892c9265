"""Plotting utilities for the analysis sections."""

from .differential import plot_ma, plot_volcano
from .importance import plot_importances
from .log_odds import plot_log_odds
from .save_config import PlotSaveConfig, PlotSaveDestinations, emit_figure

__all__ = [
    "plot_importances",
    "plot_log_odds",
    "plot_ma",
    "plot_volcano",
    "emit_figure",
    "PlotSaveConfig",
    "PlotSaveDestinations",
]
