"""Bar chart helper for forest variable importances."""

from __future__ import annotations

from typing import Optional

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .save_config import PlotSaveDestinations, emit_figure


def build_importance_bars(importances: pd.DataFrame, value_col: str, title: str, top: int = 20) -> go.Figure:
    df = importances.head(top).rename_axis("gene").reset_index().sort_values(value_col)
    error_x = df["importance_std"] if "importance_std" in df.columns and value_col == "importance_mean" else None
    fig = px.bar(
        df,
        x=value_col,
        y="gene",
        orientation="h",
        error_x=error_x,
        title=title,
        labels={value_col: "Importance", "gene": "Gene"},
    )
    fig.update_layout(xaxis=dict(rangemode="tozero"))
    return fig


def plot_importances(
    importances: pd.DataFrame,
    value_col: str,
    title: str,
    top: int = 20,
    save_to: Optional[PlotSaveDestinations] = None,
) -> None:
    """Horizontal bars of the `top` genes, most important at the top."""
    if importances.empty:
        return
    emit_figure(build_importance_bars(importances, value_col, title, top), save_to)
