"""Faceted bar chart of the highest weighted log-odds per group."""

from __future__ import annotations

from typing import Optional

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from src.datahub.config import GENE_COLUMN
from src.pipelines.reshape import top_n

from .save_config import PlotSaveDestinations, emit_figure


def build_log_odds_bars(scored: pd.DataFrame, group_col: str, title: str, top: int = 10) -> go.Figure:
    df = top_n(scored, "log_odds_weighted", top, group_col=group_col)
    df = df.assign(**{group_col: df[group_col].astype(str)})
    fig = px.bar(
        df.sort_values("log_odds_weighted"),
        x="log_odds_weighted",
        y=GENE_COLUMN,
        color=group_col,
        facet_col=group_col,
        orientation="h",
        title=title,
        labels={"log_odds_weighted": "Weighted log odds", GENE_COLUMN: "Gene"},
    )
    fig.update_yaxes(matches=None, showticklabels=True)
    fig.update_layout(showlegend=False)
    return fig


def plot_log_odds(
    scored: pd.DataFrame,
    group_col: str,
    title: str,
    top: int = 10,
    save_to: Optional[PlotSaveDestinations] = None,
) -> None:
    if scored.empty:
        return
    emit_figure(build_log_odds_bars(scored, group_col, title, top), save_to)
