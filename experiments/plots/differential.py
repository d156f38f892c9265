"""Volcano and MA plots for differential-expression results."""

from __future__ import annotations

from typing import Optional

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .save_config import PlotSaveDestinations, emit_figure


def _annotate(table: pd.DataFrame, alpha: float) -> pd.DataFrame:
    df = table.rename_axis("gene").reset_index()
    significant = (df["padj"] < alpha).fillna(False)
    df["status"] = np.where(
        significant & (df["log2FoldChange"] > 0),
        "up",
        np.where(significant & (df["log2FoldChange"] < 0), "down", "not significant"),
    )
    return df


def build_volcano(table: pd.DataFrame, alpha: float, title: str) -> go.Figure:
    df = _annotate(table, alpha).dropna(subset=["pvalue"])
    # Clip p-values of exactly zero so the axis stays finite.
    floor = np.finfo(float).tiny
    df["neg_log10_pvalue"] = -np.log10(df["pvalue"].clip(lower=floor))
    fig = px.scatter(
        df,
        x="log2FoldChange",
        y="neg_log10_pvalue",
        color="status",
        hover_name="gene",
        color_discrete_map={"up": "firebrick", "down": "steelblue", "not significant": "lightgray"},
        title=title,
        labels={"log2FoldChange": "log2 fold change", "neg_log10_pvalue": "-log10 p-value"},
    )
    fig.add_vline(x=0.0, line_dash="dot", line_color="gray")
    return fig


def build_ma(table: pd.DataFrame, alpha: float, title: str) -> go.Figure:
    df = _annotate(table, alpha)
    df = df[df["baseMean"] > 0]
    fig = px.scatter(
        df,
        x="baseMean",
        y="log2FoldChange",
        color="status",
        hover_name="gene",
        log_x=True,
        color_discrete_map={"up": "firebrick", "down": "steelblue", "not significant": "lightgray"},
        title=title,
        labels={"baseMean": "Mean of normalized counts", "log2FoldChange": "log2 fold change"},
    )
    fig.add_hline(y=0.0, line_dash="dot", line_color="gray")
    return fig


def plot_volcano(
    table: pd.DataFrame,
    alpha: float,
    title: str,
    save_to: Optional[PlotSaveDestinations] = None,
) -> None:
    if table.empty:
        return
    emit_figure(build_volcano(table, alpha, title), save_to)


def plot_ma(
    table: pd.DataFrame,
    alpha: float,
    title: str,
    save_to: Optional[PlotSaveDestinations] = None,
) -> None:
    if table.empty:
        return
    emit_figure(build_ma(table, alpha, title), save_to)
