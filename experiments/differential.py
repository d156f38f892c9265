from __future__ import annotations

from typing import Optional

from src.datahub.count_dataset import CountDataset
from src.expression.differential import (
    DifferentialExpressionConfig,
    DifferentialResult,
    run_differential_expression,
)

from .plots import PlotSaveConfig, plot_ma, plot_volcano

SECTION = "differential"


def run_differential(
    dataset: CountDataset,
    config: Optional[DifferentialExpressionConfig] = None,
    save_config: Optional[PlotSaveConfig] = None,
    top: int = 10,
) -> DifferentialResult:
    """Fit DESeq2 on the dataset, print the headline numbers and plot the contrast."""
    cfg = config or DifferentialExpressionConfig()
    print(f"[de] Fitting DESeq2 on {dataset.shape[0]} genes x {dataset.shape[1]} samples (design ~{cfg.design_factor}).")
    result = run_differential_expression(dataset, cfg)

    factor, treated, reference = result.contrast
    summary = result.summary()
    print(
        f"[de] {factor}: {treated} vs {reference} → {summary['significant']}/{summary['tested']} genes "
        f"with padj < {result.alpha} ({summary['up']} up, {summary['down']} down, {summary['padj_na']} padj NA)."
    )

    hits = result.significant()
    if not hits.empty:
        print(f"[de] Top {min(top, len(hits))} genes by padj:")
        print(hits.head(top)[["baseMean", "log2FoldChange", "padj"]].to_string())

    title = f"{treated} vs {reference}"
    table = result.table(shrunk=True)
    plot_volcano(
        result.results,
        result.alpha,
        f"Volcano – {title}",
        save_to=save_config.for_plot(SECTION, "volcano") if save_config else None,
    )
    plot_ma(
        table,
        result.alpha,
        f"MA plot – {title}" + (" (shrunk LFC)" if result.shrunk is not None else ""),
        save_to=save_config.for_plot(SECTION, "ma") if save_config else None,
    )
    return result
