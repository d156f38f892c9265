from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

from experiments.differential import run_differential
from experiments.forest import run_forest
from experiments.log_odds import run_log_odds
from experiments.plots import PlotSaveConfig
from experiments.report import run_report
from src.datahub import CountDataset, fetch_table, load_count_dataset
from src.datahub.config import (
    CONDITION_COLUMN,
    DEFAULT_COUNTS_PATH,
    DEFAULT_DATA_ROOT,
    DEFAULT_SAMPLES_PATH,
)
from src.expression import DifferentialExpressionConfig
from src.metrics import LogOddsConfig
from src.probes import RandomForestConfig

app = typer.Typer(help="Differential expression, forest importance and weighted log odds on RNA-seq counts.")

CountsOption = typer.Option(DEFAULT_COUNTS_PATH, "--counts", help="Tab-separated genes x samples count matrix.")
SamplesOption = typer.Option(DEFAULT_SAMPLES_PATH, "--samples", help="Tab-separated sample annotation table.")
GenesOption = typer.Option(None, "--genes", help="Optional tab-separated gene annotation table.")
PlotsRootOption = typer.Option(
    None,
    "--plots-root",
    help="Directory where plots should be saved (subfolders are created automatically).",
)
PlotsTagOption = typer.Option(None, "--plots-tag", help="Folder suffix for this run (defaults to timestamp).")
SaveStaticOption = typer.Option(True, help="Write static PNG snapshots when saving plots.")
SaveHtmlOption = typer.Option(True, help="Write interactive HTML plots when saving.")


def _load(counts: Path, samples: Path, genes: Optional[Path]) -> CountDataset:
    try:
        dataset = load_count_dataset(counts, samples, genes)
    except (FileNotFoundError, ValueError) as exc:
        raise typer.BadParameter(str(exc)) from exc
    print(f"[data] Loaded {dataset.shape[0]} genes x {dataset.shape[1]} samples from {counts}.")
    return dataset


def _save_config(
    plots_root: Optional[Path],
    plots_tag: Optional[str],
    save_static: bool,
    save_html: bool,
) -> Optional[PlotSaveConfig]:
    if not plots_root:
        return None
    tag = plots_tag or datetime.utcnow().strftime("%Y%m%d-%H%M%S")
    print(f"[plots] Saving figures under {plots_root / tag}")
    return PlotSaveConfig(base_dir=plots_root, run_tag=tag, save_static=save_static, save_html=save_html)


@app.command()
def fetch(
    counts_url: str = typer.Option(..., "--counts-url", help="URL of the tab-separated count matrix."),
    samples_url: str = typer.Option(..., "--samples-url", help="URL of the tab-separated sample table."),
    counts_sha: Optional[str] = typer.Option(None, "--counts-sha", help="Expected SHA256 of the count matrix."),
    samples_sha: Optional[str] = typer.Option(None, "--samples-sha", help="Expected SHA256 of the sample table."),
    data_root: Path = typer.Option(
        DEFAULT_DATA_ROOT,
        "--data-root",
        exists=False,
        file_okay=False,
        dir_okay=True,
        writable=True,
        help="Directory to store the downloaded tables.",
    ),
    force: bool = typer.Option(False, "--force", help="Redownload even if files exist."),
) -> None:
    """
    Download the count matrix and sample table into the data directory.
    """
    for url, name, sha in (
        (counts_url, DEFAULT_COUNTS_PATH.name, counts_sha),
        (samples_url, DEFAULT_SAMPLES_PATH.name, samples_sha),
    ):
        try:
            dest = fetch_table(url, data_root / name, expected_sha=sha, force=force)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
        print(f"[data] {url} → {dest}")


@app.command("de")
def differential(
    counts: Path = CountsOption,
    samples: Path = SamplesOption,
    genes: Optional[Path] = GenesOption,
    design_factor: str = typer.Option(CONDITION_COLUMN, "--design-factor", help="Sample column to test."),
    reference: Optional[str] = typer.Option(None, "--reference", help="Reference level of the design factor."),
    treated: Optional[str] = typer.Option(None, "--treated", help="Level compared against the reference."),
    alpha: float = typer.Option(0.05, "--alpha", help="Adjusted p-value cutoff."),
    min_total_count: int = typer.Option(10, "--min-total-count", help="Drop genes with fewer total reads."),
    shrink: bool = typer.Option(True, help="Report apeGLM-shrunk log fold changes."),
    plots_root: Optional[Path] = PlotsRootOption,
    plots_tag: Optional[str] = PlotsTagOption,
    save_static: bool = SaveStaticOption,
    save_html: bool = SaveHtmlOption,
) -> None:
    """Differential expression between two levels of a sample factor."""
    dataset = _load(counts, samples, genes)
    config = DifferentialExpressionConfig(
        design_factor=design_factor,
        reference=reference,
        treated=treated,
        alpha=alpha,
        min_total_count=min_total_count,
        shrink=shrink,
    )
    try:
        run_differential(dataset, config, save_config=_save_config(plots_root, plots_tag, save_static, save_html))
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command()
def forest(
    counts: Path = CountsOption,
    samples: Path = SamplesOption,
    genes: Optional[Path] = GenesOption,
    target: str = typer.Option(CONDITION_COLUMN, "--target", help="Sample column to regress on expression."),
    n_estimators: int = typer.Option(500, "--n-estimators", help="Number of trees."),
    max_genes: int = typer.Option(500, "--max-genes", help="Keep this many most variable genes as features."),
    seed: int = typer.Option(42, "--seed", help="Random seed for the forest and permutations."),
    tune_probe: bool = typer.Option(False, "--tune-probe", help="Enable Optuna tuning of the forest."),
    tuning_trials: int = typer.Option(25, "--tuning-trials", help="Number of Optuna trials when --tune-probe is set."),
    plots_root: Optional[Path] = PlotsRootOption,
    plots_tag: Optional[str] = PlotsTagOption,
    save_static: bool = SaveStaticOption,
    save_html: bool = SaveHtmlOption,
) -> None:
    """Random forest regression used to rank genes by importance."""
    dataset = _load(counts, samples, genes)
    config = RandomForestConfig(n_estimators=n_estimators, oob_score=True, random_state=seed)
    try:
        run_forest(
            dataset,
            target,
            config=config,
            tune=tune_probe,
            tuning_trials=tuning_trials,
            max_genes=max_genes,
            save_config=_save_config(plots_root, plots_tag, save_static, save_html),
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command("log-odds")
def log_odds(
    counts: Path = CountsOption,
    samples: Path = SamplesOption,
    genes: Optional[Path] = GenesOption,
    group: str = typer.Option(CONDITION_COLUMN, "--group", help="Sample column defining the groups."),
    prior_strength: Optional[float] = typer.Option(
        None,
        "--prior-strength",
        help="Total pseudo-count mass of the Dirichlet prior (defaults to the total count).",
    ),
    uninformative: bool = typer.Option(False, "--uninformative", help="Use a flat prior of one pseudo-count per gene."),
    min_total_count: int = typer.Option(10, "--min-total-count", help="Drop genes with fewer total reads."),
    top: int = typer.Option(10, "--top", help="Genes to show per group."),
    plots_root: Optional[Path] = PlotsRootOption,
    plots_tag: Optional[str] = PlotsTagOption,
    save_static: bool = SaveStaticOption,
    save_html: bool = SaveHtmlOption,
) -> None:
    """Weighted log odds of each gene's share of reads per sample group."""
    dataset = _load(counts, samples, genes)
    config = LogOddsConfig(prior_strength=prior_strength, uninformative=uninformative)
    try:
        run_log_odds(
            dataset,
            group,
            config=config,
            min_total_count=min_total_count,
            save_config=_save_config(plots_root, plots_tag, save_static, save_html),
            top=top,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command()
def report(
    counts: Path = CountsOption,
    samples: Path = SamplesOption,
    genes: Optional[Path] = GenesOption,
    design_factor: str = typer.Option(CONDITION_COLUMN, "--design-factor", help="Sample column to compare."),
    forest_target: Optional[str] = typer.Option(
        None,
        "--forest-target",
        help="Sample column for the forest regression (defaults to the design factor).",
    ),
    plots_root: Optional[Path] = PlotsRootOption,
    plots_tag: Optional[str] = PlotsTagOption,
    save_static: bool = SaveStaticOption,
    save_html: bool = SaveHtmlOption,
) -> None:
    """Run all three sections in sequence."""
    dataset = _load(counts, samples, genes)
    try:
        run_report(
            dataset,
            de_config=DifferentialExpressionConfig(design_factor=design_factor),
            forest_target=forest_target,
            save_config=_save_config(plots_root, plots_tag, save_static, save_html),
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


if __name__ == "__main__":
    app()
