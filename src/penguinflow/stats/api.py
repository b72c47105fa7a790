"""Public API for the analysis pipeline."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import pandas as pd

from penguinflow.data import (
    load_table,
    save_table,
    clean_penguins,
    validate_columns,
    select_complete,
    generate_missingness_report,
)
from penguinflow.lineage import compute_file_hash, compute_dataframe_hash, get_file_metadata
from penguinflow.stats import reports
from penguinflow.stats.config import AnalysisConfig, load_config
from penguinflow.stats.excel import write_results_workbook
from penguinflow.stats.models import FittedModel, fit_group_model
from penguinflow.stats.normality import check_assumptions, check_normality_by_group
from penguinflow.stats.results import AnovaTable, AssumptionReport, PairwiseComparison, TransformSummary
from penguinflow.stats.tests import anova_oneway, tukey_hsd
from penguinflow.stats.transform import transform_response

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    """Everything produced by one analysis run."""

    config: AnalysisConfig
    clean_data: pd.DataFrame
    analysed_data: pd.DataFrame
    model: FittedModel
    diagnostics: Tuple[AssumptionReport, ...]
    transform: TransformSummary
    anova: AnovaTable
    comparisons: Tuple[PairwiseComparison, ...]
    tables: Dict[str, pd.DataFrame]
    figures: Dict[str, Path]
    table_paths: Dict[str, Path]
    workbook: Path


def clean_dataset(config: AnalysisConfig) -> pd.DataFrame:
    """Load the raw table, clean it and write the cleaned copy.

    Args:
        config: AnalysisConfig object

    Returns:
        Cleaned dataframe

    Raises:
        FileNotFoundError: If the raw table does not exist
        SchemaError: If expected columns are missing
    """
    raw = load_table(config.raw_data_path)
    clean = clean_penguins(raw)
    save_table(clean, config.clean_data_path)
    return clean


def run_analysis(config: Optional[AnalysisConfig] = None, **overrides: Any) -> AnalysisResult:
    """Run the complete analysis pipeline.

    Args:
        config: Optional AnalysisConfig; defaults describe the fixed single run
        **overrides: AnalysisConfig fields to replace (``None`` values are ignored)

    Returns:
        AnalysisResult

    Example:
        >>> from penguinflow import run_analysis
        >>> result = run_analysis(raw_data_path="data/penguins_raw.csv", outdir="derived")
        >>> result.anova.f_test.p_value
    """
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if config is None:
        config = load_config(**overrides)
    elif overrides:
        config = dataclasses.replace(config, **overrides)

    return run_analysis_from_config(config)


def run_analysis_from_config(config: AnalysisConfig) -> AnalysisResult:
    """Run the analysis from an AnalysisConfig object.

    Args:
        config: AnalysisConfig object

    Returns:
        AnalysisResult

    Notes:
        - Stages are composed explicitly; every stage returns a new dataframe.
        - Box-Cox is applied when residual diagnostics fail (``transform="auto"``),
          and the single lambda search feeds both the profile plot and the transform.
        - Rows with a non-finite transformed response are dropped before the ANOVA.
    """
    response, group_col, viz = config.response, config.group_col, config.viz

    # ──────────────────────────────────────────────────────────────
    # 1. Load and clean
    # ──────────────────────────────────────────────────────────────
    logger.info(f"[1/7] Loading and cleaning {config.raw_data_path}")
    clean = clean_dataset(config)
    validate_columns(clean, [response, group_col])

    missingness = generate_missingness_report(clean, [response, group_col])
    analysed = select_complete(clean, [response, group_col])
    logger.info(
        f"  • Rows: {len(clean)} cleaned, {len(analysed)} complete for {response} ~ {group_col}"
    )

    figures: Dict[str, Path] = {}

    # ──────────────────────────────────────────────────────────────
    # 2. Exploratory figure
    # ──────────────────────────────────────────────────────────────
    logger.info("[2/7] Creating exploratory violin plot")
    from penguinflow.stats.viz import plot_violin_jitter, plot_boxplot_significance, plot_boxcox_profile

    figures["violin"] = plot_violin_jitter(
        analysed, response, group_col, config.figure_path(viz.violin_name), viz
    )

    # ──────────────────────────────────────────────────────────────
    # 3. Model and diagnostics
    # ──────────────────────────────────────────────────────────────
    logger.info(f"[3/7] Fitting {response} ~ C({group_col}) and checking residuals")
    model = fit_group_model(analysed, response, group_col)
    raw_report = check_assumptions(
        model.residuals, model.groups, config.alpha, config.levene_center, stage="raw"
    )
    diagnostics = [raw_report]
    by_group = [check_normality_by_group(model.residuals, model.groups, stage="raw")]

    # ──────────────────────────────────────────────────────────────
    # 4. Box-Cox correction
    # ──────────────────────────────────────────────────────────────
    logger.info("[4/7] Deciding on Box-Cox transformation")
    data, transform = transform_response(
        analysed,
        model,
        raw_report,
        mode=config.transform,
        bounds=config.lambda_bounds,
        grid_points=config.lambda_grid_points,
    )

    if transform.applied:
        t_model = fit_group_model(data, transform.column, group_col)
        t_report = check_assumptions(
            t_model.residuals, t_model.groups, config.alpha, config.levene_center, stage="transformed"
        )
        diagnostics.append(t_report)
        by_group.append(check_normality_by_group(t_model.residuals, t_model.groups, stage="transformed"))
        if t_report.violated:
            logger.warning(
                "Residual assumptions are still not fully met after Box-Cox; "
                "results are reported with both diagnostics"
            )
        figures["boxcox_profile"] = plot_boxcox_profile(
            transform.boxcox, config.figure_path(viz.profile_name), viz
        )

    # ──────────────────────────────────────────────────────────────
    # 5. ANOVA
    # ──────────────────────────────────────────────────────────────
    logger.info(f"[5/7] One-way ANOVA on {transform.column}")
    anova = anova_oneway(data, transform.column, group_col)

    # ──────────────────────────────────────────────────────────────
    # 6. Tukey HSD and results figure
    # ──────────────────────────────────────────────────────────────
    logger.info("[6/7] Tukey HSD post-hoc comparisons")
    comparisons = tukey_hsd(data, transform.column, group_col, config.alpha, anova=anova)
    figures["boxplot"] = plot_boxplot_significance(
        data,
        transform.column,
        group_col,
        comparisons,
        config.figure_path(viz.boxplot_name),
        viz,
        alpha=config.alpha,
    )

    # ──────────────────────────────────────────────────────────────
    # 7. Tables
    # ──────────────────────────────────────────────────────────────
    logger.info("[7/7] Writing tables")
    group_counts = data[group_col].astype(str).value_counts().to_dict()
    raw_meta = get_file_metadata(config.raw_data_path)
    manifest_extra = {
        "raw_sha256": raw_meta["sha256"],
        "raw_size_bytes": raw_meta["size_bytes"],
        "raw_modified": raw_meta["modified"],
        "clean_sha256": compute_file_hash(config.clean_data_path),
        "analysed_data_sha256": compute_dataframe_hash(data),
        "n_clean_rows": len(clean),
        "n_excluded_missing": len(clean) - len(analysed),
        "n_missing_response": missingness["missing_counts"].get(response, 0),
        "n_analysed_rows": len(data),
        "levene_center": config.levene_center,
        "transform_mode": config.transform,
        "lambda_bounds": f"{config.lambda_bounds[0]}, {config.lambda_bounds[1]}",
        **transform.as_dict(),
    }

    tables = {
        "residual_diagnostics": reports.build_diagnostics_table(diagnostics),
        "anova": reports.build_anova_table(anova),
        "tukey_hsd": reports.build_tukey_table(comparisons),
        "descriptives": reports.build_descriptives_by_group(analysed, response, group_col),
        "normality_by_group": pd.concat(by_group, ignore_index=True),
        "run_manifest": reports.build_run_manifest(
            config.raw_data_path,
            config.clean_data_path,
            response,
            group_col,
            config.alpha,
            group_counts,
            extra=manifest_extra,
        ),
    }

    table_paths = reports.write_tables(config.tables_dir, tables, config.precision, config.alpha)
    workbook = write_results_workbook(
        config.tables_dir,
        {
            "Run_Manifest": tables["run_manifest"],
            "Descriptives": tables["descriptives"],
            "Residual_Diagnostics": tables["residual_diagnostics"],
            "Normality_By_Group": tables["normality_by_group"],
            "ANOVA": tables["anova"],
            "Tukey_HSD": tables["tukey_hsd"],
        },
        alpha=config.alpha,
    )
    logger.info(f"  • {workbook}")
    logger.info("Analysis complete.")

    return AnalysisResult(
        config=config,
        clean_data=clean,
        analysed_data=data,
        model=model,
        diagnostics=tuple(diagnostics),
        transform=transform,
        anova=anova,
        comparisons=comparisons,
        tables=tables,
        figures=figures,
        table_paths=table_paths,
        workbook=workbook,
    )
