"""
MLflow logging helpers for beta-regression fits and WAIC comparisons.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping

import matplotlib.pyplot as plt
import mlflow
import pandas as pd
from matplotlib.figure import Figure


def log_figure(fig: Figure, name: str) -> None:
    """Log a Matplotlib figure directly without temp files."""
    mlflow.log_figure(fig, artifact_file=name)
    plt.close(fig)


def log_parameters(params: Dict[str, Any]) -> None:
    """
    Log parameters to MLflow.

    Args:
        params: Dictionary of parameter names and values
    """
    mlflow.log_params(params)


def log_model_fit(
    model_name: str,
    param_names: list[str],
    diagnostics: Mapping[str, Any],
    info_criteria: Mapping[str, Any],
) -> Dict[str, float]:
    """
    Log one fit's convergence and information-criterion scalars.

    Non-scalar entries (xarray datasets, pointwise arrays) are skipped.
    Returns the flat dict that was logged so callers can unit-test easily.
    """
    metrics: Dict[str, float] = {}
    for key in ("rhat_max", "ess_min"):
        if key in diagnostics:
            metrics[f"{model_name}_{key}"] = float(diagnostics[key])
    for key, value in info_criteria.items():
        if isinstance(value, (int, float)):
            metrics[f"{model_name}_{key}"] = float(value)

    mlflow.log_param(f"{model_name}_params", ",".join(param_names))
    mlflow.log_metrics(metrics)
    return metrics


def log_comparison(table: pd.DataFrame, artifact_name: str = "waic_comparison.csv") -> None:
    """Log the WAIC comparison table as a CSV artifact plus the ΔWAIC per model."""
    mlflow.log_text(table.to_csv(), artifact_file=artifact_name)
    for model, row in table.iterrows():
        mlflow.log_metric(f"{model}_elpd_diff", float(row["elpd_diff"]))
        mlflow.log_metric(f"{model}_dse", float(row["dse"]))
