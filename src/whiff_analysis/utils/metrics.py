"""
Metrics utilities for whiff-rate analysis: information criteria and model comparison.

Everything is on the deviance scale, so lower is better.
"""
from __future__ import annotations

import logging
from typing import Dict, Mapping, Tuple, cast

import arviz as az
import numpy as np
import pandas as pd
from arviz.data.inference_data import InferenceData

logger = logging.getLogger(__name__)

SCALE = "deviance"


def _entry(result: az.ELPDData, *names: str) -> float:
    """First of *names* present in an ELPDData result; ArviZ versions label entries differently."""
    for name in names:
        if name in result.index:
            return float(result[name])
    raise KeyError(f"None of {names} in {result.index.tolist()}")


def _ic_column(table: pd.DataFrame) -> str:
    """Name ArviZ gave the information-criterion column of a compare table."""
    for name in ("elpd_waic", "waic"):
        if name in table.columns:
            return name
    raise KeyError(f"No WAIC column in comparison table: {table.columns.tolist()}")


class BayesianEvaluator:
    """Wrap ArviZ to calculate WAIC and compare fitted beta regressions."""

    def __init__(self, var_name: str = "whiff_rate", dse_multiplier: float = 2.0):
        self.var_name = var_name
        self.dse_multiplier = dse_multiplier

    def information_criteria(self, trace: InferenceData, pointwise: bool = False) -> Dict[str, float]:
        """
        Return WAIC and PSIS-LOO for a fitted model.

        Parameters
        ----------
        trace : arviz.InferenceData with a log_likelihood group
        pointwise : bool
            If True, also return the pointwise arrays for advanced analysis.
        """
        waic_res = az.waic(trace, var_name=self.var_name, scale=SCALE, pointwise=pointwise)
        loo_res = az.loo(trace, var_name=self.var_name, scale=SCALE, pointwise=pointwise)
        info = {
            "waic": _entry(waic_res, "elpd_waic", "waic"),
            "waic_se": _entry(waic_res, "se", "waic_se"),
            "p_waic": _entry(waic_res, "p_waic"),
            "psis_loo": _entry(loo_res, "elpd_loo", "loo"),
            "psis_loo_se": _entry(loo_res, "se", "loo_se"),
        }
        if pointwise:
            info["waic_i"] = waic_res.waic_i
            info["loo_i"] = loo_res.loo_i
        return info

    def waic_difference(self, trace_a: InferenceData, trace_b: InferenceData) -> Tuple[float, float]:
        """
        WAIC(a) − WAIC(b) and the standard error of that difference.

        The SE comes from the pointwise differences, so both fits must share
        the same observations. Swapping the arguments flips the sign of the
        difference and leaves the SE unchanged.
        """
        waic_a = az.waic(trace_a, var_name=self.var_name, scale=SCALE, pointwise=True)
        waic_b = az.waic(trace_b, var_name=self.var_name, scale=SCALE, pointwise=True)

        pw_a = np.asarray(waic_a.waic_i).ravel()
        pw_b = np.asarray(waic_b.waic_i).ravel()
        if pw_a.shape != pw_b.shape:
            raise ValueError(
                f"Models were fit to different data ({pw_a.size} vs {pw_b.size} observations)"
            )
        diff_i = pw_a - pw_b
        diff = float(diff_i.sum())
        se = float(np.sqrt(diff_i.size * np.var(diff_i)))
        return diff, se

    def compare(self, traces: Mapping[str, InferenceData]) -> pd.DataFrame:
        """
        Rank models by WAIC, best first.

        Adds ``distinguishable``: True where a model trails the best by more
        than ``dse_multiplier`` standard errors of the difference.
        """
        if len(traces) < 2:
            raise ValueError("Need at least two models to compare")
        table = cast(pd.DataFrame, az.compare(dict(traces), ic="waic", scale=SCALE,
                                              var_name=self.var_name))
        table = table.sort_values("rank")
        table["distinguishable"] = table["elpd_diff"].abs() > self.dse_multiplier * table["dse"]
        table.loc[table["rank"] == 0, "distinguishable"] = False
        return table

    def comparison_report(self, table: pd.DataFrame) -> str:
        """One-paragraph verdict that keeps the comparison's uncertainty visible."""
        ic_col = _ic_column(table)
        best = table.index[0]
        lines = [f"Lowest WAIC: {best} ({table.loc[best, ic_col]:.1f})."]
        for model in table.index[1:]:
            d = float(table.loc[model, "elpd_diff"])
            se = float(table.loc[model, "dse"])
            if bool(table.loc[model, "distinguishable"]):
                verdict = "a clear gap"
            else:
                verdict = "within the uncertainty of the comparison"
            lines.append(f"{model}: ΔWAIC = {d:.1f} ± {se:.1f} ({verdict}).")
        report = " ".join(lines)
        logger.info(report)
        return report


def compare_models(traces: Mapping[str, InferenceData]) -> pd.DataFrame:
    """Shortcut for ``BayesianEvaluator().compare``."""
    return BayesianEvaluator().compare(traces)
