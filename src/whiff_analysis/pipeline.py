"""
End-to-end whiff-rate workflow.

load → merge → clean → persist → standardize → prior predictive check
     → fit full model → fit reduced model → WAIC comparison

Every step reads the previous step's output and returns a new object; the only
state carried between runs is the fit cache controlled by ``PipelineConfig.refit``.
"""
from __future__ import annotations

import logging
from contextlib import nullcontext
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd
from arviz.data.inference_data import InferenceData

from whiff_analysis.config import PipelineConfig
from whiff_analysis.data.loader import DataLoader
from whiff_analysis.data.preprocessor import DataPreprocessor, ScalingParams
from whiff_analysis.models.beta_regression import FULL_MODEL, REDUCED_MODEL, missing_roles
from whiff_analysis.models.prior_predictive import plot_prior_predictive, simulate_prior_predictive
from whiff_analysis.models.sampler import FitCache, PyMCSampler, Sampler, diagnostics, summarize_posterior
from whiff_analysis.utils.metrics import BayesianEvaluator

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Everything a run produces, step by step."""
    canonical: pd.DataFrame
    modeling: pd.DataFrame
    scaling: ScalingParams
    prior_sims: Optional[pd.DataFrame] = None
    fits: Dict[str, InferenceData] = field(default_factory=dict)
    diagnostics: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    summaries: Dict[str, pd.DataFrame] = field(default_factory=dict)
    info_criteria: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    comparison: Optional[pd.DataFrame] = None
    report: str = ""


def prepare_data(cfg: PipelineConfig) -> tuple[pd.DataFrame, pd.DataFrame, ScalingParams]:
    """Load, merge, clean and persist the canonical table, then standardize it."""
    loader = DataLoader()
    merged = loader.load_complete_dataset(cfg.core_path, cfg.whiff_path, cfg.extension_path)

    preprocessor = DataPreprocessor()
    canonical = preprocessor.clean(merged)
    preprocessor.save_canonical(canonical, cfg.dataset_path)

    modeling, scaling = preprocessor.prepare_for_model(
        preprocessor.load_canonical(cfg.dataset_path)
    )
    scaling.save(cfg.scaling_path)
    return canonical, modeling, scaling


def run_pipeline(
    cfg: Optional[PipelineConfig] = None,
    sampler: Optional[Sampler] = None,
    *,
    prior_check: bool = True,
) -> PipelineResult:
    """
    Run the whole workflow for one configuration.

    Parameters
    ----------
    cfg : run configuration; package defaults when omitted
    sampler : posterior sampler; a ``PyMCSampler`` built from *cfg* when omitted
    prior_check : simulate prior predictive draws before fitting
    """
    cfg = cfg or PipelineConfig.from_config()
    sampler = sampler or PyMCSampler(
        tune=cfg.tune, target_accept=cfg.target_accept, random_seed=cfg.random_seed
    )

    tracking = nullcontext()
    if cfg.track_with_mlflow:
        import mlflow
        from mlops.experiment_utils import setup_mlflow_experiment

        setup_mlflow_experiment(cfg.experiment_name, cfg.tracking_uri)
        tracking = mlflow.start_run(tags=dict(cfg.tags) or None)

    with tracking:
        canonical, modeling, scaling = prepare_data(cfg)
        result = PipelineResult(canonical=canonical, modeling=modeling, scaling=scaling)

        if prior_check:
            result.prior_sims = simulate_prior_predictive(
                modeling, FULL_MODEL, n_sim=cfg.n_prior_sims, random_seed=cfg.random_seed
            )

        cache = FitCache(cfg.cache_dir, refit=cfg.refit)
        evaluator = BayesianEvaluator(var_name=FULL_MODEL.response)
        for spec in (FULL_MODEL, REDUCED_MODEL):
            absent = missing_roles(spec)
            if absent:
                logger.info("%s model omits %s", spec.name, absent)
            idata = cache.load_or_fit(spec, modeling, sampler, chains=cfg.chains, draws=cfg.draws)
            result.fits[spec.name] = idata
            result.diagnostics[spec.name] = diagnostics(idata, spec.param_names)
            result.summaries[spec.name] = summarize_posterior(idata, spec)
            result.info_criteria[spec.name] = evaluator.information_criteria(idata)

        result.comparison = evaluator.compare(result.fits)
        result.report = evaluator.comparison_report(result.comparison)
        comparison_path = Path(cfg.comparison_path)
        comparison_path.parent.mkdir(parents=True, exist_ok=True)
        result.comparison.to_csv(comparison_path)

        if cfg.track_with_mlflow:
            from mlops.logging import log_comparison, log_figure, log_model_fit, log_parameters

            log_parameters({
                "draws": cfg.draws, "tune": cfg.tune, "chains": cfg.chains,
                "refit": cfg.refit, "n_pitchers": len(modeling),
            })
            for spec in (FULL_MODEL, REDUCED_MODEL):
                log_model_fit(spec.name, spec.param_names,
                              result.diagnostics[spec.name], result.info_criteria[spec.name])
            log_comparison(result.comparison)
            if result.prior_sims is not None:
                log_figure(plot_prior_predictive(result.prior_sims, modeling["whiff_rate"]),
                           "prior_predictive.png")

    return result


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s │ %(levelname)s │ %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Flip to False to reuse the fits saved by a previous run
    REFIT = True

    run_cfg = PipelineConfig.from_config(refit=REFIT)
    out = run_pipeline(run_cfg)
    for name, summary in out.summaries.items():
        print(f"\n=== {name} ===")
        print(summary.to_string())
    print("\n", out.comparison.to_string())
    print("\n", out.report)
