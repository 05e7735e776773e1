"""
Posterior sampling behind a narrow interface, plus fit persistence.

Anything with ``fit(spec, dataset, *, chains, draws) -> InferenceData`` can
stand in for :class:`PyMCSampler`; the rest of the pipeline only reads the
``posterior`` and ``log_likelihood`` groups of what comes back.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, cast

import arviz as az
import numpy as np
import pandas as pd
import pymc as pm
from arviz.data.inference_data import InferenceData
from xarray import Dataset

from whiff_analysis.config import config
from whiff_analysis.models.beta_regression import BetaRegressionSpec, build_model

logger = logging.getLogger(__name__)

__all__ = [
    "Sampler",
    "PyMCSampler",
    "FitCache",
    "diagnostics",
    "summarize_posterior",
    "sample_posterior_predictive",
    "save_inference",
    "load_inference",
]


class Sampler(Protocol):
    """Anything that turns a model spec and a dataset into posterior draws."""
    def fit(
        self,
        spec: BetaRegressionSpec,
        dataset: pd.DataFrame,
        *,
        chains: int,
        draws: int,
    ) -> InferenceData: ...


class PyMCSampler:
    """NUTS via ``pm.sample``; keeps per-observation log-likelihood for WAIC."""

    def __init__(
        self,
        *,
        tune: int = config.BAYESIAN_TUNE,
        target_accept: float = config.TARGET_ACCEPT,
        random_seed: Optional[int] = config.RANDOM_SEED,
        cores: Optional[int] = None,
        progressbar: bool = True,
    ) -> None:
        self.tune = tune
        self.target_accept = target_accept
        self.random_seed = random_seed
        self.cores = cores
        self.progressbar = progressbar

    def fit(
        self,
        spec: BetaRegressionSpec,
        dataset: pd.DataFrame,
        *,
        chains: int = config.BAYESIAN_CHAINS,
        draws: int = config.BAYESIAN_DRAWS,
    ) -> InferenceData:
        model = build_model(spec, dataset)
        logger.info("Sampling %s: %d chains × %d draws (%d tune)",
                    spec.name, chains, draws, self.tune)
        with model:
            idata = pm.sample(
                draws=draws,
                tune=self.tune,
                chains=chains,
                cores=self.cores,
                target_accept=self.target_accept,
                random_seed=self.random_seed,
                progressbar=self.progressbar,
                idata_kwargs={"log_likelihood": True},
                return_inferencedata=True,
            )
        return cast(InferenceData, idata)


# ---------------------------------------------------------------------
# 🩺  Diagnostics & summaries
# ---------------------------------------------------------------------
def diagnostics(
    idata: InferenceData,
    var_names: Optional[list[str]] = None,
    *,
    rhat_max: float = config.RHAT_MAX,
    ess_min: float = config.ESS_MIN,
) -> Dict[str, Any]:
    """
    R-hat and bulk ESS for the sampled parameters.

    Returns
    -------
    dict
        Keys: rhat, ess (xarray.Dataset), rhat_max, ess_min (float),
        summary_ok (bool). Poor values are only reported, never acted on.
    """
    if not hasattr(idata, "posterior"):
        raise RuntimeError("InferenceData object has no posterior group")

    rhats = cast(Dataset, az.rhat(idata, var_names=var_names))
    ess = cast(Dataset, az.ess(idata, var_names=var_names))

    rhat_vals = rhats.to_array().values.ravel()
    ess_vals = ess.to_array().values.ravel()

    out = {
        "rhat": rhats,
        "ess": ess,
        "rhat_max": float(np.nanmax(rhat_vals)),
        "ess_min": float(np.nanmin(ess_vals)),
    }
    out["summary_ok"] = bool(out["rhat_max"] <= rhat_max and out["ess_min"] >= ess_min)
    if not out["summary_ok"]:
        logger.warning("⚠️  Sampling diagnostics outside recommended thresholds "
                       "(R-hat max %.3f, ESS min %.0f)", out["rhat_max"], out["ess_min"])
    return out


def summarize_posterior(
    idata: InferenceData,
    spec: BetaRegressionSpec,
    hdi_prob: float = 0.94,
) -> pd.DataFrame:
    """Posterior mean, sd, HDI, ESS and R-hat for the model's parameters."""
    return cast(pd.DataFrame, az.summary(idata, var_names=spec.param_names, hdi_prob=hdi_prob))


def sample_posterior_predictive(
    spec: BetaRegressionSpec,
    dataset: pd.DataFrame,
    idata: InferenceData,
    random_seed: Optional[int] = None,
) -> InferenceData:
    """Posterior predictive whiff rates for the pitchers in *dataset*."""
    model = build_model(spec, dataset)
    with model:
        ppc = pm.sample_posterior_predictive(
            idata,
            var_names=[spec.response],
            random_seed=random_seed,
            progressbar=False,
            return_inferencedata=True,
        )
    return cast(InferenceData, ppc)


# ---------------------------------------------------------------------
# 💾  Persistence
# ---------------------------------------------------------------------
def save_inference(idata: InferenceData, path: Path | str) -> Path:
    """Persist an ArviZ InferenceData object to a NetCDF file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    idata.to_netcdf(str(path))
    return path


def load_inference(path: Path | str) -> InferenceData:
    """Reload a NetCDF file into an ArviZ InferenceData object."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"No saved fit at {path}")
    return az.from_netcdf(str(path))


class FitCache:
    """
    Whole-fit cache: one NetCDF file per model name under *cache_dir*.

    With ``refit=False`` a missing file is an error; there is no fallback to
    sampling. Nothing checks whether the cached fit matches the current spec
    or data.
    """

    def __init__(self, cache_dir: Path | str, *, refit: bool = True) -> None:
        self.cache_dir = Path(cache_dir)
        self.refit = refit

    def path_for(self, spec: BetaRegressionSpec) -> Path:
        return self.cache_dir / f"{spec.name}.nc"

    def load_or_fit(
        self,
        spec: BetaRegressionSpec,
        dataset: pd.DataFrame,
        sampler: Sampler,
        *,
        chains: int = config.BAYESIAN_CHAINS,
        draws: int = config.BAYESIAN_DRAWS,
    ) -> InferenceData:
        path = self.path_for(spec)
        if not self.refit:
            logger.info("Loading cached %s fit from %s", spec.name, path)
            return load_inference(path)

        idata = sampler.fit(spec, dataset, chains=chains, draws=draws)
        save_inference(idata, path)
        logger.info("Saved %s fit to %s", spec.name, path)
        return idata
