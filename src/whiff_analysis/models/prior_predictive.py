"""
Prior predictive simulation for the whiff-rate beta regression.

Draws every coefficient and kappa from its prior, pushes each draw through the
model's mean/concentration mapping for every pitcher, and samples one simulated
whiff rate per pitcher. The result is a diagnostic only; nothing downstream
fits on it.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from matplotlib.figure import Figure

from whiff_analysis.config import config
from whiff_analysis.models.beta_regression import (
    FULL_MODEL,
    BetaRegressionSpec,
    beta_shape,
    mean_response,
)

logger = logging.getLogger(__name__)


def draw_prior_parameters(
    spec: BetaRegressionSpec,
    n_sim: int,
    rng: np.random.Generator,
) -> Dict[str, np.ndarray]:
    """One array of length *n_sim* per parameter in ``spec.param_names``."""
    params: Dict[str, np.ndarray] = {
        spec.intercept: rng.normal(spec.intercept_mu, spec.intercept_sigma, size=n_sim),
    }
    for term in spec.terms:
        params[term.coef] = spec.slope_alpha + spec.slope_beta * rng.standard_cauchy(size=n_sim)
    params["kappa"] = rng.lognormal(spec.kappa_mu, spec.kappa_sigma, size=n_sim)
    return params


def simulate_prior_predictive(
    df: pd.DataFrame,
    spec: BetaRegressionSpec = FULL_MODEL,
    n_sim: int = config.N_PRIOR_SIMS,
    random_seed: Optional[int] = None,
) -> pd.DataFrame:
    """
    Simulate whiff rates implied by the priors alone.

    Parameters
    ----------
    df : standardized modelling frame
    spec : model variant whose priors are simulated
    n_sim : number of prior draws
    random_seed : seed for reproducible output

    Returns
    -------
    DataFrame
        Long table with columns ``sim_id``, ``obs_id``, ``whiff_rate_sim``
        (``n_sim * len(df)`` rows).
    """
    if n_sim < 1:
        raise ValueError("n_sim must be a positive integer")

    rng = np.random.default_rng(random_seed)
    params = draw_prior_parameters(spec, n_sim, rng)

    omega = mean_response(spec, params, df)            # (n_sim, n_obs)
    alpha, beta = beta_shape(omega, params["kappa"])
    y_sim = rng.beta(alpha, beta)

    n_obs = len(df)
    sims = pd.DataFrame({
        "sim_id": np.repeat(np.arange(n_sim), n_obs),
        "obs_id": np.tile(np.arange(n_obs), n_sim),
        "whiff_rate_sim": y_sim.ravel(),
    })
    logger.info("Simulated %d prior predictive draws over %d pitchers", n_sim, n_obs)
    return sims


def plot_prior_predictive(
    sims: pd.DataFrame,
    observed: Optional[pd.Series] = None,
    *,
    max_lines: int = 100,
) -> Figure:
    """Density of each simulated dataset, with the observed whiff rates on top."""
    fig, ax = plt.subplots(figsize=config.FIGURE_SIZE, dpi=config.DPI)
    for sim_id in sims["sim_id"].unique()[:max_lines]:
        vals = sims.loc[sims["sim_id"] == sim_id, "whiff_rate_sim"]
        if vals.nunique() < 2:
            continue
        sns.kdeplot(vals, ax=ax, color="steelblue", alpha=0.15, linewidth=1,
                    clip=(0, 1), warn_singular=False)
    if observed is not None:
        sns.kdeplot(observed, ax=ax, color="black", linewidth=2.5,
                    clip=(0, 1), label="Observed")
        ax.legend()
    ax.set_xlim(0, 1)
    ax.set_xlabel("Whiff rate")
    ax.set_title("Prior predictive whiff-rate distributions")
    plt.tight_layout()
    return fig
