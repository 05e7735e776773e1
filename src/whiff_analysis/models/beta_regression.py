"""
Beta regression of pitcher whiff rate.

    whiff_rate[i] ~ Beta(alpha[i], beta[i])
    omega[i]      = invlogit(b0 + sum_k b_k * term_k[i])
    alpha[i]      = omega[i] * kappa + 1
    beta[i]       = (1 - omega[i]) * kappa + 1

The full model carries six slopes (velocity, spin, extension, the
arm-angle × IVB interaction, arm angle, IVB); the reduced model drops the
velocity term and its prior entirely.

The numpy helpers here (``linear_predictor``, ``mean_response``,
``beta_shape``) are shared by the PyMC model, the prior predictive simulator
and the tests, so every consumer agrees on the same mapping.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Tuple

import numpy as np
import pandas as pd
import pymc as pm
from scipy.special import expit

from whiff_analysis.config import FEATURE_ROLES, config

__all__ = [
    "Term",
    "BetaRegressionSpec",
    "FULL_MODEL",
    "REDUCED_MODEL",
    "design_matrix",
    "linear_predictor",
    "mean_response",
    "beta_shape",
    "build_model",
    "missing_roles",
]


@dataclass(frozen=True)
class Term:
    """One slope in the linear predictor: coefficient name and the columns multiplied together."""
    coef: str
    columns: Tuple[str, ...]

    def values(self, df: pd.DataFrame) -> np.ndarray:
        out = np.ones(len(df), dtype=float)
        for c in self.columns:
            out = out * df[c].to_numpy(float)
        return out


@dataclass(frozen=True)
class BetaRegressionSpec:
    """Declarative description of one beta-regression variant and its priors."""
    name: str
    terms: Tuple[Term, ...]
    response: str = "whiff_rate"
    intercept: str = "b0"
    intercept_mu: float = config.INTERCEPT_PRIOR_MU
    intercept_sigma: float = config.INTERCEPT_PRIOR_SIGMA
    slope_alpha: float = config.SLOPE_PRIOR_ALPHA
    slope_beta: float = config.SLOPE_PRIOR_BETA
    kappa_mu: float = config.KAPPA_PRIOR_MU
    kappa_sigma: float = config.KAPPA_PRIOR_SIGMA

    @property
    def coef_names(self) -> List[str]:
        return [self.intercept] + [t.coef for t in self.terms]

    @property
    def param_names(self) -> List[str]:
        """Free parameters in sampling order."""
        return self.coef_names + ["kappa"]

    @property
    def columns(self) -> List[str]:
        """Every data column the linear predictor reads."""
        seen: Dict[str, None] = {}
        for t in self.terms:
            for c in t.columns:
                seen.setdefault(c, None)
        return list(seen)

    def without(self, coef: str, *, name: str) -> "BetaRegressionSpec":
        """Nested variant with the term for *coef* removed (not fixed at zero)."""
        if coef not in [t.coef for t in self.terms]:
            raise KeyError(f"{self.name} has no term '{coef}'")
        kept = tuple(t for t in self.terms if t.coef != coef)
        return BetaRegressionSpec(
            name=name,
            terms=kept,
            response=self.response,
            intercept=self.intercept,
            intercept_mu=self.intercept_mu,
            intercept_sigma=self.intercept_sigma,
            slope_alpha=self.slope_alpha,
            slope_beta=self.slope_beta,
            kappa_mu=self.kappa_mu,
            kappa_sigma=self.kappa_sigma,
        )


FULL_MODEL = BetaRegressionSpec(
    name="full",
    terms=(
        Term("b1", ("velo",)),
        Term("b2", ("spin_rate",)),
        Term("b3", ("extension",)),
        Term("b4", ("arm_angle", "ivb")),
        Term("b5", ("arm_angle",)),
        Term("b6", ("ivb",)),
    ),
)

REDUCED_MODEL = FULL_MODEL.without("b1", name="no_velo")


def missing_roles(
    spec: BetaRegressionSpec,
    roles: Mapping[str, List[str]] = FEATURE_ROLES,
) -> Dict[str, List[str]]:
    """Causal-diagram variables (by role) that the model leaves out of its linear predictor."""
    used = set(spec.columns) | {spec.response}
    absent = {role: [v for v in names if v not in used] for role, names in roles.items()}
    return {role: names for role, names in absent.items() if names}


# ---------------------------------------------------------------------
# 🧮  Deterministic mapping
# ---------------------------------------------------------------------
def design_matrix(spec: BetaRegressionSpec, df: pd.DataFrame) -> np.ndarray:
    """(n_obs, n_terms) matrix of term values, in ``spec.terms`` order."""
    missing = [c for c in spec.columns if c not in df.columns]
    if missing:
        raise KeyError(f"Dataset is missing columns for {spec.name}: {missing}")
    if not spec.terms:
        return np.zeros((len(df), 0), dtype=float)
    return np.column_stack([t.values(df) for t in spec.terms])


def linear_predictor(
    spec: BetaRegressionSpec,
    coefs: Mapping[str, float | np.ndarray],
    df: pd.DataFrame,
) -> np.ndarray:
    """
    b0 + X @ b for one coefficient set, or for a batch when each coefficient
    is a 1-D array of length n_sim (result shape ``(n_sim, n_obs)``).
    """
    X = design_matrix(spec, df)
    b0 = np.asarray(coefs[spec.intercept], dtype=float)
    slopes = [np.asarray(coefs[t.coef], dtype=float) for t in spec.terms]
    if b0.ndim == 0:
        b = np.array([float(s) for s in slopes])
        return b0 + X @ b
    B = np.column_stack(slopes) if slopes else np.zeros((b0.shape[0], 0))
    return b0[:, None] + B @ X.T


def mean_response(
    spec: BetaRegressionSpec,
    coefs: Mapping[str, float | np.ndarray],
    df: pd.DataFrame,
) -> np.ndarray:
    """omega = invlogit(linear predictor)."""
    return expit(linear_predictor(spec, coefs, df))


def beta_shape(omega: np.ndarray, kappa: float | np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Map mean ``omega`` and concentration ``kappa`` onto Beta(alpha, beta)."""
    kappa = np.asarray(kappa, dtype=float)
    if np.any(kappa < 0):
        raise ValueError("kappa must be non-negative")
    if kappa.ndim == 1 and np.ndim(omega) == 2:
        kappa = kappa[:, None]
    alpha = omega * kappa + 1.0
    beta = (1.0 - omega) * kappa + 1.0
    return alpha, beta


# ---------------------------------------------------------------------
# 🔨  Model construction
# ---------------------------------------------------------------------
def build_model(spec: BetaRegressionSpec, df: pd.DataFrame) -> pm.Model:
    """
    Declare the PyMC model for *spec* over the standardized dataset *df*.

    Term columns are registered as ``pm.Data`` so a fitted model can be
    pointed at new pitchers with ``pm.set_data``.
    """
    X = design_matrix(spec, df)
    y = df[spec.response].to_numpy(float)
    coords = {"obs_id": np.arange(len(df))}

    with pm.Model(coords=coords) as model:
        # Population-level effects
        b0 = pm.Normal(spec.intercept, spec.intercept_mu, spec.intercept_sigma)
        eta = b0
        for j, term in enumerate(spec.terms):
            x_j = pm.Data(f"x_{term.coef}", X[:, j], dims="obs_id")
            b_j = pm.Cauchy(term.coef, alpha=spec.slope_alpha, beta=spec.slope_beta)
            eta = eta + b_j * x_j

        # LogNormal support keeps kappa strictly positive
        kappa = pm.LogNormal("kappa", mu=spec.kappa_mu, sigma=spec.kappa_sigma)

        omega = pm.Deterministic("omega", pm.math.invlogit(eta), dims="obs_id")
        alpha = pm.Deterministic("alpha", omega * kappa + 1, dims="obs_id")
        beta = pm.Deterministic("beta", (1 - omega) * kappa + 1, dims="obs_id")

        y_obs = pm.Data("y_obs", y, dims="obs_id")
        pm.Beta(spec.response, alpha=alpha, beta=beta, observed=y_obs, dims="obs_id")
    return model
