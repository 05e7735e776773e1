"""Models module for whiff-rate analysis."""

from .beta_regression import FULL_MODEL, REDUCED_MODEL, BetaRegressionSpec, build_model
from .prior_predictive import simulate_prior_predictive
from .sampler import FitCache, PyMCSampler

__all__ = [
    'FULL_MODEL',
    'REDUCED_MODEL',
    'BetaRegressionSpec',
    'build_model',
    'simulate_prior_predictive',
    'FitCache',
    'PyMCSampler',
]
