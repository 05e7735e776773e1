"""Utils module for whiff-rate analysis."""

from .metrics import BayesianEvaluator, compare_models

__all__ = ['BayesianEvaluator', 'compare_models']
