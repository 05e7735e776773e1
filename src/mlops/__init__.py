"""MLflow experiment tracking for the whiff-rate models."""

from .experiment_utils import setup_mlflow_experiment
from .logging import log_comparison, log_figure, log_model_fit, log_parameters

__all__ = [
    "setup_mlflow_experiment",
    "log_comparison",
    "log_figure",
    "log_model_fit",
    "log_parameters",
]
