"""
Whiff Rate Analysis Package
Bayesian beta regression of MLB pitcher whiff rate on velocity and pitch shape.
"""

__version__ = "1.0.0"

# Import main classes for easy access
from .config import PipelineConfig, config
from .data.loader import DataLoader
from .data.preprocessor import DataPreprocessor

__all__ = [
    'config',
    'PipelineConfig',
    'DataLoader',
    'DataPreprocessor',
]
