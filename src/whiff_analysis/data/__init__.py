"""
Data module for whiff-rate analysis.
"""

from .loader import DataLoader
from .preprocessor import DataPreprocessor, ScalingParams

__all__ = ['DataLoader', 'DataPreprocessor', 'ScalingParams']
