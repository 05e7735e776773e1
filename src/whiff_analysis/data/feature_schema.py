"""
FeatureSchema – canonical column lists for preprocessing & modelling.
"""
from dataclasses import dataclass, field
from typing import List

from whiff_analysis.config import FEATURE_LISTS


@dataclass
class FeatureSchema:
    """Container class listing every column by role."""
    ids:       List[str] = field(default_factory=lambda: list(FEATURE_LISTS["id"]))
    numerical: List[str] = field(default_factory=lambda: list(FEATURE_LISTS["numerical"]))
    target:    str       = FEATURE_LISTS["y_variable"][0]

    @property
    def all_columns(self) -> List[str]:
        return self.ids + self.numerical + [self.target]

    def assert_in_dataframe(self, df) -> None:
        """Raise if any declared column is missing from df.columns."""
        missing = [c for c in self.all_columns if c not in df.columns]
        if missing:
            raise ValueError(f"FeatureSchema mismatch – missing cols: {missing}")
