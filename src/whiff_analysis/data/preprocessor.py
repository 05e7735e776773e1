"""
Data preprocessing module for whiff-rate analysis.

Two passes:

* ``clean`` turns the merged leaderboard export into the canonical modelling
  table (canonical names, "first last" display name, whiff rate as a proportion)
  which is persisted with ``save_canonical``.
* ``prepare_for_model`` z-scores the predictors and nudges exact-zero whiff
  rates off the boundary so the beta likelihood is defined everywhere.

The z-score parameters are returned as a :class:`ScalingParams` so the fitted
model can be applied to new pitchers on the same scale.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, cast

import numpy as np
import pandas as pd

from whiff_analysis.config import CANONICAL_COLUMNS, RAW_COLUMN_MAP, config
from whiff_analysis.data.feature_schema import FeatureSchema

logger = logging.getLogger(__name__)

NAME_COLUMN = "last_name, first_name"
NAME_SEPARATOR = ", "


def split_name(raw: str) -> Tuple[str, str]:
    """Split a ``"last, first"`` string into ``(first, last)``."""
    last, _, first = str(raw).partition(NAME_SEPARATOR)
    if not first:
        # Savant occasionally drops the space after the comma
        last, _, first = str(raw).partition(",")
    return first.strip(), last.strip()


def reconstruct_name(raw: str) -> str:
    """``"Cole, Gerrit"`` → ``"Gerrit Cole"``."""
    first, last = split_name(raw)
    return f"{first} {last}".strip()


@dataclass
class ScalingParams:
    """Column means and standard deviations used to z-score the predictors."""
    mean: Dict[str, float] = field(default_factory=dict)
    std: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def fit(cls, df: pd.DataFrame, columns: List[str]) -> "ScalingParams":
        return cls(
            mean={c: float(df[c].mean()) for c in columns},
            std={c: float(df[c].std()) for c in columns},
        )

    @property
    def columns(self) -> List[str]:
        return list(self.mean)

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """Apply the stored z-score to *df* (returns a copy)."""
        out = df.copy()
        for c in self.columns:
            sd = self.std[c]
            if not np.isfinite(sd) or sd == 0:
                raise ValueError(f"Cannot standardize '{c}': standard deviation is {sd}")
            out[c] = (out[c] - self.mean[c]) / sd
        return out

    def inverse_transform(self, df: pd.DataFrame) -> pd.DataFrame:
        """Map standardized columns back to their raw scale."""
        out = df.copy()
        for c in self.columns:
            if c in out.columns:
                out[c] = out[c] * self.std[c] + self.mean[c]
        return out

    def save(self, path: Path | str) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        # Round floats to avoid JSON drift
        payload = {
            "mean": {k: round(v, 12) for k, v in self.mean.items()},
            "std": {k: round(v, 12) for k, v in self.std.items()},
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        return path

    @classmethod
    def load(cls, path: Path | str) -> "ScalingParams":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"No scaling parameters at {path}")
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
        return cls(
            mean={k: float(v) for k, v in payload["mean"].items()},
            std={k: float(v) for k, v in payload["std"].items()},
        )


class DataPreprocessor:
    """Cleans merged leaderboard data and prepares it for the beta regression."""

    def __init__(self, schema: Optional[FeatureSchema] = None,
                 zero_replacement: float = config.ZERO_WHIFF_REPLACEMENT):
        self.schema = schema or FeatureSchema()
        self.zero_replacement = zero_replacement
        self.scaling_: ScalingParams | None = None

    # ------------------------------------------------------------------
    # First pass
    # ------------------------------------------------------------------
    def rename_columns(self, df: pd.DataFrame) -> pd.DataFrame:
        """Map raw leaderboard names onto canonical ones."""
        return df.rename(columns=RAW_COLUMN_MAP)

    def rebuild_names(self, df: pd.DataFrame) -> pd.DataFrame:
        """Replace the ``"last, first"`` column with a ``name`` column."""
        if NAME_COLUMN not in df.columns:
            if "name" in df.columns:
                return df
            raise KeyError(f"Expected a '{NAME_COLUMN}' column to build display names")
        out = df.copy()
        out["name"] = out[NAME_COLUMN].map(reconstruct_name)
        return out.drop(columns=[NAME_COLUMN])

    def rescale_whiff(self, df: pd.DataFrame) -> pd.DataFrame:
        """Whiff percentage (0–100) → proportion (0–1)."""
        out = df.copy()
        out["whiff_rate"] = out["whiff_rate"] / 100.0
        return out

    def clean(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Turn a merged leaderboard frame into the canonical modelling table.

        Args:
            df: Output of ``DataLoader.merge_datasets``

        Returns:
            DataFrame with exactly ``CANONICAL_COLUMNS``
        """
        out = self.rename_columns(df)
        out = self.rebuild_names(out)
        out = out.drop(columns=["year"], errors="ignore")
        out = self.rescale_whiff(out)

        missing = [c for c in CANONICAL_COLUMNS if c not in out.columns]
        if missing:
            raise KeyError(f"Merged data is missing columns: {missing}")
        out = out[CANONICAL_COLUMNS].reset_index(drop=True)
        logger.info("Cleaned %d pitchers into canonical layout", len(out))
        return out

    @staticmethod
    def save_canonical(df: pd.DataFrame, path: Path | str = config.MODELING_DATA_FILE) -> Path:
        """Persist the canonical (unstandardized) modelling table."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(path, index=False)
        logger.info("Wrote canonical dataset to %s", path)
        return path

    @staticmethod
    def load_canonical(path: Path | str = config.MODELING_DATA_FILE) -> pd.DataFrame:
        try:
            df = pd.read_csv(path)
        except FileNotFoundError:
            raise FileNotFoundError(f"Canonical dataset not found: {path}")
        FeatureSchema().assert_in_dataframe(df)
        return df

    # ------------------------------------------------------------------
    # Second pass
    # ------------------------------------------------------------------
    def fix_boundary_whiffs(self, df: pd.DataFrame) -> pd.DataFrame:
        """Validate the response range and move exact zeros inside (0, 1)."""
        y = df[self.schema.target]
        if ((y < 0) | (y > 1)).any() or y.isna().any():
            raise ValueError(f"{self.schema.target} must be a proportion in [0, 1]")
        if (y == 1).any():
            raise ValueError(f"{self.schema.target} of exactly 1 is outside the beta support")

        out = df.copy()
        zeros = out[self.schema.target] == 0
        if zeros.any():
            logger.info("Replacing %d zero whiff rates with %g", int(zeros.sum()), self.zero_replacement)
            out.loc[zeros, self.schema.target] = self.zero_replacement
        return out

    def standardize(self, df: pd.DataFrame, *, fit: bool = True) -> pd.DataFrame:
        """Z-score the predictor columns; ``fit=False`` reuses stored parameters."""
        if fit:
            self.scaling_ = ScalingParams.fit(df, self.schema.numerical)
        elif self.scaling_ is None:
            raise RuntimeError("Scaling parameters not fitted. Call standardize(fit=True) first.")
        return self.scaling_.transform(df)

    def prepare_for_model(self, df: pd.DataFrame) -> Tuple[pd.DataFrame, ScalingParams]:
        """
        Standardize predictors and repair boundary responses.

        Returns:
            (standardized DataFrame, ScalingParams used)
        """
        self.schema.assert_in_dataframe(df)
        out = self.fix_boundary_whiffs(df)
        out = self.standardize(out, fit=True)
        return out, cast(ScalingParams, self.scaling_)
