"""
Data loading module for whiff-rate analysis.
Handles loading and merging of the three raw leaderboard exports.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import pandas as pd

from whiff_analysis.config import config

logger = logging.getLogger(__name__)

ID_COLUMN = "player_id"
# Only these columns are taken from the whiff and extension exports
WHIFF_COLUMNS = [ID_COLUMN, "whiff_percent"]
EXTENSION_COLUMNS = [ID_COLUMN, "avg_release_extension"]


class DataLoader:
    """Handles loading and merging of the pitcher leaderboard datasets."""

    def __init__(self):
        """Initialize the data loader."""
        self.core_df: pd.DataFrame | None = None
        self.whiff_df: pd.DataFrame | None = None
        self.extension_df: pd.DataFrame | None = None
        self.merged_df: pd.DataFrame | None = None
        self.n_dropped: int = 0

    @staticmethod
    def _read(filepath: Path, label: str) -> pd.DataFrame:
        try:
            df = pd.read_csv(filepath)
        except FileNotFoundError:
            raise FileNotFoundError(f"{label} data file not found: {filepath}")
        logger.info("Loaded %d %s rows from %s", len(df), label, filepath)
        return df

    def load_core(self, filepath: Optional[Path] = None) -> pd.DataFrame:
        """
        Load the core pitch stats (velocity, spin, induced vertical break, arm angle).

        Args:
            filepath: Optional path to the core stats CSV file

        Returns:
            DataFrame with one row per pitcher
        """
        self.core_df = self._read(filepath or config.CORE_STATS_FILE, "core stats")
        return self.core_df

    def load_whiff(self, filepath: Optional[Path] = None) -> pd.DataFrame:
        """Load whiff percentages."""
        self.whiff_df = self._read(filepath or config.WHIFF_FILE, "whiff")
        return self.whiff_df

    def load_extension(self, filepath: Optional[Path] = None) -> pd.DataFrame:
        """Load release extension."""
        self.extension_df = self._read(filepath or config.EXTENSION_FILE, "extension")
        return self.extension_df

    @staticmethod
    def _check_ids(df: pd.DataFrame, label: str) -> None:
        if ID_COLUMN not in df.columns:
            raise KeyError(f"{label} table has no '{ID_COLUMN}' column")
        dupes = df[ID_COLUMN].duplicated()
        if dupes.any():
            raise ValueError(
                f"{label} table has {int(dupes.sum())} duplicated {ID_COLUMN} values"
            )

    @staticmethod
    def _select(df: pd.DataFrame, columns: list[str], label: str) -> pd.DataFrame:
        missing = [c for c in columns if c not in df.columns]
        if missing:
            raise KeyError(f"{label} table is missing columns: {missing}")
        return df[columns]

    def merge_datasets(self) -> pd.DataFrame:
        """
        Left-join the whiff and extension tables onto the core table, then keep
        complete cases only.

        Returns:
            Merged DataFrame with no missing values; never longer than the core table
        """
        if self.core_df is None:
            self.load_core()
        if self.whiff_df is None:
            self.load_whiff()
        if self.extension_df is None:
            self.load_extension()

        for label, df in (("core", self.core_df),
                          ("whiff", self.whiff_df),
                          ("extension", self.extension_df)):
            self._check_ids(df, label)

        whiff = self._select(self.whiff_df, WHIFF_COLUMNS, "whiff")
        extension = self._select(self.extension_df, EXTENSION_COLUMNS, "extension")
        merged = (
            self.core_df
            .merge(whiff, on=ID_COLUMN, how="left", validate="one_to_one")
            .merge(extension, on=ID_COLUMN, how="left", validate="one_to_one")
        )

        before = len(merged)
        merged = merged.dropna().reset_index(drop=True)
        self.n_dropped = before - len(merged)
        if self.n_dropped:
            logger.info("Dropped %d incomplete rows after merge", self.n_dropped)

        self.merged_df = merged
        logger.info("Merged dataset: %d pitchers, %d columns", *merged.shape)
        return self.merged_df

    def load_complete_dataset(
        self,
        core_path: Optional[Path] = None,
        whiff_path: Optional[Path] = None,
        extension_path: Optional[Path] = None,
    ) -> pd.DataFrame:
        """
        Load and merge complete dataset in one call.

        Returns:
            Complete merged DataFrame
        """
        self.load_core(core_path)
        self.load_whiff(whiff_path)
        self.load_extension(extension_path)
        return self.merge_datasets()

    def get_data_summary(self) -> dict:
        """
        Get summary statistics of loaded data.

        Returns:
            Dictionary with data summary information
        """
        if self.merged_df is None:
            raise ValueError("No data loaded. Call load_complete_dataset() first.")

        numeric = self.merged_df.select_dtypes("number").drop(columns=[ID_COLUMN], errors="ignore")
        return {
            "total_pitchers": len(self.merged_df),
            "unique_pitchers": int(self.merged_df[ID_COLUMN].nunique()),
            "core_rows": len(self.core_df) if self.core_df is not None else None,
            "rows_dropped": self.n_dropped,
            "ranges": {c: (float(numeric[c].min()), float(numeric[c].max())) for c in numeric.columns},
        }


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s │ %(levelname)s │ %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    loader = DataLoader()
    try:
        df = loader.load_complete_dataset()
        print(df.head())
        print(loader.get_data_summary())
    except FileNotFoundError as e:
        print(f"------------- Error testing DataLoader: {e}")
        print("Note: This is expected if data files are not present.")
