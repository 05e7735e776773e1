"""
Configuration module for the whiff-rate analysis package.
Contains all constants, paths, and configuration parameters.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List


class Config:
    """Main configuration class for the whiff-rate analysis package."""
    MLFLOW_EXPERIMENT_NAME = "whiff_rate_beta_regression"

    # Project root is two levels above this file's package directory
    _CONFIG_DIR = Path(__file__).parent.parent.parent
    PROJECT_ROOT = _CONFIG_DIR.resolve()

    DATA_DIR = PROJECT_ROOT / "data"
    RAW_DATA_DIR = DATA_DIR / "raw"
    PROCESSED_DATA_DIR = DATA_DIR / "processed"
    OUTPUT_DIR = PROJECT_ROOT / "output"
    MODELS_DIR = PROJECT_ROOT / "models"
    MODEL_DIR = MODELS_DIR / "bayesian"

    # Raw Baseball Savant leaderboard exports
    CORE_STATS_FILE = RAW_DATA_DIR / "pitch_arsenal_stats.csv"
    WHIFF_FILE = RAW_DATA_DIR / "whiff_percent.csv"
    EXTENSION_FILE = RAW_DATA_DIR / "release_extension.csv"

    # Processed data files
    MODELING_DATA_FILE = PROCESSED_DATA_DIR / "whiff_modeling_data.csv"
    SCALING_FILE = PROCESSED_DATA_DIR / "scaling.json"
    COMPARISON_FILE = OUTPUT_DIR / "waic_comparison.csv"

    # Model parameters
    BAYESIAN_DRAWS = 1000
    BAYESIAN_TUNE = 1000
    BAYESIAN_CHAINS = 4
    TARGET_ACCEPT = 0.9
    RANDOM_SEED = 2024

    # Priors
    INTERCEPT_PRIOR_MU = -1.283235   # logit of the league-average whiff rate (~0.217)
    INTERCEPT_PRIOR_SIGMA = 1.0
    SLOPE_PRIOR_ALPHA = 0.0
    SLOPE_PRIOR_BETA = 2.5
    KAPPA_PRIOR_MU = 0.0
    KAPPA_PRIOR_SIGMA = 2.0

    # Prior predictive checks
    N_PRIOR_SIMS = 100

    # The beta likelihood is undefined at 0
    ZERO_WHIFF_REPLACEMENT = 1e-10

    # Diagnostic thresholds
    RHAT_MAX = 1.01
    ESS_MIN = 100

    # Visualization settings
    FIGURE_SIZE = (12, 8)
    DPI = 100

    @classmethod
    def ensure_directories(cls):
        """Create all required directories if they don't exist."""
        for dir_path in [cls.RAW_DATA_DIR, cls.PROCESSED_DATA_DIR,
                         cls.OUTPUT_DIR, cls.MODEL_DIR]:
            dir_path.mkdir(parents=True, exist_ok=True)


# Create global config instance
config = Config()

# ───────────────────────── Feature catalogue ─────────────────────────
# Raw leaderboard column → canonical name
RAW_COLUMN_MAP: Dict[str, str] = {
    "avg_speed": "velo",
    "avg_spin": "spin_rate",
    "avg_break_z_induced": "ivb",
    "avg_release_extension": "extension",
    "whiff_percent": "whiff_rate",
}

FEATURE_LISTS: Dict[str, List[str]] = {
    "id": ["player_id", "name"],
    "numerical": ["arm_angle", "velo", "spin_rate", "ivb", "extension"],
    "y_variable": ["whiff_rate"],
}

# Roles each variable plays in the causal diagram for velo → whiff_rate
FEATURE_ROLES: Dict[str, List[str]] = {
    "exposure": ["velo"],
    "confounders": ["arm_angle", "extension"],
    "precision": ["spin_rate", "ivb"],
    "moderators": ["arm_angle"],
    "outcome": ["whiff_rate"],
}

# Canonical intermediate file layout
CANONICAL_COLUMNS: List[str] = [
    "player_id", "name", "velo", "spin_rate", "ivb",
    "extension", "arm_angle", "whiff_rate",
]

config.FEATURE_LISTS = FEATURE_LISTS
config.FEATURE_ROLES = FEATURE_ROLES


@dataclass(frozen=True)
class PipelineConfig:
    """Everything one pipeline run needs, passed explicitly instead of module globals."""
    core_path: Path = config.CORE_STATS_FILE
    whiff_path: Path = config.WHIFF_FILE
    extension_path: Path = config.EXTENSION_FILE
    dataset_path: Path = config.MODELING_DATA_FILE
    scaling_path: Path = config.SCALING_FILE
    comparison_path: Path = config.COMPARISON_FILE
    cache_dir: Path = config.MODEL_DIR
    refit: bool = True
    draws: int = config.BAYESIAN_DRAWS
    tune: int = config.BAYESIAN_TUNE
    chains: int = config.BAYESIAN_CHAINS
    target_accept: float = config.TARGET_ACCEPT
    random_seed: int | None = config.RANDOM_SEED
    n_prior_sims: int = config.N_PRIOR_SIMS
    track_with_mlflow: bool = False
    tracking_uri: str | None = None
    experiment_name: str = config.MLFLOW_EXPERIMENT_NAME
    tags: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_config(cls, cfg: Config = config, **overrides) -> "PipelineConfig":
        """Build a run configuration from the package defaults, then apply overrides."""
        base = cls(
            core_path=cfg.CORE_STATS_FILE,
            whiff_path=cfg.WHIFF_FILE,
            extension_path=cfg.EXTENSION_FILE,
            dataset_path=cfg.MODELING_DATA_FILE,
            scaling_path=cfg.SCALING_FILE,
            comparison_path=cfg.COMPARISON_FILE,
            cache_dir=cfg.MODEL_DIR,
            draws=cfg.BAYESIAN_DRAWS,
            tune=cfg.BAYESIAN_TUNE,
            chains=cfg.BAYESIAN_CHAINS,
            target_accept=cfg.TARGET_ACCEPT,
            random_seed=cfg.RANDOM_SEED,
            n_prior_sims=cfg.N_PRIOR_SIMS,
            experiment_name=cfg.MLFLOW_EXPERIMENT_NAME,
        )
        return replace(base, **overrides)


if __name__ == "__main__":
    print("Whiff-rate Analysis Configuration")
    print("=" * 40)
    print(f"Data directory: {config.DATA_DIR}")
    print(f"Draws/tune/chains: {config.BAYESIAN_DRAWS}/{config.BAYESIAN_TUNE}/{config.BAYESIAN_CHAINS}")
    print(f"Predictors: {FEATURE_LISTS['numerical']}")

    config.ensure_directories()
    print("******* Configuration loaded and directories created!")
