# tasks.py  ── invoke ≥2.2
from invoke import task, Context  # type: ignore

import pathlib
import shutil

BASE_ENV = pathlib.Path(__file__).parent
CACHE_DIR = BASE_ENV / "models" / "bayesian"


@task(
    help={
        "slow": "Also run the tests that sample with NUTS",
    }
)
def test(c: Context, slow: bool = False) -> None:
    """Run the pytest suite."""
    marker = "" if slow else " -m 'not slow'"
    c.run(f"pytest{marker}", pty=True)


@task(
    help={
        "refit": "Sample both models again instead of loading the cached fits",
        "mlflow": "Log the run to MLflow",
    }
)
def pipeline(c: Context, refit: bool = False, mlflow: bool = False) -> None:
    """Load data, fit the full and reduced models and compare them by WAIC."""
    import logging

    from whiff_analysis.config import PipelineConfig
    from whiff_analysis.pipeline import run_pipeline

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s │ %(levelname)s │ %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    cfg = PipelineConfig.from_config(refit=refit, track_with_mlflow=mlflow)
    result = run_pipeline(cfg)
    print(result.comparison.to_string())
    print(result.report)


@task(name="clean-cache")
def clean_cache(c: Context) -> None:
    """Delete cached NetCDF fits so the next run has to refit."""
    if CACHE_DIR.exists():
        shutil.rmtree(CACHE_DIR)
        print(f"🧹 Removed {CACHE_DIR}")
    else:
        print(f"Nothing to clean at {CACHE_DIR}")
