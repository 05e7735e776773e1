"""
End-to-end pipeline tests with a stand-in sampler.
"""
import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from whiff_analysis.config import CANONICAL_COLUMNS, PipelineConfig
from whiff_analysis.data.preprocessor import ScalingParams
from whiff_analysis.pipeline import run_pipeline
from conftest import FakeSampler


@pytest.fixture
def cfg(tmp_path, raw_files):
    return PipelineConfig.from_config(
        core_path=raw_files["core"],
        whiff_path=raw_files["whiff"],
        extension_path=raw_files["extension"],
        dataset_path=tmp_path / "processed" / "modeling.csv",
        scaling_path=tmp_path / "processed" / "scaling.json",
        comparison_path=tmp_path / "output" / "comparison.csv",
        cache_dir=tmp_path / "fits",
        chains=2,
        draws=100,
        n_prior_sims=10,
        random_seed=123,
    )


class TestRunPipeline:

    def test_full_run(self, cfg):
        sampler = FakeSampler()
        result = run_pipeline(cfg, sampler)

        assert sampler.calls == ["full", "no_velo"]
        assert list(result.canonical.columns) == CANONICAL_COLUMNS
        assert len(result.modeling) == len(result.canonical)
        assert len(result.prior_sims) == 10 * len(result.modeling)
        assert set(result.fits) == {"full", "no_velo"}
        assert np.isfinite(result.info_criteria["full"]["waic"])
        assert np.isfinite(result.info_criteria["no_velo"]["psis_loo"])
        assert list(result.comparison["rank"]) == [0, 1]
        assert result.report

        # Persisted artefacts
        on_disk = pd.read_csv(cfg.dataset_path)
        assert list(on_disk.columns) == CANONICAL_COLUMNS
        assert on_disk["velo"].mean() > 50  # stored before standardization
        assert ScalingParams.load(cfg.scaling_path).columns == result.scaling.columns
        assert cfg.comparison_path.exists()
        assert (cfg.cache_dir / "full.nc").exists()
        assert (cfg.cache_dir / "no_velo.nc").exists()

    def test_cached_rerun_skips_sampling(self, cfg):
        run_pipeline(cfg, FakeSampler())

        sampler = FakeSampler()
        again = run_pipeline(
            PipelineConfig.from_config(**{**cfg.__dict__, "refit": False}), sampler,
            prior_check=False,
        )

        assert sampler.calls == []
        assert again.prior_sims is None
        assert set(again.fits) == {"full", "no_velo"}

    def test_missing_cache_is_fatal(self, cfg):
        no_cache = PipelineConfig.from_config(**{**cfg.__dict__, "refit": False})
        with pytest.raises(FileNotFoundError):
            run_pipeline(no_cache, FakeSampler())

    def test_incomplete_rows_dropped(self, cfg, raw_tables, tmp_path):
        core, whiff, extension = raw_tables
        whiff.iloc[:5].to_csv(tmp_path / "short_whiff.csv", index=False)
        short = PipelineConfig.from_config(**{**cfg.__dict__,
                                              "whiff_path": tmp_path / "short_whiff.csv"})

        result = run_pipeline(short, FakeSampler(), prior_check=False)

        assert len(result.canonical) == 5


def test_pipeline_logs_to_mlflow(cfg, tmp_path, monkeypatch):
    import mlflow

    # Artifacts land under the working directory
    monkeypatch.chdir(tmp_path)
    tracked = PipelineConfig.from_config(
        **{**cfg.__dict__,
           "track_with_mlflow": True,
           "tracking_uri": f"sqlite:///{(tmp_path / 'mlflow.db').as_posix()}",
           "experiment_name": "whiff_test"}
    )
    run_pipeline(tracked, FakeSampler())

    runs = mlflow.search_runs(experiment_names=["whiff_test"])
    assert len(runs) == 1
    assert "metrics.full_waic" in runs.columns
    assert "metrics.no_velo_elpd_diff" in runs.columns


def test_unreachable_server_falls_back_to_sqlite(tmp_path, monkeypatch):
    from mlops.experiment_utils import setup_mlflow_experiment

    monkeypatch.chdir(tmp_path)
    uri = setup_mlflow_experiment("whiff_fallback", "http://127.0.0.1:1")

    assert uri.startswith("sqlite:///")
    assert (tmp_path / "mlruns_local" / "mlflow.db").exists()
