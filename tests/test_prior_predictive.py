"""
Tests for prior predictive simulation.
"""
import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest
from matplotlib.figure import Figure

from whiff_analysis.models.beta_regression import FULL_MODEL, REDUCED_MODEL
from whiff_analysis.models.prior_predictive import (
    draw_prior_parameters,
    plot_prior_predictive,
    simulate_prior_predictive,
)


@pytest.fixture
def one_pitcher():
    return pd.DataFrame({
        "player_id": [1], "name": ["Gerrit Cole"],
        "velo": [0.4], "spin_rate": [1.1], "ivb": [0.7],
        "extension": [0.2], "arm_angle": [0.5], "whiff_rate": [0.27],
    })


@pytest.fixture
def pitchers():
    rng = np.random.default_rng(3)
    n = 12
    cols = ["velo", "spin_rate", "ivb", "extension", "arm_angle"]
    df = pd.DataFrame(rng.normal(size=(n, len(cols))), columns=cols)
    df["whiff_rate"] = rng.uniform(0.1, 0.4, n)
    return df


class TestSimulatePriorPredictive:

    def test_single_draw_single_row_reproducible(self, one_pitcher):
        first = simulate_prior_predictive(one_pitcher, n_sim=1, random_seed=42)
        second = simulate_prior_predictive(one_pitcher, n_sim=1, random_seed=42)

        assert len(first) == 1
        assert first["whiff_rate_sim"].iloc[0] == second["whiff_rate_sim"].iloc[0]

    def test_different_seeds_differ(self, pitchers):
        a = simulate_prior_predictive(pitchers, n_sim=5, random_seed=1)
        b = simulate_prior_predictive(pitchers, n_sim=5, random_seed=2)
        assert not np.allclose(a["whiff_rate_sim"], b["whiff_rate_sim"])

    def test_long_layout(self, pitchers):
        sims = simulate_prior_predictive(pitchers, n_sim=100, random_seed=0)

        assert list(sims.columns) == ["sim_id", "obs_id", "whiff_rate_sim"]
        assert len(sims) == 100 * len(pitchers)
        assert sims.groupby("sim_id").size().eq(len(pitchers)).all()
        assert sims["whiff_rate_sim"].between(0, 1).all()

    def test_reduced_spec(self, pitchers):
        sims = simulate_prior_predictive(pitchers.drop(columns=["velo"]), REDUCED_MODEL,
                                         n_sim=3, random_seed=0)
        assert len(sims) == 3 * len(pitchers)

    def test_rejects_non_positive_n_sim(self, pitchers):
        with pytest.raises(ValueError):
            simulate_prior_predictive(pitchers, n_sim=0)


def test_prior_draws_respect_support():
    params = draw_prior_parameters(FULL_MODEL, 500, np.random.default_rng(0))

    assert set(params) == set(FULL_MODEL.param_names)
    assert (params["kappa"] > 0).all()
    # Intercept prior is centred on logit(0.217)
    assert abs(np.mean(params["b0"]) - FULL_MODEL.intercept_mu) < 0.2


def test_plot_prior_predictive(pitchers):
    sims = simulate_prior_predictive(pitchers, n_sim=5, random_seed=0)
    fig = plot_prior_predictive(sims, pitchers["whiff_rate"])
    assert isinstance(fig, Figure)
