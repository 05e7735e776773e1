"""Shared fixtures: synthetic leaderboard exports and stand-in posterior draws."""
import arviz as az
import numpy as np
import pandas as pd
import pytest
from scipy import stats

from whiff_analysis.models.beta_regression import beta_shape, mean_response


def make_raw_tables(n: int = 40, seed: int = 7):
    """Three leaderboard exports sharing player_id 1..n."""
    rng = np.random.default_rng(seed)
    ids = np.arange(1, n + 1)
    core = pd.DataFrame({
        "last_name, first_name": [f"Last{i}, First{i}" for i in ids],
        "player_id": ids,
        "year": 2024,
        "avg_speed": rng.normal(94, 2, n),
        "avg_spin": rng.normal(2300, 150, n),
        "avg_break_z_induced": rng.normal(15, 3, n),
        "arm_angle": rng.normal(40, 10, n),
    })
    whiff = pd.DataFrame({
        "player_id": ids,
        "whiff_percent": rng.uniform(10, 40, n),
    })
    extension = pd.DataFrame({
        "player_id": ids,
        "avg_release_extension": rng.normal(6.4, 0.4, n),
    })
    return core, whiff, extension


@pytest.fixture
def raw_tables():
    return make_raw_tables()


@pytest.fixture
def raw_files(tmp_path, raw_tables):
    core, whiff, extension = raw_tables
    paths = {
        "core": tmp_path / "core.csv",
        "whiff": tmp_path / "whiff.csv",
        "extension": tmp_path / "extension.csv",
    }
    core.to_csv(paths["core"], index=False)
    whiff.to_csv(paths["whiff"], index=False)
    extension.to_csv(paths["extension"], index=False)
    return paths


def fake_inference(spec, df, *, chains: int = 2, draws: int = 200, seed: int = 0,
                   slope_scale: float = 0.1):
    """
    InferenceData shaped like a real fit: draws scattered around small slopes,
    with the log-likelihood of *df*'s whiff rates under each draw.
    """
    rng = np.random.default_rng(seed)
    n_total = chains * draws
    params = {spec.intercept: rng.normal(-1.3, 0.05, n_total)}
    for term in spec.terms:
        params[term.coef] = rng.normal(0.0, slope_scale, n_total)
    params["kappa"] = rng.lognormal(np.log(20.0), 0.1, n_total)

    omega = mean_response(spec, params, df)
    alpha, beta = beta_shape(omega, params["kappa"])
    y = df[spec.response].to_numpy(float)
    log_lik = stats.beta.logpdf(y[None, :], alpha, beta)

    n_obs = len(df)
    return az.from_dict(
        posterior={k: v.reshape(chains, draws) for k, v in params.items()},
        log_likelihood={spec.response: log_lik.reshape(chains, draws, n_obs)},
        observed_data={spec.response: y},
    )


class FakeSampler:
    """Sampler stand-in that records calls and returns synthetic draws."""

    def __init__(self, seed: int = 0):
        self.seed = seed
        self.calls = []

    def fit(self, spec, dataset, *, chains, draws):
        self.calls.append(spec.name)
        return fake_inference(spec, dataset, chains=chains, draws=draws,
                              seed=self.seed + len(self.calls))


@pytest.fixture
def fake_sampler():
    return FakeSampler()
