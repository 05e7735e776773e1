"""
Tests for the beta-regression model definitions and its deterministic mapping.
"""
import numpy as np
import pandas as pd
import pytest

from whiff_analysis.models.beta_regression import (
    FULL_MODEL,
    REDUCED_MODEL,
    beta_shape,
    build_model,
    design_matrix,
    linear_predictor,
    mean_response,
    missing_roles,
)


@pytest.fixture
def standardized():
    rng = np.random.default_rng(11)
    n = 25
    return pd.DataFrame({
        "player_id": np.arange(n),
        "name": [f"P{i}" for i in range(n)],
        "velo": rng.normal(size=n),
        "spin_rate": rng.normal(size=n),
        "ivb": rng.normal(size=n),
        "extension": rng.normal(size=n),
        "arm_angle": rng.normal(size=n),
        "whiff_rate": rng.uniform(0.1, 0.4, size=n),
    })


class TestSpecs:

    def test_full_model_parameters(self):
        assert FULL_MODEL.param_names == ["b0", "b1", "b2", "b3", "b4", "b5", "b6", "kappa"]

    def test_reduced_model_drops_velocity_term(self):
        assert "b1" not in REDUCED_MODEL.param_names
        assert "velo" not in REDUCED_MODEL.columns
        assert len(REDUCED_MODEL.terms) == len(FULL_MODEL.terms) - 1

    def test_priors_shared_between_variants(self):
        assert REDUCED_MODEL.intercept_mu == FULL_MODEL.intercept_mu == -1.283235
        assert REDUCED_MODEL.slope_beta == FULL_MODEL.slope_beta == 2.5
        assert REDUCED_MODEL.kappa_sigma == FULL_MODEL.kappa_sigma == 2.0

    def test_without_unknown_term(self):
        with pytest.raises(KeyError):
            FULL_MODEL.without("b9", name="bad")

    def test_missing_roles(self):
        assert missing_roles(FULL_MODEL) == {}
        assert missing_roles(REDUCED_MODEL) == {"exposure": ["velo"]}


class TestMapping:

    def test_interaction_column(self, standardized):
        X = design_matrix(FULL_MODEL, standardized)
        assert X.shape == (len(standardized), 6)
        np.testing.assert_allclose(X[:, 3], standardized["arm_angle"] * standardized["ivb"])

    def test_linear_predictor_matches_formula(self, standardized):
        coefs = {"b0": -1.2, "b1": 0.3, "b2": 0.1, "b3": -0.05,
                 "b4": 0.02, "b5": -0.1, "b6": 0.2}
        d = standardized
        expected = (-1.2 + 0.3 * d.velo + 0.1 * d.spin_rate - 0.05 * d.extension
                    + 0.02 * d.arm_angle * d.ivb - 0.1 * d.arm_angle + 0.2 * d.ivb)
        np.testing.assert_allclose(linear_predictor(FULL_MODEL, coefs, d), expected)

    def test_batched_coefficients(self, standardized):
        coefs = {name: np.array([0.0, 0.5, -0.5]) for name in FULL_MODEL.coef_names}
        eta = linear_predictor(FULL_MODEL, coefs, standardized)
        assert eta.shape == (3, len(standardized))
        np.testing.assert_allclose(eta[0], 0.0)

    def test_omega_strictly_inside_unit_interval(self, standardized):
        coefs = {name: 0.5 for name in FULL_MODEL.coef_names}
        omega = mean_response(FULL_MODEL, coefs, standardized)
        assert np.all((omega > 0) & (omega < 1))

    @pytest.mark.parametrize("kappa", [0.0, 0.5, 20.0, 5e3])
    def test_shapes_positive(self, standardized, kappa):
        coefs = {name: -0.4 for name in FULL_MODEL.coef_names}
        omega = mean_response(FULL_MODEL, coefs, standardized)
        alpha, beta = beta_shape(omega, kappa)
        assert np.all(alpha > 0) and np.all(beta > 0)
        np.testing.assert_allclose(alpha + beta, kappa + 2)

    def test_negative_kappa_rejected(self):
        with pytest.raises(ValueError):
            beta_shape(np.array([0.3]), -1.0)

    def test_reduced_ignores_velocity(self, standardized):
        coefs = {name: 0.3 for name in REDUCED_MODEL.coef_names}
        shifted = standardized.assign(velo=standardized["velo"] + 10)
        np.testing.assert_allclose(
            linear_predictor(REDUCED_MODEL, coefs, standardized),
            linear_predictor(REDUCED_MODEL, coefs, shifted),
        )

    def test_missing_column(self, standardized):
        with pytest.raises(KeyError):
            design_matrix(FULL_MODEL, standardized.drop(columns=["ivb"]))


class TestBuildModel:

    def test_full_model_variables(self, standardized):
        model = build_model(FULL_MODEL, standardized)
        free = {rv.name for rv in model.free_RVs}
        assert free == set(FULL_MODEL.param_names)
        assert {"omega", "alpha", "beta"} <= {d.name for d in model.deterministics}
        assert [rv.name for rv in model.observed_RVs] == ["whiff_rate"]

    def test_reduced_model_variables(self, standardized):
        model = build_model(REDUCED_MODEL, standardized)
        free = {rv.name for rv in model.free_RVs}
        assert "b1" not in free
        assert "x_b1" not in model.named_vars

    def test_initial_point_log_density_finite(self, standardized):
        model = build_model(FULL_MODEL, standardized)
        logp = model.compile_logp()(model.initial_point())
        assert np.isfinite(logp)
