"""Tests for the joint prior log-density."""

import numpy as np
import pytensor.tensor as pt
import pytest
from scipy import stats

from src.models.priors import as_log_potential, log_prior_density, make_prior


class TestLogPriorDensity:
    """Test normal-intercept / exponential-slope prior."""

    @pytest.mark.parametrize("position", [1, 2, 3, 4])
    def test_negative_slope_has_zero_density(self, position):
        """Test that a negative value at any slope position returns -inf."""
        beta = np.full(5, 0.5)
        beta[position] = -1e-6

        assert log_prior_density(beta) == -np.inf

    def test_negative_intercept_is_allowed(self):
        """Test that the intercept has unrestricted support."""
        assert np.isfinite(log_prior_density([-7.5, 0.1, 0.1, 0.1, 0.1]))

    def test_zero_slopes_are_in_support(self):
        """Test the all-zero-except-intercept vector gives the closed-form value."""
        value = log_prior_density([0.0, 0.0, 0.0, 0.0, 0.0], intercept_mean=0.0, intercept_sd=100.0, exp_rate=1.0)

        assert np.isfinite(value)
        assert value == pytest.approx(-np.log(100.0 * np.sqrt(2 * np.pi)))

    def test_matches_component_densities(self):
        """Test the sum of one normal and four exponential log-densities."""
        beta = np.array([-3.0, 0.03, 0.09, 0.7, 0.01])
        expected = stats.norm.logpdf(-3.0, loc=1.0, scale=5.0) + sum(
            stats.expon.logpdf(b, scale=1 / 2.0) for b in beta[1:]
        )

        value = log_prior_density(beta, intercept_mean=1.0, intercept_sd=5.0, exp_rate=2.0)

        assert value == pytest.approx(expected)

    def test_wrong_length_rejected(self):
        """Test that only five-coefficient vectors are accepted."""
        with pytest.raises(ValueError, match="Expected 5 coefficients"):
            log_prior_density([0.0, 0.1, 0.1, 0.1])

    def test_input_not_mutated(self):
        """Test purity: the candidate vector is left untouched."""
        beta = np.array([1.0, 0.2, 0.3, 0.4, 0.5])
        before = beta.copy()

        log_prior_density(beta)

        np.testing.assert_array_equal(beta, before)


class TestPriorBinding:
    """Test hyperparameter binding and the pytensor wrapper."""

    def test_make_prior_binds_hyperparameters(self):
        """Test that the bound prior equals the explicit call."""
        prior = make_prior(intercept_mean=2.0, intercept_sd=3.0, exp_rate=0.5)
        beta = [1.0, 0.2, 0.3, 0.4, 0.5]

        assert prior(beta) == pytest.approx(log_prior_density(beta, 2.0, 3.0, 0.5))

    def test_log_potential_evaluates(self):
        """Test that the wrapped op computes the same log-density."""
        prior = make_prior()
        beta = np.array([0.5, 0.1, 0.2, 0.3, 0.4])
        op = as_log_potential(prior)

        value = op(pt.as_tensor_variable(beta)).eval()

        assert float(value) == pytest.approx(prior(beta))

    def test_log_potential_propagates_negative_infinity(self):
        """Test that out-of-support values reach the model as -inf."""
        op = as_log_potential(make_prior())

        value = op(pt.as_tensor_variable(np.array([0.0, -1.0, 0.0, 0.0, 0.0]))).eval()

        assert float(value) == -np.inf
