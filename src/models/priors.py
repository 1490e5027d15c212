"""Joint prior log-densities for the logistic coefficient vector."""

from functools import partial

import numpy as np
import pytensor.tensor as pt
from pytensor.compile.ops import as_op
from scipy import stats

# beta[0] is the intercept; beta[1:5] follow the model's predictor order
N_COEFFICIENTS = 5


def log_prior_density(beta, intercept_mean=0.0, intercept_sd=100.0, exp_rate=1.0):
    """Normal prior on the intercept, exponential priors on the slopes.

    Args:
        beta: Coefficient vector [intercept, b1, b2, b3, b4]
        intercept_mean: Mean of the intercept's normal prior
        intercept_sd: Standard deviation of the intercept's normal prior
        exp_rate: Rate of each slope's exponential prior

    Returns:
        Joint log-density, or -inf when any slope is negative
    """
    beta = np.asarray(beta, dtype=float)
    if beta.shape != (N_COEFFICIENTS,):
        raise ValueError(f"Expected {N_COEFFICIENTS} coefficients, got shape {beta.shape}")

    slopes = beta[1:]
    if np.any(slopes < 0):
        return -np.inf

    return float(
        stats.norm.logpdf(beta[0], loc=intercept_mean, scale=intercept_sd)
        + stats.expon.logpdf(slopes, scale=1.0 / exp_rate).sum()
    )


def make_prior(intercept_mean=0.0, intercept_sd=100.0, exp_rate=1.0):
    """Bind hyperparameters, returning a one-argument log-density."""
    return partial(
        log_prior_density,
        intercept_mean=intercept_mean,
        intercept_sd=intercept_sd,
        exp_rate=exp_rate,
    )


def as_log_potential(log_density):
    """Wrap a numpy log-density as a pytensor op usable in pm.Potential.

    The op has no gradient, so it is only usable with gradient-free step
    methods such as Metropolis.
    """

    @as_op(itypes=[pt.dvector], otypes=[pt.dscalar])
    def _log_density(beta):
        return np.asarray(log_density(beta), dtype=np.float64)

    return _log_density
