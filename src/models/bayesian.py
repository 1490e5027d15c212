"""Bayesian logistic regression sampled with PyMC random-walk Metropolis."""

import logging
from dataclasses import dataclass

import arviz as az
import numpy as np
import pandas as pd
import pymc as pm

from src.features.preprocess import ModelSpec
from src.models.frequentist import fit_frequentist_logit
from src.models.priors import as_log_potential

logger = logging.getLogger(__name__)

SUMMARY_QUANTILES = (0.025, 0.25, 0.5, 0.75, 0.975)


@dataclass
class PosteriorSample:
    """Retained posterior draws of the coefficient vector.

    Attributes:
        draws: One row per retained iteration, one column per coefficient
        idata: Thinned ArviZ trace the draws were taken from
        burnin: Discarded warm-up iterations
        iterations: Total iterations including burn-in
        thin: Thinning interval
        acceptance_rate: Mean per-coordinate Metropolis acceptance over post-burn-in iterations
        proposal_sd: Per-coefficient random-walk standard deviation
        step_scaling: Step scaling after sampling; stays at 1 because tuning is off
    """

    draws: pd.DataFrame
    idata: az.InferenceData
    burnin: int
    iterations: int
    thin: int
    acceptance_rate: float
    proposal_sd: np.ndarray
    step_scaling: np.ndarray

    def __len__(self):
        return len(self.draws)

    @property
    def coefficient_names(self):
        return self.draws.columns.tolist()

    def mean(self) -> pd.Series:
        """Posterior mean of each coefficient."""
        return self.draws.mean()

    def time_series_se(self) -> pd.Series:
        """Monte Carlo standard error of the mean, accounting for autocorrelation."""
        mcse = az.mcse(self.idata, var_names=["beta"], method="mean")["beta"].to_series()
        return mcse.reindex(self.coefficient_names)

    def effective_sample_size(self) -> pd.Series:
        ess = az.ess(self.idata, var_names=["beta"])["beta"].to_series()
        return ess.reindex(self.coefficient_names)

    def summary(self, quantiles=SUMMARY_QUANTILES) -> pd.DataFrame:
        """Per-coefficient mean, sd, naive and time-series SE, and quantiles."""
        table = pd.DataFrame(
            {
                "mean": self.draws.mean(),
                "sd": self.draws.std(ddof=1),
                "naive_se": self.draws.std(ddof=1) / np.sqrt(len(self.draws)),
                "time_series_se": self.time_series_se(),
            }
        )
        for q in quantiles:
            table[f"{q:.1%}"] = self.draws.quantile(q)
        return table

    def credible_interval(self, prob: float = 0.95) -> pd.DataFrame:
        """Equal-tailed credible interval from the draw quantiles."""
        if not 0 < prob < 1:
            raise ValueError(f"prob must be in (0, 1), got {prob}")
        tail = (1 - prob) / 2
        return pd.DataFrame(
            {
                "lower": self.draws.quantile(tail),
                "upper": self.draws.quantile(1 - tail),
            }
        )

    def autocorrelation(self, lags=(1, 5, 10, 50)) -> pd.DataFrame:
        """Autocorrelation of each coefficient's chain at the given lags."""
        rows = {}
        for name in self.coefficient_names:
            acf = az.autocorr(self.draws[name].to_numpy())
            rows[name] = [acf[lag] if lag < len(acf) else np.nan for lag in lags]
        return pd.DataFrame.from_dict(rows, orient="index", columns=[f"lag_{lag}" for lag in lags])


def fit_bayesian_logit(
    train: pd.DataFrame,
    spec: ModelSpec = None,
    prior=None,
    burnin: int = 1000,
    iterations: int = 11000,
    thin: int = 1,
    random_seed: int = None,
    proposal_tune: float = 1.1,
    start=None,
) -> PosteriorSample:
    """Sample the posterior of a logistic regression.

    The chain starts at the maximum-likelihood estimate. PyMC's Metropolis step
    updates one coefficient at a time; each coordinate takes a normal random-walk
    step whose standard deviation is proposal_tune times that coefficient's
    conditional standard deviation under the ML covariance. Step tuning is off,
    so burn-in iterations are only discarded and proposal_tune is the scale used
    for every iteration.

    Args:
        train: Training dataframe holding the outcome and predictors
        spec: Model specification
        prior: Callable returning the joint log prior density of a coefficient
            vector, or None for the improper flat prior
        burnin: Warm-up iterations discarded before collecting draws
        iterations: Total iterations including burn-in
        thin: Keep every thin-th post-burn-in iteration
        random_seed: Seed for the sampler
        proposal_tune: Multiplier on the conditional standard deviations
        start: Optional starting coefficient vector

    Returns:
        PosteriorSample with floor((iterations - burnin) / thin) draws
    """
    if burnin < 0 or burnin >= iterations:
        raise ValueError(f"burnin must be in [0, iterations), got burnin={burnin}, iterations={iterations}")
    if thin < 1:
        raise ValueError(f"thin must be >= 1, got {thin}")
    if iterations - burnin < thin:
        raise ValueError(f"thin={thin} leaves no draws from {iterations - burnin} post-burn-in iterations")

    spec = spec or ModelSpec()
    names = spec.coefficient_names
    X = train[list(spec.predictors)].to_numpy(dtype=float)
    y = train[spec.outcome].to_numpy(dtype=int)

    mle = fit_frequentist_logit(train, spec)
    precision = np.linalg.inv(mle.covariance.to_numpy())
    proposal_sd = proposal_tune / np.sqrt(np.diag(precision))

    if start is None:
        start = mle.coefficients.to_numpy().copy()
        if prior is not None and not np.isfinite(prior(start)):
            start[1:] = np.maximum(start[1:], 0.0)
    start = np.asarray(start, dtype=float)
    if prior is not None and not np.isfinite(prior(start)):
        raise ValueError(f"Starting values {start} have zero prior density")

    with pm.Model(coords={"coefficient": names}):
        beta = pm.Flat("beta", dims="coefficient")
        logit_p = beta[0] + pm.math.dot(X, beta[1:])
        pm.Bernoulli(spec.outcome, logit_p=logit_p, observed=y)
        if prior is not None:
            pm.Potential("log_prior", as_log_potential(prior)(beta))

        step = pm.Metropolis(vars=[beta], S=proposal_sd, tune=False)
        idata = pm.sample(
            draws=iterations - burnin,
            tune=burnin,
            step=step,
            chains=1,
            cores=1,
            initvals={"beta": start},
            random_seed=random_seed,
            progressbar=False,
            compute_convergence_checks=False,
        )

    sample_stats = idata.sample_stats
    if "accepted" in sample_stats:
        acceptance_rate = float(sample_stats["accepted"].mean())
    else:
        acceptance_rate = float("nan")
    logger.info(f"Metropolis acceptance rate for beta was {acceptance_rate:.5f}")

    idata = idata.isel(draw=slice(thin - 1, None, thin))
    values = idata.posterior["beta"].values.reshape(-1, len(names))
    draws = pd.DataFrame(values, columns=names)
    logger.info(f"Retained {len(draws)} draws (burnin={burnin}, iterations={iterations}, thin={thin})")

    return PosteriorSample(
        draws=draws,
        idata=idata,
        burnin=burnin,
        iterations=iterations,
        thin=thin,
        acceptance_rate=acceptance_rate,
        proposal_sd=proposal_sd,
        step_scaling=np.array(step.scaling, dtype=float),
    )
