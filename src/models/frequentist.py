"""Maximum-likelihood logistic regression baseline."""

import logging
from dataclasses import dataclass

import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf

from src.features.preprocess import ModelSpec

logger = logging.getLogger(__name__)


@dataclass
class FrequentistFit:
    """Fitted GLM coefficients and their significance table."""

    coefficients: pd.Series
    table: pd.DataFrame
    covariance: pd.DataFrame
    aic: float
    deviance: float
    iterations: int


def fit_frequentist_logit(train: pd.DataFrame, spec: ModelSpec = None) -> FrequentistFit:
    """Fit a binomial GLM with logit link by iteratively reweighted least squares.

    Args:
        train: Training dataframe holding the outcome and predictors
        spec: Model specification

    Returns:
        FrequentistFit with coefficients ordered as spec.coefficient_names

    Raises:
        KeyError: If the outcome or a predictor is not a column of train
    """
    spec = spec or ModelSpec()
    missing = [col for col in (spec.outcome,) + spec.predictors if col not in train.columns]
    if missing:
        raise KeyError(f"Columns not found in training data: {missing}")

    model = smf.glm(spec.formula, data=train, family=sm.families.Binomial())
    result = model.fit(method="IRLS")

    names = spec.coefficient_names
    table = pd.DataFrame(
        {
            "estimate": result.params,
            "std_error": result.bse,
            "z_value": result.tvalues,
            "p_value": result.pvalues,
        }
    ).loc[names]

    iterations = int(result.fit_history.get("iteration", 0))
    logger.info(f"GLM converged in {iterations} IRLS iterations (AIC={result.aic:.2f})")

    return FrequentistFit(
        coefficients=result.params.loc[names],
        table=table,
        covariance=result.cov_params().loc[names, names],
        aic=float(result.aic),
        deviance=float(result.deviance),
        iterations=iterations,
    )
