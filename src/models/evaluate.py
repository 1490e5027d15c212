"""Evaluation of fitted coefficient vectors on held-out records."""

import logging
from dataclasses import dataclass

import arviz as az
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from scipy.special import expit
from sklearn.metrics import confusion_matrix

from src.features.preprocess import ModelSpec
from src.models.bayesian import PosteriorSample
from src.models.frequentist import FrequentistFit

logger = logging.getLogger(__name__)


@dataclass
class ClassificationSummary:
    """Confusion matrix and derived rates for one model on the test set."""

    confusion: pd.DataFrame
    accuracy: float
    sensitivity: float
    specificity: float
    positive_label: int
    n_samples: int

    def as_dict(self) -> dict:
        return {
            "accuracy": self.accuracy,
            "sensitivity": self.sensitivity,
            "specificity": self.specificity,
            "positive_label": self.positive_label,
            "n_samples": self.n_samples,
        }


def point_estimate(fit, spec: ModelSpec = None) -> pd.Series:
    """Reduce a fit to a single coefficient vector.

    Accepts a PosteriorSample (posterior mean), a FrequentistFit, a Series
    indexed by coefficient name, or a plain sequence in spec order.
    """
    spec = spec or ModelSpec()
    if isinstance(fit, PosteriorSample):
        return posterior_mean(fit)
    if isinstance(fit, FrequentistFit):
        return fit.coefficients
    if isinstance(fit, pd.Series):
        return fit.loc[spec.coefficient_names]

    values = np.asarray(fit, dtype=float)
    if values.shape != (len(spec.coefficient_names),):
        raise ValueError(
            f"Expected {len(spec.coefficient_names)} coefficients, got shape {values.shape}"
        )
    return pd.Series(values, index=spec.coefficient_names)


def posterior_mean(sample: PosteriorSample) -> pd.Series:
    """Arithmetic mean of each coefficient's retained draws."""
    return sample.mean()


def predict_proba(coefficients, X: pd.DataFrame, spec: ModelSpec = None) -> np.ndarray:
    """Probability of the positive outcome through the logistic link.

    Raises:
        KeyError: If a predictor column is missing from X
    """
    spec = spec or ModelSpec()
    beta = point_estimate(coefficients, spec)
    missing = [c for c in spec.predictors if c not in X.columns]
    if missing:
        raise KeyError(f"Predictor columns not found: {missing}")

    logit = beta.iloc[0] + X[list(spec.predictors)].to_numpy(dtype=float) @ beta.iloc[1:].to_numpy()
    return expit(logit)


def predict_labels(coefficients, X: pd.DataFrame, spec: ModelSpec = None, threshold: float = 0.5):
    """Label 1 where the predicted probability is strictly above threshold."""
    return (predict_proba(coefficients, X, spec) > threshold).astype(int)


def summarize_predictions(y_true, y_pred, positive_label: int = 1) -> ClassificationSummary:
    """Build the 2x2 confusion matrix and rates for the given positive class.

    Args:
        y_true: Actual labels
        y_pred: Predicted labels
        positive_label: Class whose recall is reported as sensitivity

    Returns:
        ClassificationSummary; a rate is NaN when its class is absent
    """
    y_true = np.asarray(y_true).astype(int)
    y_pred = np.asarray(y_pred).astype(int)
    if len(y_true) != len(y_pred):
        raise ValueError(f"Label length mismatch: {len(y_true)} actual vs {len(y_pred)} predicted")

    negative_label = 1 - positive_label
    cm = confusion_matrix(y_true, y_pred, labels=[0, 1])
    confusion = pd.DataFrame(
        cm,
        index=pd.Index([0, 1], name="actual"),
        columns=pd.Index([0, 1], name="predicted"),
    )

    def _rate(label):
        total = confusion.loc[label].sum()
        return float(confusion.loc[label, label] / total) if total else float("nan")

    return ClassificationSummary(
        confusion=confusion,
        accuracy=float(np.trace(cm) / cm.sum()) if cm.sum() else float("nan"),
        sensitivity=_rate(positive_label),
        specificity=_rate(negative_label),
        positive_label=positive_label,
        n_samples=int(cm.sum()),
    )


def evaluate(
    fit, test: pd.DataFrame, spec: ModelSpec = None, threshold: float = 0.5, positive_label: int = 1
) -> ClassificationSummary:
    """Score a fit on held-out records.

    Args:
        fit: PosteriorSample, FrequentistFit or coefficient vector
        test: Test dataframe holding predictors and outcome
        spec: Model specification
        threshold: Probability cut-off for label 1
        positive_label: Class reported as positive for sensitivity

    Returns:
        ClassificationSummary
    """
    spec = spec or ModelSpec()
    y_pred = predict_labels(fit, test, spec, threshold)
    return summarize_predictions(test[spec.outcome], y_pred, positive_label)


def compare_models(fits: dict, test: pd.DataFrame, spec: ModelSpec = None, threshold: float = 0.5,
                   positive_label: int = 1) -> tuple:
    """Evaluate several fits side by side.

    Args:
        fits: Mapping of model name to fit
        test: Test dataframe
        spec: Model specification

    Returns:
        Tuple of (coefficients_df, metrics_df), both indexed by model name
    """
    spec = spec or ModelSpec()
    coefficients = {}
    metrics = {}
    for name, fit in fits.items():
        coefficients[name] = point_estimate(fit, spec)
        metrics[name] = evaluate(fit, test, spec, threshold, positive_label).as_dict()

    return pd.DataFrame(coefficients).T, pd.DataFrame(metrics).T


def generate_confusion_matrix_plot(summary: ClassificationSummary, output_path, title="Confusion Matrix"):
    """Generate confusion matrix visualization.

    Args:
        summary: Evaluated classification summary
        output_path: Path to save plot
        title: Plot title
    """
    fig, ax = plt.subplots(figsize=(8, 6))
    sns.heatmap(summary.confusion, annot=True, fmt="d", cmap="Blues", ax=ax)

    ax.set_title(f"{title} (accuracy {summary.accuracy:.3f})", fontsize=14, fontweight="bold")
    ax.set_xlabel("Predicted", fontsize=12)
    ax.set_ylabel("Actual", fontsize=12)
    ax.set_xticklabels(["No Diabetes", "Diabetes"])
    ax.set_yticklabels(["No Diabetes", "Diabetes"])

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)

    logger.info(f"Confusion matrix saved to: {output_path}")


def generate_trace_plot(sample: PosteriorSample, output_path):
    """Trace and marginal density of each coefficient."""
    axes = az.plot_trace(sample.idata, var_names=["beta"], compact=False)
    fig = np.asarray(axes).ravel()[0].figure
    fig.tight_layout()
    fig.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)

    logger.info(f"Trace plot saved to: {output_path}")


def generate_autocorrelation_plot(sample: PosteriorSample, output_path, max_lag: int = 50):
    """Autocorrelation of each coefficient's retained chain."""
    axes = az.plot_autocorr(sample.idata, var_names=["beta"], max_lag=max_lag)
    fig = np.asarray(axes).ravel()[0].figure
    fig.tight_layout()
    fig.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)

    logger.info(f"Autocorrelation plot saved to: {output_path}")
