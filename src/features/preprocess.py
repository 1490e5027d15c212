"""Feature exploration, selection and train/test partitioning."""

import logging
from dataclasses import dataclass
from typing import List, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from sklearn.model_selection import train_test_split

from src.config.constants import (
    CORRELATION_THRESHOLD,
    INTERCEPT_NAME,
    REQUIRED_COLUMNS,
    SELECTED_FEATURES,
    TARGET_COLUMN,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelSpec:
    """Logistic model specification: binary outcome and ordered predictors."""

    outcome: str = TARGET_COLUMN
    predictors: Tuple[str, ...] = tuple(SELECTED_FEATURES)

    def __post_init__(self):
        object.__setattr__(self, "predictors", tuple(self.predictors))

    @property
    def formula(self) -> str:
        return f"{self.outcome} ~ " + " + ".join(self.predictors)

    @property
    def coefficient_names(self) -> List[str]:
        return [INTERCEPT_NAME] + list(self.predictors)


def correlation_matrix(df: pd.DataFrame, columns=None) -> pd.DataFrame:
    """Pearson correlation matrix over the measurement columns."""
    columns = [c for c in (columns or REQUIRED_COLUMNS + [TARGET_COLUMN]) if c in df.columns]
    return df[columns].corr()


def correlated_pairs(df: pd.DataFrame, threshold: float = CORRELATION_THRESHOLD, columns=None):
    """List predictor pairs whose absolute correlation reaches the threshold.

    Args:
        df: Cleaned dataframe
        threshold: Absolute Pearson correlation cut-off
        columns: Predictor columns to inspect (defaults to REQUIRED_COLUMNS)

    Returns:
        DataFrame with columns feature_a, feature_b, correlation, sorted by
        absolute correlation descending
    """
    corr = correlation_matrix(df, columns or REQUIRED_COLUMNS)
    names = corr.columns.tolist()

    rows = []
    for i, feature_a in enumerate(names):
        for feature_b in names[i + 1 :]:
            value = corr.loc[feature_a, feature_b]
            if abs(value) >= threshold:
                rows.append({"feature_a": feature_a, "feature_b": feature_b, "correlation": value})

    pairs = pd.DataFrame(rows, columns=["feature_a", "feature_b", "correlation"])
    if not pairs.empty:
        pairs = pairs.reindex(pairs["correlation"].abs().sort_values(ascending=False).index)
    return pairs.reset_index(drop=True)


def select_features(df: pd.DataFrame, spec: ModelSpec = None) -> pd.DataFrame:
    """Keep the model's predictors and outcome, dropping everything else.

    Raises:
        KeyError: If a predictor or the outcome is not a column of df
    """
    spec = spec or ModelSpec()
    columns = list(spec.predictors) + [spec.outcome]
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise KeyError(f"Columns not found in dataset: {missing}")

    dropped = [c for c in df.columns if c not in columns]
    logger.info(f"Selected features {spec.predictors}; dropped {dropped}")
    return df[columns].copy()


def split_records(
    df: pd.DataFrame,
    train_fraction: float = 0.7,
    random_seed: int = None,
    outcome: str = TARGET_COLUMN,
) -> tuple:
    """Stratified train/test partition on the outcome label.

    Args:
        df: Dataframe to split
        train_fraction: Share of rows assigned to the training set
        random_seed: Seed for the partition; same seed gives the same split
        outcome: Column to stratify on

    Returns:
        Tuple of (train_df, test_df), disjoint and covering df
    """
    if not 0 < train_fraction < 1:
        raise ValueError(f"train_fraction must be in (0, 1), got {train_fraction}")

    train_df, test_df = train_test_split(
        df,
        train_size=train_fraction,
        random_state=random_seed,
        stratify=df[outcome],
    )

    logger.info(f"Train size: {len(train_df)}, Test size: {len(test_df)}")
    logger.info(f"Train positive rate: {train_df[outcome].mean():.3f}")
    logger.info(f"Test positive rate: {test_df[outcome].mean():.3f}")

    return train_df, test_df


def generate_correlation_heatmap(df: pd.DataFrame, output_path, columns=None):
    """Save an annotated correlation heatmap.

    Args:
        df: Cleaned dataframe
        output_path: Path to save plot
        columns: Columns to include
    """
    corr = correlation_matrix(df, columns)
    mask = np.triu(np.ones_like(corr, dtype=bool), k=1)

    fig, ax = plt.subplots(figsize=(10, 8))
    sns.heatmap(
        corr,
        mask=mask,
        annot=True,
        fmt=".2f",
        cmap="coolwarm",
        center=0,
        square=True,
        linewidths=1,
        vmin=-1,
        vmax=1,
        ax=ax,
    )
    ax.set_title("Feature Correlation Matrix (Cleaned Records)", fontsize=14, fontweight="bold")

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches="tight")
    plt.close(fig)

    logger.info(f"Correlation heatmap saved to: {output_path}")
