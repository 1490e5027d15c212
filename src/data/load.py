"""Loading and zero-sentinel cleaning of the Pima diabetes records."""

import logging
from pathlib import Path

import pandas as pd

from src.config.constants import ZERO_FILTER_COLUMNS
from src.data.validate_input import DiabetesRecordValidator

logger = logging.getLogger(__name__)


def load_records(data_path: Path, validate: bool = True) -> pd.DataFrame:
    """Read the raw CSV into a dataframe.

    Args:
        data_path: Path to the comma-separated dataset
        validate: Run the raw-record schema checks after reading

    Returns:
        Raw dataframe, one row per patient

    Raises:
        FileNotFoundError: If the dataset does not exist
        ValueError: If the table fails schema validation
    """
    data_path = Path(data_path)
    if not data_path.exists():
        raise FileNotFoundError(f"Dataset not found: {data_path}")

    df = pd.read_csv(data_path)
    logger.info(f"Loaded {len(df)} records from {data_path}")

    if validate:
        is_valid, errors = DiabetesRecordValidator().validate_schema(df)
        if not is_valid:
            raise ValueError(f"Invalid dataset {data_path.name}: {errors}")

    return df


def clean_records(df: pd.DataFrame, columns=None) -> pd.DataFrame:
    """Drop every record holding a zero in any of the given columns.

    Zero is a missing-value sentinel for these measurements, not a real
    reading. The original index labels are kept so that later splits can be
    traced back to source rows.

    Args:
        df: Raw dataframe
        columns: Columns to filter on (defaults to ZERO_FILTER_COLUMNS)

    Returns:
        Cleaned copy of the dataframe
    """
    columns = ZERO_FILTER_COLUMNS if columns is None else list(columns)
    keep = (df[columns] != 0).all(axis=1)
    cleaned = df.loc[keep].copy()

    logger.info(
        f"Removed {len(df) - len(cleaned)} records with zero sentinels in {columns}; "
        f"{len(cleaned)} remain"
    )
    return cleaned


def zero_value_summary(df: pd.DataFrame, columns=None) -> pd.DataFrame:
    """Count zero sentinels per column.

    Args:
        df: Raw dataframe
        columns: Columns to inspect (defaults to ZERO_FILTER_COLUMNS)

    Returns:
        DataFrame indexed by column with 'zeros' and 'zeros_pct'
    """
    columns = ZERO_FILTER_COLUMNS if columns is None else list(columns)
    zeros = (df[columns] == 0).sum()
    return pd.DataFrame(
        {
            "zeros": zeros,
            "zeros_pct": zeros / len(df) * 100 if len(df) else 0.0,
        }
    ).sort_values("zeros", ascending=False)
