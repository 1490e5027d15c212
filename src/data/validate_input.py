"""Data validation module for the diabetes case study."""

from typing import List, Tuple

import pandas as pd
import pandera as pa
from pandera import Column, DataFrameSchema

from src.config.constants import REQUIRED_COLUMNS, TARGET_COLUMN, ZERO_FILTER_COLUMNS


class DiabetesRecordValidator:
    """Validates raw and cleaned patient records."""

    REQUIRED_COLUMNS = REQUIRED_COLUMNS + [TARGET_COLUMN]

    def __init__(self):
        """Initialize validator with raw-record schema."""
        self.schema = DataFrameSchema(
            {
                "Pregnancies": Column(int, checks=[pa.Check.ge(0)], nullable=False),
                "Glucose": Column(float, checks=[pa.Check.ge(0)], nullable=False),
                "BloodPressure": Column(float, checks=[pa.Check.ge(0)], nullable=False),
                "SkinThickness": Column(float, checks=[pa.Check.ge(0)], nullable=False),
                "Insulin": Column(float, checks=[pa.Check.ge(0)], nullable=False),
                "BMI": Column(float, checks=[pa.Check.ge(0)], nullable=False),
                "DiabetesPedigreeFunction": Column(float, checks=[pa.Check.ge(0)], nullable=False),
                "Age": Column(int, checks=[pa.Check.ge(0), pa.Check.le(120)], nullable=False),
                TARGET_COLUMN: Column(int, checks=[pa.Check.isin([0, 1])], nullable=False),
            },
            strict=False,
            coerce=True,
        )

    def validate_schema(self, df: pd.DataFrame) -> Tuple[bool, List[str]]:
        """Validate dataframe against required columns and value constraints.

        Checks for:
        - Missing required columns
        - Data type mismatches
        - Value constraints (non-negative measurements, age <= 120, binary outcome)

        Args:
            df: Input dataframe

        Returns:
            Tuple of (is_valid, error_messages)
        """
        errors = []

        missing_cols = set(self.REQUIRED_COLUMNS) - set(df.columns)
        if missing_cols:
            errors.append(f"Missing required columns: {sorted(missing_cols)}")
            return False, errors

        try:
            self.schema.validate(df[self.REQUIRED_COLUMNS], lazy=True)
            return True, []
        except pa.errors.SchemaErrors as e:
            return False, self._describe_failures(e)

    def validate_cleaned(
        self, df: pd.DataFrame, zero_filter_columns=None
    ) -> Tuple[bool, List[str]]:
        """Check that no zero sentinel survived cleaning.

        Args:
            df: Cleaned dataframe
            zero_filter_columns: Columns that must be strictly positive

        Returns:
            Tuple of (is_valid, error_messages)
        """
        columns = ZERO_FILTER_COLUMNS if zero_filter_columns is None else list(zero_filter_columns)
        missing_cols = set(columns) - set(df.columns)
        if missing_cols:
            return False, [f"Missing required columns: {sorted(missing_cols)}"]

        schema = DataFrameSchema(
            {col: Column(float, checks=[pa.Check.gt(0)], nullable=False) for col in columns},
            strict=False,
            coerce=True,
        )
        try:
            schema.validate(df[columns], lazy=True)
            return True, []
        except pa.errors.SchemaErrors as e:
            return False, self._describe_failures(e)

    @staticmethod
    def _describe_failures(error: pa.errors.SchemaErrors) -> List[str]:
        return [
            f"Column '{row['column']}' failed check '{row['check']}' at index {row['index']}"
            for _, row in error.failure_cases.iterrows()
        ]
