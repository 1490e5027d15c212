"""Shared constants for the diabetes case study."""

# Columns expected in the raw dataset (excluding the target)
REQUIRED_COLUMNS = [
    "Pregnancies",
    "Glucose",
    "BloodPressure",
    "SkinThickness",
    "Insulin",
    "BMI",
    "DiabetesPedigreeFunction",
    "Age",
]

# Target column name
TARGET_COLUMN = "Outcome"

# Columns where a zero is a missing-value sentinel (biological impossibility)
ZERO_FILTER_COLUMNS = [
    "BMI",
    "Glucose",
    "BloodPressure",
    "SkinThickness",
    "Insulin",
]

# Predictors kept after dropping SkinThickness (~BMI) and Insulin (~Glucose)
SELECTED_FEATURES = [
    "Glucose",
    "BMI",
    "DiabetesPedigreeFunction",
    "BloodPressure",
]

INTERCEPT_NAME = "Intercept"

# Correlation level at which the analyst treats two predictors as redundant
CORRELATION_THRESHOLD = 0.58

DEFAULT_RANDOM_SEED = 2023
