"""Case-study pipeline: clean, select, split, fit three logistic models, compare."""

import argparse
import json
import logging
from datetime import datetime
from pathlib import Path

import joblib
import mlflow
import numpy as np
import yaml

from src.config.constants import DEFAULT_RANDOM_SEED, SELECTED_FEATURES, TARGET_COLUMN
from src.data.load import clean_records, load_records, zero_value_summary
from src.data.validate_input import DiabetesRecordValidator
from src.features.preprocess import (
    ModelSpec,
    correlated_pairs,
    generate_correlation_heatmap,
    select_features,
    split_records,
)
from src.models.bayesian import fit_bayesian_logit
from src.models.evaluate import (
    compare_models,
    evaluate,
    generate_autocorrelation_plot,
    generate_confusion_matrix_plot,
    generate_trace_plot,
)
from src.models.frequentist import fit_frequentist_logit
from src.models.priors import make_prior

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

DEFAULT_PRIOR_MODEL = "bayes_default_prior"
CUSTOM_PRIOR_MODEL = "bayes_custom_prior"
FREQUENTIST_MODEL = "glm_mle"


def load_config(config_path: Path) -> dict:
    """Load case-study configuration."""
    with open(config_path, "r") as f:
        return yaml.safe_load(f)


def prepare_data(config: dict) -> tuple:
    """Load, clean, validate, select features and split.

    Args:
        config: Case-study configuration

    Returns:
        Tuple of (cleaned_df, train_df, test_df, spec)
    """
    data_config = config["data"]
    raw = load_records(Path(data_config["raw_path"]))

    zero_columns = data_config.get("zero_filter_columns")
    print("\nZero sentinels in raw data:")
    print(zero_value_summary(raw, zero_columns).to_string())

    cleaned = clean_records(raw, zero_columns)
    is_valid, errors = DiabetesRecordValidator().validate_cleaned(cleaned, zero_columns)
    if not is_valid:
        raise ValueError(f"Cleaning left zero sentinels: {errors}")

    feature_config = config.get("features", {})
    threshold = feature_config.get("correlation_threshold", 0.58)
    pairs = correlated_pairs(cleaned, threshold)
    print(f"\nPredictor pairs with |r| >= {threshold}:")
    print(pairs.to_string(index=False) if not pairs.empty else "  none")

    spec = ModelSpec(
        outcome=TARGET_COLUMN,
        predictors=list(feature_config.get("selected", SELECTED_FEATURES)),
    )
    selected = select_features(cleaned, spec)

    train_df, test_df = split_records(
        selected,
        train_fraction=data_config.get("train_fraction", 0.7),
        random_seed=data_config.get("random_seed", DEFAULT_RANDOM_SEED),
        outcome=spec.outcome,
    )
    return cleaned, train_df, test_df, spec


def fit_models(config: dict, train_df, spec: ModelSpec) -> dict:
    """Fit the flat-prior, custom-prior and maximum-likelihood models.

    Args:
        config: Case-study configuration
        train_df: Training records
        spec: Model specification

    Returns:
        Dictionary mapping model name to fit
    """
    sampler = config["sampler"]
    models = config["models"]
    seed = config["data"].get("random_seed", DEFAULT_RANDOM_SEED)

    fits = {}

    logger.info("Fitting Bayesian logistic regression with the default (flat) prior")
    fits[DEFAULT_PRIOR_MODEL] = fit_bayesian_logit(
        train_df,
        spec,
        prior=None,
        burnin=sampler["burnin"],
        iterations=sampler["iterations"],
        thin=models[DEFAULT_PRIOR_MODEL].get("thin", 1),
        random_seed=seed,
        proposal_tune=sampler.get("proposal_tune", 1.1),
    )

    custom = models[CUSTOM_PRIOR_MODEL]
    logger.info(
        "Fitting Bayesian logistic regression with N(%s, %s) intercept and Exp(%s) slopes",
        custom["intercept_mean"],
        custom["intercept_sd"],
        custom["exp_rate"],
    )
    fits[CUSTOM_PRIOR_MODEL] = fit_bayesian_logit(
        train_df,
        spec,
        prior=make_prior(custom["intercept_mean"], custom["intercept_sd"], custom["exp_rate"]),
        burnin=sampler["burnin"],
        iterations=sampler["iterations"],
        thin=custom.get("thin", 1),
        random_seed=seed,
        proposal_tune=sampler.get("proposal_tune", 1.1),
    )

    logger.info("Fitting maximum-likelihood logistic regression")
    fits[FREQUENTIST_MODEL] = fit_frequentist_logit(train_df, spec)

    return fits


def log_to_mlflow(config: dict, fits: dict, metrics_df):
    """Record one MLflow run per model variant."""
    mlflow.set_tracking_uri(config["mlflow"]["tracking_uri"])
    mlflow.set_experiment(config["mlflow"]["experiment_name"])

    for name, fit in fits.items():
        with mlflow.start_run(run_name=name):
            mlflow.log_params(config["data"])
            if name == FREQUENTIST_MODEL:
                mlflow.log_metric("aic", fit.aic)
            else:
                mlflow.log_params(config["sampler"])
                mlflow.log_params(config["models"][name])
                mlflow.log_metric("acceptance_rate", fit.acceptance_rate)
            mlflow.log_metrics(
                {k: float(metrics_df.loc[name, k]) for k in ("accuracy", "sensitivity", "specificity")}
            )


def run_case_study(config: dict, output_dir: Path) -> dict:
    """Run the full case study and write the report artifacts.

    Args:
        config: Case-study configuration
        output_dir: Directory for plots, tables and artifacts

    Returns:
        Summary dictionary (also written to summary.json)
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    cleaned, train_df, test_df, spec = prepare_data(config)
    generate_correlation_heatmap(cleaned, output_dir / "correlation_heatmap.png")

    fits = fit_models(config, train_df, spec)

    evaluation = config.get("evaluation", {})
    threshold = evaluation.get("threshold", 0.5)
    positive_label = evaluation.get("positive_label", 1)

    for name, fit in fits.items():
        summary = evaluate(fit, test_df, spec, threshold, positive_label)
        print("\n" + "=" * 60)
        print(f"{name.upper()}")
        print("=" * 60)
        if name == FREQUENTIST_MODEL:
            print(fit.table.to_string(float_format=lambda v: f"{v:.4f}"))
        else:
            print(fit.summary().to_string(float_format=lambda v: f"{v:.4f}"))
            print(f"\nAcceptance rate: {fit.acceptance_rate:.3f}")
            print("Autocorrelation of retained draws:")
            print(fit.autocorrelation().to_string(float_format=lambda v: f"{v:.3f}"))
            generate_trace_plot(fit, output_dir / f"{name}_trace.png")
            generate_autocorrelation_plot(fit, output_dir / f"{name}_autocorr.png")
        print("\nConfusion matrix (rows = actual, columns = predicted):")
        print(summary.confusion.to_string())
        print(
            f"Accuracy: {summary.accuracy:.3f}  Sensitivity: {summary.sensitivity:.3f}  "
            f"Specificity: {summary.specificity:.3f}"
        )
        generate_confusion_matrix_plot(summary, output_dir / f"{name}_confusion_matrix.png", title=name)

    coefficients_df, metrics_df = compare_models(fits, test_df, spec, threshold, positive_label)
    print("\n" + "=" * 60)
    print("MODEL COMPARISON")
    print("=" * 60)
    print(coefficients_df.to_string(float_format=lambda v: f"{v:.4f}"))
    print()
    print(metrics_df.to_string())

    coefficients_df.to_csv(output_dir / "coefficients.csv")
    metrics_df.to_csv(output_dir / "comparison.csv")

    if config.get("mlflow", {}).get("enabled", False):
        log_to_mlflow(config, fits, metrics_df)

    joblib.dump(
        {
            "spec": spec,
            "coefficients": coefficients_df,
            "draws": {name: fit.draws for name, fit in fits.items() if name != FREQUENTIST_MODEL},
            "config": config,
        },
        output_dir / "model_artifacts.pkl",
    )

    summary = {
        "run_date": datetime.now().isoformat(),
        "data_path": str(config["data"]["raw_path"]),
        "cleaned_records": len(cleaned),
        "train_records": len(train_df),
        "test_records": len(test_df),
        "formula": spec.formula,
        "metrics": {
            name: {k: float(v) if isinstance(v, (np.number, float)) else int(v) for k, v in row.items()}
            for name, row in metrics_df.to_dict(orient="index").items()
        },
    }
    with open(output_dir / "summary.json", "w") as f:
        json.dump(summary, f, indent=2)

    logger.info(f"Case study complete. Results saved to: {output_dir}")
    return summary


def main():
    """CLI entry point for the case study."""
    parser = argparse.ArgumentParser(description="Bayesian logistic regression case study on diabetes records")
    parser.add_argument(
        "--config", type=Path, default=Path("configs/case_study.yaml"), help="Config file path"
    )
    parser.add_argument("--output-dir", type=Path, default=None, help="Report directory")
    args = parser.parse_args()

    config = load_config(args.config)
    output_dir = args.output_dir or Path(config.get("output", {}).get("report_dir", "reports/case_study"))
    run_case_study(config, output_dir)
    return 0


if __name__ == "__main__":
    exit(main())
