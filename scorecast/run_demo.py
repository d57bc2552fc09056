#!/usr/bin/env python3
"""
Run Demo Script

Complete pipeline demonstration for correct-score predictions.
This script shows the full workflow from odds loading to validation.

Usage:
    python -m scorecast.run_demo

Or with custom data:
    python -m scorecast.run_demo --odds path/to/odds.csv
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path

import pandas as pd

from .data_loader import OddsDataLoader
from .feature_engineering import FeatureEngineer
from .model_evaluation import ModelEvaluator, tag_result
from .patterns import InsufficientDataError, PatternDetector
from .predict import ScorePredictor, format_prediction
from .validation import PredictionValidator


def configure_logging() -> None:
    """Route library logs through one handler, level from LOG_LEVEL."""
    level_name = (os.getenv("LOG_LEVEL") or "WARNING").strip().upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def create_sample_odds() -> pd.DataFrame:
    """
    Create sample correct-score odds for demonstration.

    Mimics a bookmaker's correct-score market for a single fixture,
    including two malformed rows that the loader drops.

    Returns:
        DataFrame with score, coefficient and probability columns.
    """
    data = {
        "score": [
            "1-0", "2-1", "1-1", "2-0", "0-0", "0-1", "1-2", "2-2",
            "3-1", "3-0", "0-2", "3-2", "1-3", "4-1", "0-3", "2-3",
            "4-0", "3-3", "bad", "1-1 ",
        ],
        "coefficient": [
            6.5, 7.0, 6.0, 8.0, 9.5, 10.0, 11.0, 13.0,
            14.0, 15.0, 17.0, 21.0, 26.0, 29.0, 34.0, 36.0,
            41.0, 51.0, 3.0, -2.0,
        ],
        "probability": [
            15.4, 14.3, 16.7, 12.5, 10.5, 10.0, 9.1, 7.7,
            7.1, 6.7, 5.9, 4.8, 3.8, 3.4, 2.9, 2.8,
            2.4, 2.0, 33.0, 16.0,
        ],
    }
    return pd.DataFrame(data)


def run_pipeline(odds_path: str | Path | None = None, actual_score: str | None = None,
                 as_json: bool = False) -> None:
    """
    Run the complete prediction pipeline.

    Steps:
    1. Load and validate odds
    2. Show the odds analysis table
    3. Generate the prediction
    4. Validate the prediction
    5. Detect patterns
    6. Tag the actual result (optional)

    Args:
        odds_path: Path to CSV file (uses sample data if None).
        actual_score: Final score to tag the prediction with.
        as_json: Print machine-readable JSON instead of text.
    """
    loader = OddsDataLoader()

    if odds_path:
        df = loader.load(odds_path)
    else:
        df = create_sample_odds()

    report = loader.validate(df)
    entries = loader.prepare(df)

    predictor = ScorePredictor()
    prediction = predictor.predict(entries)
    validation = PredictionValidator().validate(prediction, df.to_dict(orient="records"))

    pattern_error = None
    try:
        patterns = PatternDetector().detect(entries)
    except InsufficientDataError as e:
        patterns = None
        pattern_error = str(e)

    outcome = tag_result(prediction, actual_score) if actual_score else None

    if as_json:
        payload = {
            "prediction": prediction.to_dict(),
            "validation": validation.to_dict(),
            "patterns": patterns.to_dict() if patterns else None,
        }
        if outcome is not None:
            payload["result"] = {"actual_score": outcome.actual_score, "correct": outcome.correct}
        print(json.dumps(payload, indent=2))
        return

    print("=" * 60)
    print("CORRECT SCORE PREDICTION DEMO")
    print("=" * 60)

    # =========================================================================
    # Step 1: Load Odds
    # =========================================================================
    print("\n[1/6] Loading Odds...")
    source = odds_path or "sample data"
    print(f"  Loaded {len(df)} rows from {source}")
    print(f"  Valid entries: {report.n_valid} (dropped {report.n_dropped})")
    for w in report.warnings:
        print(f"  Warning: {w}")
    for err in report.errors:
        print(f"  ERROR: {err}")

    # =========================================================================
    # Step 2: Odds Analysis
    # =========================================================================
    print("\n[2/6] Analysing Odds...")
    engineer = FeatureEngineer()
    metrics = engineer.market_metrics(entries)
    print(f"  Average probability: {metrics['avg_probability']:.2f}")
    print(f"  Average coefficient: {metrics['avg_coefficient']:.2f}")
    print(f"  Market sentiment: {metrics['market_sentiment']}")
    print(f"  High-value scores: {metrics['high_value_scores']}")

    table = engineer.build_frame(entries)
    if len(table) > 0:
        columns = ["score", "coefficient", "probability", "value_score", "risk_band"]
        print("\n" + table[columns].head(10).to_string(index=False))

    # =========================================================================
    # Step 3: Prediction
    # =========================================================================
    print("\n[3/6] Generating Prediction...")
    print(format_prediction(prediction))

    # =========================================================================
    # Step 4: Validation
    # =========================================================================
    print("\n[4/6] Validating Prediction...")
    for name, score in validation.metrics.items():
        print(f"  {name}: {score}")
    print(f"  Validation score: {validation.validation_score}/100")
    print(f"  Valid: {validation.is_valid}")
    print(f"  {validation.recommendation}")

    # =========================================================================
    # Step 5: Patterns
    # =========================================================================
    print("\n[5/6] Detecting Patterns...")
    if patterns is None:
        print(f"  Skipped: {pattern_error}")
    else:
        print(f"  Strong patterns: {patterns.patterns_detected}")
        print(f"  Pattern confidence: {patterns.confidence}%")
        print(f"  Pattern risk: {patterns.risk.level.value} ({patterns.risk.score})")
        for rec in patterns.recommendations:
            print(f"  [{rec.priority}] {rec.message}")

    # =========================================================================
    # Step 6: Result
    # =========================================================================
    print("\n[6/6] Result Tracking...")
    if outcome is None:
        print("  No actual score given (use --actual)")
    else:
        accuracy = ModelEvaluator().evaluate([outcome])
        status = "correct" if outcome.correct else "incorrect"
        print(f"  Actual score: {outcome.actual_score} ({status})")
        print(f"  Accuracy: {accuracy.accuracy_rate}%")

    print("\n" + "=" * 60)
    print("PIPELINE COMPLETE")
    print("=" * 60)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Run the correct-score prediction pipeline demo"
    )
    parser.add_argument(
        "--odds",
        type=str,
        default=None,
        help="Path to CSV file with score,coefficient[,probability] columns "
             "(uses sample data if not provided)",
    )
    parser.add_argument(
        "--actual",
        type=str,
        default=None,
        help="Actual final score, to tag the prediction as correct or not",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print JSON instead of the text report",
    )

    args = parser.parse_args()
    configure_logging()

    run_pipeline(
        odds_path=args.odds,
        actual_score=args.actual,
        as_json=args.json,
    )


if __name__ == "__main__":
    main()
