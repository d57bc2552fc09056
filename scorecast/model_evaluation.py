"""
Model Evaluation Module

Post-hoc accuracy tracking for score predictions. Once a fixture is
finished the caller attaches the actual final score to its prediction;
this module aggregates those tagged predictions into accuracy statistics.

Storage of predictions is the caller's concern; everything here works on
plain lists of PredictionOutcome objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

import pandas as pd

from .data_loader import ScoreLine
from .predict import Prediction, RiskLevel, round_half_up

HIGH_CONFIDENCE_THRESHOLD = 80
LOW_RISK_LEVELS = (RiskLevel.VERY_LOW, RiskLevel.LOW)

CONFIDENCE_BRACKETS = [
    ("90+", 90, 100),
    ("80-89", 80, 89),
    ("70-79", 70, 79),
    ("60-69", 60, 69),
    ("<60", 0, 59),
]


@dataclass(frozen=True)
class PredictionOutcome:
    """A prediction tagged with the actual final score."""

    prediction: Prediction
    actual_score: str
    correct: bool


@dataclass
class AccuracyReport:
    """Accuracy statistics over tagged predictions."""

    total_predictions: int
    completed_predictions: int
    correct_predictions: int
    accuracy_rate: int
    pending_predictions: int
    high_confidence_accuracy: int = 0
    low_risk_accuracy: int = 0
    algorithm_performance: list[dict] = field(default_factory=list)
    confidence_brackets: dict[str, dict] = field(default_factory=dict)


def tag_result(prediction: Prediction, actual_score: str) -> PredictionOutcome:
    """
    Attach an actual final score to a prediction.

    Labels are compared as score lines, so " 2-1" and "02-1" match "2-1".

    Args:
        prediction: The original prediction (left untouched).
        actual_score: Final score label reported by the score feed.

    Returns:
        PredictionOutcome.

    Raises:
        ValueError: If actual_score is not a valid score label.
    """
    actual = ScoreLine.parse(actual_score)
    return PredictionOutcome(
        prediction=prediction,
        actual_score=actual_score.strip(),
        correct=ScoreLine.parse(prediction.predicted_score) == actual,
    )


def _percent(correct: int, total: int) -> int:
    return int(round_half_up(correct / total * 100)) if total > 0 else 0


class ModelEvaluator:
    """
    Evaluate prediction accuracy over finished fixtures.

    Provides methods to:
    - Build a per-prediction outcome table
    - Compute overall, high-confidence and low-risk accuracy
    - Break accuracy down by algorithm label and confidence bracket

    Example:
        >>> evaluator = ModelEvaluator()
        >>> report = evaluator.evaluate(outcomes, pending=3)
        >>> print(f"Accuracy: {report.accuracy_rate}%")
    """

    def outcomes_frame(self, outcomes: Iterable[PredictionOutcome]) -> pd.DataFrame:
        """
        Flatten outcomes into a DataFrame.

        Columns: predicted_score, actual_score, correct, confidence,
        risk_level, algorithm_label.
        """
        rows = [
            {
                "predicted_score": o.prediction.predicted_score,
                "actual_score": o.actual_score,
                "correct": o.correct,
                "confidence": o.prediction.confidence,
                "risk_level": o.prediction.risk_level.value,
                "algorithm_label": o.prediction.algorithm_label,
            }
            for o in outcomes
        ]
        return pd.DataFrame(
            rows,
            columns=[
                "predicted_score",
                "actual_score",
                "correct",
                "confidence",
                "risk_level",
                "algorithm_label",
            ],
        )

    def evaluate(
        self,
        outcomes: Iterable[PredictionOutcome],
        pending: int = 0,
    ) -> AccuracyReport:
        """
        Compute accuracy statistics.

        Args:
            outcomes: Predictions tagged with their actual score.
            pending: Number of predictions still waiting for a result.

        Returns:
            AccuracyReport (percentages are integers, 0 when undefined).
        """
        df = self.outcomes_frame(outcomes)
        completed = len(df)
        correct = int(df["correct"].sum()) if completed else 0

        high = df[df["confidence"] >= HIGH_CONFIDENCE_THRESHOLD]
        low_risk = df[df["risk_level"].isin([level.value for level in LOW_RISK_LEVELS])]

        return AccuracyReport(
            total_predictions=completed + pending,
            completed_predictions=completed,
            correct_predictions=correct,
            accuracy_rate=_percent(correct, completed),
            pending_predictions=pending,
            high_confidence_accuracy=_percent(int(high["correct"].sum()), len(high)),
            low_risk_accuracy=_percent(int(low_risk["correct"].sum()), len(low_risk)),
            algorithm_performance=self.algorithm_performance(df),
            confidence_brackets=self.confidence_brackets(df),
        )

    def algorithm_performance(self, df: pd.DataFrame) -> list[dict]:
        """Accuracy per algorithm label, in order of first appearance."""
        if df.empty:
            return []

        grouped = df.groupby("algorithm_label", sort=False)["correct"].agg(["count", "sum"])
        return [
            {
                "name": name,
                "total": int(row["count"]),
                "correct": int(row["sum"]),
                "accuracy": _percent(int(row["sum"]), int(row["count"])),
            }
            for name, row in grouped.iterrows()
        ]

    def confidence_brackets(self, df: pd.DataFrame) -> dict[str, dict]:
        """Accuracy per confidence bracket (90+, 80-89, 70-79, 60-69, <60)."""
        brackets = {}
        for name, low, high in CONFIDENCE_BRACKETS:
            in_range = df[(df["confidence"] >= low) & (df["confidence"] <= high)]
            total = len(in_range)
            correct = int(in_range["correct"].sum()) if total else 0
            brackets[name] = {
                "total": total,
                "correct": correct,
                "accuracy": _percent(correct, total),
            }
        return brackets


def accuracy_report(
    outcomes: Iterable[PredictionOutcome],
    pending: Optional[int] = None,
) -> AccuracyReport:
    """Convenience wrapper around ModelEvaluator.evaluate."""
    return ModelEvaluator().evaluate(outcomes, pending=pending or 0)
