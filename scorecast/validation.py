"""
Validation Module

Independent plausibility check of an existing prediction against the
odds it was built from. Four quality metrics (each 0-100) are combined
with fixed weights into one validation score.

Metrics:
- odds_quality: size, coefficient spread and probability mass of the odds
- prediction_realism: is the predicted score quoted, at plausible odds?
- confidence_calibration: distance between stated and expected confidence
- market_consistency: quoted probabilities against coefficient-implied ones

Higher scores are better for all metrics.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Sequence

import numpy as np

from .data_loader import OddsEntry, ScoreLine, normalize_odds
from .predict import Prediction, round_half_up

ODDS_QUALITY_WEIGHT = 0.25
PREDICTION_REALISM_WEIGHT = 0.25
CONFIDENCE_CALIBRATION_WEIGHT = 0.25
MARKET_CONSISTENCY_WEIGHT = 0.25

VALIDITY_THRESHOLD = 70

RECOMMENDATIONS = [
    (90, "Excellent prediction - very high reliability"),
    (80, "Good prediction - high reliability"),
    (70, "Sound prediction - moderate reliability"),
    (60, "Acceptable prediction - limited reliability"),
]
FALLBACK_RECOMMENDATION = "Risky prediction - insufficient data"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one prediction."""

    is_valid: bool
    validation_score: int
    metrics: Mapping[str, int]
    recommendation: str

    def __post_init__(self):
        object.__setattr__(self, "metrics", MappingProxyType(dict(self.metrics)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "validation_score": self.validation_score,
            "metrics": dict(self.metrics),
            "recommendation": self.recommendation,
        }


@dataclass
class ValidationConfig:
    """Metric weights and the validity threshold."""

    odds_quality_weight: float = ODDS_QUALITY_WEIGHT
    prediction_realism_weight: float = PREDICTION_REALISM_WEIGHT
    confidence_calibration_weight: float = CONFIDENCE_CALIBRATION_WEIGHT
    market_consistency_weight: float = MARKET_CONSISTENCY_WEIGHT
    threshold: int = VALIDITY_THRESHOLD

    def __post_init__(self):
        weights = self.weights().values()
        if any(weight < 0 for weight in weights) or sum(weights) <= 0:
            raise ValueError("Validation weights must be non-negative with a positive sum")

    def weights(self) -> dict[str, float]:
        return {
            "odds_quality": self.odds_quality_weight,
            "prediction_realism": self.prediction_realism_weight,
            "confidence_calibration": self.confidence_calibration_weight,
            "market_consistency": self.market_consistency_weight,
        }


def assess_odds_quality(entries: Sequence[OddsEntry]) -> float:
    """
    Score the odds set itself.

    Components:
    - Quantity: 40/35/28/20/10 points at 25/20/15/10/5 entries
    - Coefficient range: 30/25/18/10 points at a max-min of 20/15/10/5
    - Probability mass: 30 points within 90-110%, 20 within 80-120%

    Args:
        entries: Valid odds entries.

    Returns:
        Score in [0, 100] (0 for an empty set).
    """
    if not entries:
        return 0.0

    n = len(entries)
    score = 0.0

    for minimum, points in [(25, 40), (20, 35), (15, 28), (10, 20), (5, 10)]:
        if n >= minimum:
            score += points
            break

    coefficients = np.array([entry.coefficient for entry in entries], dtype=float)
    spread = float(coefficients.max() - coefficients.min())
    for minimum, points in [(20, 30), (15, 25), (10, 18), (5, 10)]:
        if spread >= minimum:
            score += points
            break

    total_probability = sum(entry.probability for entry in entries)
    if 90 <= total_probability <= 110:
        score += 30
    elif 80 <= total_probability <= 120:
        score += 20

    return min(100.0, score)


def assess_prediction_realism(predicted_score: Optional[str], entries: Sequence[OddsEntry]) -> float:
    """
    Score how plausible the predicted score is given the odds.

    A prediction that is not among the quoted scores gets 30. Otherwise
    the score starts at 50 and gains points for a coefficient in the
    1.5-15 band (or up to 25) and for a quoted probability of 5/10/15+.

    Args:
        predicted_score: Predicted score label.
        entries: Valid odds entries.

    Returns:
        Score in [0, 100].
    """
    if not predicted_score or not entries:
        return 50.0

    try:
        line = ScoreLine.parse(predicted_score)
    except ValueError:
        return 30.0

    match = next((entry for entry in entries if entry.score_line == line), None)
    if match is None:
        return 30.0

    score = 50.0

    if 1.5 <= match.coefficient <= 15:
        score += 30
    elif match.coefficient <= 25:
        score += 15

    if match.probability >= 15:
        score += 20
    elif match.probability >= 10:
        score += 15
    elif match.probability >= 5:
        score += 10

    return min(100.0, score)


def expected_confidence(entries: Sequence[OddsEntry]) -> float:
    """
    Confidence a prediction built from these odds should roughly carry.

    50, plus 25/20/15 for 20/15/10+ entries, plus 15 (avg coefficient <= 5)
    or 10 (<= 8).
    """
    expected = 50.0

    n = len(entries)
    if n >= 20:
        expected += 25
    elif n >= 15:
        expected += 20
    elif n >= 10:
        expected += 15

    if entries:
        avg_coefficient = float(np.mean([entry.coefficient for entry in entries]))
        if avg_coefficient <= 5:
            expected += 15
        elif avg_coefficient <= 8:
            expected += 10

    return expected


def assess_confidence_calibration(confidence: Optional[float], entries: Sequence[OddsEntry]) -> float:
    """
    Score the stated confidence by its distance to the expected confidence.

    Difference <= 10 -> 100, <= 20 -> 80, <= 30 -> 60, otherwise 40.

    Args:
        confidence: Stated confidence of the prediction.
        entries: Valid odds entries.

    Returns:
        Score in [40, 100], or 50 without a confidence or odds.
    """
    if not confidence or not entries:
        return 50.0

    difference = abs(confidence - expected_confidence(entries))

    if difference <= 10:
        return 100.0
    if difference <= 20:
        return 80.0
    if difference <= 30:
        return 60.0
    return 40.0


def assess_market_consistency(
    entries: Sequence[OddsEntry],
    raw_count: Optional[int] = None,
    tolerance: float = 15.0,
) -> float:
    """
    Score how closely quoted probabilities follow the coefficients.

    Only entries with a quoted (non-defaulted, non-zero) probability are
    checked. Each scores 100 within the tolerance of the implied
    probability, 60 within twice the tolerance, 20 beyond. The mean gets
    +5 for 15 or more checked entries.

    Args:
        entries: Valid odds entries.
        raw_count: Number of records before validation (defaults to len(entries)).
        tolerance: Accepted distance in probability points.

    Returns:
        Score in [0, 100]; 50 for fewer than 3 records, 40 for fewer
        than 3 checkable entries.
    """
    if raw_count is None:
        raw_count = len(entries)
    if raw_count < 3:
        return 50.0

    checked = [entry for entry in entries if entry.quoted_probability and entry.probability > 0]
    if len(checked) < 3:
        return 40.0

    scores = []
    for entry in checked:
        difference = abs(entry.probability - 100 / entry.coefficient)
        if difference <= tolerance:
            scores.append(100.0)
        elif difference <= tolerance * 2:
            scores.append(60.0)
        else:
            scores.append(20.0)

    consistency = float(np.mean(scores))
    if len(checked) >= 15:
        consistency += 5

    return min(100.0, consistency)


def recommendation_for(score: float) -> str:
    """Pick the recommendation text for a validation score."""
    for minimum, text in RECOMMENDATIONS:
        if score >= minimum:
            return text
    return FALLBACK_RECOMMENDATION


class PredictionValidator:
    """
    Validate predictions against their odds.

    Example:
        >>> validator = PredictionValidator()
        >>> result = validator.validate(prediction)
        >>> print(result.validation_score, result.recommendation)
    """

    def __init__(self, config: Optional[ValidationConfig] = None):
        """
        Initialize the validator.

        Args:
            config: Metric weights and validity threshold.
        """
        self.config = config or ValidationConfig()

    def validate(
        self,
        prediction: Prediction,
        odds: Optional[Iterable[Any]] = None,
    ) -> ValidationResult:
        """
        Validate one prediction.

        Args:
            prediction: Prediction to check.
            odds: Raw odds the prediction came from (default: the
                prediction's own score_odds).

        Returns:
            Fresh ValidationResult.
        """
        raw = list(odds) if odds is not None else list(prediction.score_odds)
        entries = normalize_odds(raw)

        metrics = {
            "odds_quality": assess_odds_quality(entries),
            "prediction_realism": assess_prediction_realism(prediction.predicted_score, entries),
            "confidence_calibration": assess_confidence_calibration(prediction.confidence, entries),
            "market_consistency": assess_market_consistency(entries, raw_count=len(raw)),
        }
        metrics = {name: int(round_half_up(value)) for name, value in metrics.items()}

        weights = self.config.weights()
        total_weight = sum(weights.values())
        combined = sum(metrics[name] * weight for name, weight in weights.items()) / total_weight
        score = int(min(100, max(0, round_half_up(combined))))

        return ValidationResult(
            is_valid=score >= self.config.threshold,
            validation_score=score,
            metrics=metrics,
            recommendation=recommendation_for(score),
        )


def validate_prediction(prediction: Prediction, odds: Optional[Iterable[Any]] = None) -> ValidationResult:
    """Validate with the default configuration."""
    return PredictionValidator().validate(prediction, odds)
