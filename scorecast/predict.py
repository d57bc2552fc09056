"""
Prediction Module

Turns a set of correct-score odds into a ranked score prediction.
Provides a clean interface for generating predictions for new fixtures.

Pipeline:
- Normalise odds and derive features
- Run the four factor analyzers
- Combine factors into a final ranking score per entry
- Rank entries, pick the primary prediction and alternatives
- Estimate a bounded confidence and classify the risk
"""

from __future__ import annotations

import hashlib
import json
import logging
import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Iterable, MutableMapping, Optional, Sequence

from .analyzers import (
    MarketSummary,
    analyze_market,
    cluster_scores,
    pattern_scores,
    risk_scores,
)
from .data_loader import OddsEntry, normalize_odds
from .feature_engineering import DerivedEntry, FeatureEngineer

logger = logging.getLogger(__name__)

# Combiner weights (sum to 1.0) and the scale applied to each factor
PROBABILITY_WEIGHT = 0.30
VALUE_WEIGHT = 0.20
CLUSTER_WEIGHT = 0.20
PATTERN_WEIGHT = 0.15
RISK_WEIGHT = 0.15

VALUE_SCALE = 15
CLUSTER_SCALE = 20
PATTERN_SCALE = 15
RISK_SCALE = 10

MIN_CONFIDENCE = 45
MAX_CONFIDENCE = 95
BASE_CONFIDENCE_CAP = 85

FALLBACK_SCORE = "1-1"
FALLBACK_ALGORITHM = "Insufficient data"


class RiskLevel(str, Enum):
    VERY_LOW = "VeryLow"
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    VERY_HIGH = "VeryHigh"


# (min confidence, max coefficient, level), first match wins
RISK_TABLE = [
    (85, 4, RiskLevel.VERY_LOW),
    (75, 6, RiskLevel.LOW),
    (65, 10, RiskLevel.MODERATE),
    (55, None, RiskLevel.HIGH),
]


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round halves away from zero for positive values (2.5 -> 3, not 2)."""
    if not math.isfinite(value):
        return value
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


@dataclass(frozen=True)
class RankedScore:
    """Entry of the top predictions list."""

    score: str
    probability: int
    final_score: float


@dataclass(frozen=True)
class AlternativeScore:
    """High-scoring runner-up offered next to the primary prediction."""

    score: str
    probability: int
    coefficient: float


@dataclass(frozen=True)
class Prediction:
    """Complete prediction for a fixture."""

    predicted_score: str
    confidence: int
    risk_level: RiskLevel
    algorithm_label: str
    market_analysis: MarketSummary

    top_predictions: tuple[RankedScore, ...] = ()
    alternative_scores: tuple[AlternativeScore, ...] = ()

    # Odds the prediction was built from, used by the validation engine
    score_odds: tuple[OddsEntry, ...] = ()

    @property
    def is_fallback(self) -> bool:
        return not self.score_odds and self.algorithm_label == FALLBACK_ALGORITHM

    def to_dict(self) -> dict[str, Any]:
        return {
            "predicted_score": self.predicted_score,
            "confidence": self.confidence,
            "risk_level": self.risk_level.value,
            "algorithm_label": self.algorithm_label,
            "market_analysis": self.market_analysis.to_dict(),
            "top_predictions": [
                {"score": p.score, "probability": p.probability, "final_score": p.final_score}
                for p in self.top_predictions
            ],
            "alternative_scores": [
                {"score": a.score, "probability": a.probability, "coefficient": a.coefficient}
                for a in self.alternative_scores
            ],
            "score_odds": [
                {"score": o.score, "coefficient": o.coefficient, "probability": o.probability}
                for o in self.score_odds
            ],
        }


@dataclass
class PredictorConfig:
    """Configuration for ranking and confidence estimation."""

    top_n: int = 6
    alternative_ranks: tuple[int, int] = (1, 4)  # slice of the ranked list
    alternative_min_score: float = 80.0
    alternative_probability_cap: int = 92
    depth_bonuses: list[tuple[int, int]] = field(
        default_factory=lambda: [(20, 8), (15, 6), (10, 4), (5, 2)]
    )
    gap_bonuses: list[tuple[float, int]] = field(
        default_factory=lambda: [(15, 6), (10, 4), (5, 2)]
    )
    coefficient_bonuses: list[tuple[float, int]] = field(
        default_factory=lambda: [(3, 5), (5, 3)]
    )
    strong_market_bonus: int = 3


def combine_scores(
    entries: Sequence[DerivedEntry],
    clusters: Sequence[float],
    patterns: Sequence[float],
    risks: Sequence[float],
    market: MarketSummary,
) -> list[DerivedEntry]:
    """
    Merge the factor outputs into one final score per entry.

    final = (p * 0.30 + value * 15 * 0.20 + cluster * 20 * 0.20
             + pattern * 15 * 0.15 + risk * 10 * 0.15) * market strength

    floored at 0.

    Returns:
        New DerivedEntry objects (input order) carrying all factor scores.
    """
    combined = []
    for entry, cluster, pattern, risk in zip(entries, clusters, patterns, risks):
        raw = (
            entry.probability * PROBABILITY_WEIGHT
            + entry.value_score * VALUE_SCALE * VALUE_WEIGHT
            + cluster * CLUSTER_SCALE * CLUSTER_WEIGHT
            + pattern * PATTERN_SCALE * PATTERN_WEIGHT
            + risk * RISK_SCALE * RISK_WEIGHT
        ) * market.market_strength
        combined.append(
            replace(
                entry,
                cluster_score=cluster,
                pattern_score=pattern,
                risk_score=risk,
                final_score=max(0.0, raw),
            )
        )
    return combined


def rank_entries(entries: Sequence[DerivedEntry]) -> list[DerivedEntry]:
    """Sort by final score, highest first. Ties keep input order."""
    return sorted(entries, key=lambda entry: entry.final_score, reverse=True)


def _tiered_bonus(value: float, tiers: Sequence[tuple[float, int]], at_most: bool = False) -> int:
    for threshold, bonus in tiers:
        if (value <= threshold) if at_most else (value >= threshold):
            return bonus
    return 0


def estimate_confidence(
    primary: DerivedEntry,
    ranked: Sequence[DerivedEntry],
    depth: int,
    market: MarketSummary,
    config: Optional[PredictorConfig] = None,
) -> int:
    """
    Derive a bounded confidence for the primary prediction.

    Starts from the primary final score (capped at 85) and adds bonuses
    for data depth, the gap to the runner-up, a favourable coefficient
    and a strong market.

    Args:
        primary: Top ranked entry.
        ranked: All entries, ranked.
        depth: Number of valid quotations.
        market: Market summary of the odds set.
        config: Bonus tables (defaults if not provided).

    Returns:
        Integer confidence in [45, 95].
    """
    if config is None:
        config = PredictorConfig()

    confidence = min(primary.final_score, BASE_CONFIDENCE_CAP)
    confidence += _tiered_bonus(depth, config.depth_bonuses)

    if len(ranked) > 1:
        gap = primary.final_score - ranked[1].final_score
        confidence += _tiered_bonus(gap, config.gap_bonuses)

    confidence += _tiered_bonus(primary.coefficient, config.coefficient_bonuses, at_most=True)

    if market.market_strength >= 1.3:
        confidence += config.strong_market_bonus

    return int(min(MAX_CONFIDENCE, max(MIN_CONFIDENCE, round_half_up(confidence))))


def classify_risk(confidence: float, coefficient: float) -> RiskLevel:
    """Map confidence and primary coefficient to a risk level."""
    for min_confidence, max_coefficient, level in RISK_TABLE:
        if confidence < min_confidence:
            continue
        if max_coefficient is None or coefficient <= max_coefficient:
            return level
    return RiskLevel.VERY_HIGH


def select_algorithm_label(
    clusters: Sequence[float],
    patterns: Sequence[float],
    market: MarketSummary,
) -> str:
    """Name the factor that dominated the analysis."""
    if market.market_strength >= 1.3:
        return "Market Analysis+"
    if clusters and clusters[0] >= 1.3:
        return "Clustering+"
    if patterns and patterns[0] >= 1.2:
        return "Pattern Recognition+"
    return "Multi-Algorithm"


def odds_fingerprint(entries: Iterable[OddsEntry], extra: str = "") -> str:
    """Stable hash of a normalised odds list, used as a cache key."""
    payload = json.dumps(
        [[e.score, e.coefficient, e.probability, e.quoted_probability] for e in entries],
        separators=(",", ":"),
    )
    return hashlib.sha256((payload + extra).encode("utf-8")).hexdigest()


def fallback_prediction() -> Prediction:
    """Sentinel prediction for an odds set with no usable entries."""
    return Prediction(
        predicted_score=FALLBACK_SCORE,
        confidence=MIN_CONFIDENCE,
        risk_level=RiskLevel.VERY_HIGH,
        algorithm_label=FALLBACK_ALGORITHM,
        market_analysis=MarketSummary.empty(),
    )


class ScorePredictor:
    """
    Generate correct-score predictions from bookmaker odds.

    This class provides:
    - Primary score prediction with bounded confidence
    - Top-N ranking and high-score alternatives
    - Risk classification
    - Optional caching through a caller-supplied mapping

    Example:
        >>> predictor = ScorePredictor()
        >>> prediction = predictor.predict([
        ...     {"score": "2-1", "coefficient": 3.0, "probability": 30},
        ...     {"score": "1-1", "coefficient": 4.0, "probability": 20},
        ... ])
        >>> print(prediction.predicted_score, prediction.confidence)
    """

    def __init__(
        self,
        config: Optional[PredictorConfig] = None,
        cache: Optional[MutableMapping[str, Prediction]] = None,
    ):
        """
        Initialize the predictor.

        Args:
            config: Ranking and confidence configuration.
            cache: Optional mapping used to memoise predictions per odds set.
        """
        self.config = config or PredictorConfig()
        self.cache = cache
        self.engineer = FeatureEngineer()

    def predict(self, odds: Optional[Iterable[Any]]) -> Prediction:
        """
        Generate a prediction for one fixture.

        Args:
            odds: Raw odds records; malformed ones are dropped.

        Returns:
            Prediction. With no valid entries this is the fallback
            prediction ("1-1", confidence 45, VeryHigh risk).
        """
        entries = self._finite_entries(normalize_odds(odds))

        key = None
        if self.cache is not None:
            key = odds_fingerprint(entries, repr(self.config))
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        prediction = self._build(entries)

        if key is not None:
            self.cache[key] = prediction
        return prediction

    def analyze(self, odds: Optional[Iterable[Any]]) -> list[DerivedEntry]:
        """
        Run the scoring pipeline and return every entry, ranked.

        Args:
            odds: Raw odds records.

        Returns:
            Ranked DerivedEntry list (empty when nothing is valid).
        """
        entries = self._finite_entries(normalize_odds(odds))
        ranked, _, _, _ = self._score(entries)
        return ranked

    def _finite_entries(self, entries: Sequence[OddsEntry]) -> list[OddsEntry]:
        """Drop entries whose combined scores overflow to inf or NaN."""
        entries = list(entries)
        while entries:
            combined, _, _, _ = self._combine(entries)
            kept = [
                entry for entry, scored in zip(entries, combined)
                if math.isfinite(scored.final_score) and math.isfinite(scored.risk_adjusted)
            ]
            if len(kept) == len(entries):
                break
            logger.debug("Dropped %d entries with non-finite scores", len(entries) - len(kept))
            entries = kept
        return entries

    def _combine(self, entries: Sequence[OddsEntry]):
        derived = self.engineer.derive(entries)
        clusters = cluster_scores(derived)
        patterns = pattern_scores(derived)
        risks = risk_scores(derived)
        market = analyze_market(derived)
        return combine_scores(derived, clusters, patterns, risks, market), clusters, patterns, market

    def _score(self, entries: Sequence[OddsEntry]):
        combined, clusters, patterns, market = self._combine(entries)
        return rank_entries(combined), clusters, patterns, market

    def _build(self, entries: Sequence[OddsEntry]) -> Prediction:
        if not entries:
            logger.info("No valid odds entries, returning fallback prediction")
            return fallback_prediction()

        ranked, clusters, patterns, market = self._score(entries)
        primary = ranked[0]

        confidence = estimate_confidence(primary, ranked, len(entries), market, self.config)
        risk_level = classify_risk(confidence, primary.coefficient)

        prediction = Prediction(
            predicted_score=primary.score,
            confidence=confidence,
            risk_level=risk_level,
            algorithm_label=select_algorithm_label(clusters, patterns, market),
            market_analysis=market,
            top_predictions=self._top_predictions(ranked),
            alternative_scores=self._alternatives(ranked),
            score_odds=tuple(entries),
        )

        logger.debug(
            "Predicted %s (confidence %d, risk %s) from %d entries",
            prediction.predicted_score,
            prediction.confidence,
            prediction.risk_level.value,
            len(entries),
        )
        return prediction

    def _top_predictions(self, ranked: Sequence[DerivedEntry]) -> tuple[RankedScore, ...]:
        return tuple(
            RankedScore(
                score=entry.score,
                probability=int(round_half_up(entry.probability)),
                final_score=round_half_up(entry.final_score, 2),
            )
            for entry in ranked[: self.config.top_n]
        )

    def _alternatives(self, ranked: Sequence[DerivedEntry]) -> tuple[AlternativeScore, ...]:
        start, stop = self.config.alternative_ranks
        return tuple(
            AlternativeScore(
                score=entry.score,
                probability=int(
                    min(self.config.alternative_probability_cap, round_half_up(entry.final_score))
                ),
                coefficient=entry.coefficient,
            )
            for entry in ranked[start:stop]
            if entry.final_score >= self.config.alternative_min_score
        )


def format_prediction(prediction: Prediction) -> str:
    """
    Format a prediction for display.

    Args:
        prediction: Prediction object.

    Returns:
        Formatted string representation.
    """
    market = prediction.market_analysis
    lines = [
        f"\n{'=' * 50}",
        f"Predicted score: {prediction.predicted_score}",
        f"Confidence: {prediction.confidence}%",
        f"Risk level: {prediction.risk_level.value}",
        f"Algorithm: {prediction.algorithm_label}",
        f"{'=' * 50}",
        "",
        "Market:",
        f"  Scores analyzed: {market.total_scores_analyzed}",
        f"  Sentiment:       {market.overall_sentiment.value}",
        f"  Avg coefficient: {market.avg_coefficient:.2f}",
        f"  Prob. range:     {market.confidence_range:.2f}",
    ]

    if prediction.top_predictions:
        lines.extend(["", "Top predictions:"])
        for rank, item in enumerate(prediction.top_predictions, start=1):
            lines.append(
                f"  {rank}. {item.score:<6} prob {item.probability:>3}%  score {item.final_score:.2f}"
            )

    if prediction.alternative_scores:
        lines.extend(["", "Alternatives:"])
        for alt in prediction.alternative_scores:
            lines.append(f"  {alt.score:<6} {alt.probability}% @ {alt.coefficient}")

    return "\n".join(lines)
