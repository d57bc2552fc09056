"""
Factor Analyzers Module

Four independent analyzers that each look at the full list of derived
entries. Three of them return a per-entry multiplier (aligned with the
input list); the market analyzer returns a set-level summary.

Analyzers:
- Clustering: rewards coefficients below the set average
- Market: overall sentiment and a trust multiplier from data depth
- Pattern: rewards entries matching the dominant low/high-scoring pattern
- Risk: rewards low coefficients
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence

import numpy as np

from .feature_engineering import DerivedEntry

LOW_SCORING_MAX_GOALS = 2


class MarketSentiment(str, Enum):
    POSITIVE = "Positive"
    NEUTRAL = "Neutral"
    NEGATIVE = "Negative"


@dataclass(frozen=True)
class MarketSummary:
    """Set-level market view shared by the combiner and confidence estimator."""

    overall_sentiment: MarketSentiment
    avg_coefficient: float
    confidence_range: float
    market_strength: float
    total_scores_analyzed: int = 0

    @classmethod
    def empty(cls) -> MarketSummary:
        return cls(
            overall_sentiment=MarketSentiment.NEUTRAL,
            avg_coefficient=0.0,
            confidence_range=0.0,
            market_strength=1.1,
            total_scores_analyzed=0,
        )

    def to_dict(self) -> dict:
        return {
            "overall_sentiment": self.overall_sentiment.value,
            "avg_coefficient": self.avg_coefficient,
            "confidence_range": self.confidence_range,
            "market_strength": self.market_strength,
            "total_scores_analyzed": self.total_scores_analyzed,
        }


def cluster_scores(entries: Sequence[DerivedEntry]) -> list[float]:
    """
    Score each entry by where its coefficient sits in the set distribution.

    Uses the mean and population standard deviation of the coefficients:
        c < mean - std  -> 1.4
        c < mean        -> 1.2
        c < mean + std  -> 1.0
        otherwise       -> 0.8

    Args:
        entries: Derived entries.

    Returns:
        One multiplier per entry, in input order.
    """
    if not entries:
        return []

    coefficients = np.array([entry.coefficient for entry in entries], dtype=float)
    mean = float(coefficients.mean())
    std = float(coefficients.std())

    scores = []
    for coefficient in coefficients:
        if coefficient < mean - std:
            scores.append(1.4)
        elif coefficient < mean:
            scores.append(1.2)
        elif coefficient < mean + std:
            scores.append(1.0)
        else:
            scores.append(0.8)
    return scores


def market_strength(depth: int) -> float:
    """More valid quotations means a stronger trust multiplier."""
    if depth >= 15:
        return 1.3
    if depth >= 10:
        return 1.2
    return 1.1


def analyze_market(entries: Sequence[DerivedEntry]) -> MarketSummary:
    """
    Summarise the market for a set of odds.

    Sentiment is Positive when the summed market sentiment is above 0,
    Negative when it is below -10, Neutral otherwise.

    Args:
        entries: Derived entries.

    Returns:
        MarketSummary (an empty neutral summary for no entries).
    """
    if not entries:
        return MarketSummary.empty()

    total_sentiment = sum(entry.market_sentiment for entry in entries)
    if total_sentiment > 0:
        sentiment = MarketSentiment.POSITIVE
    elif total_sentiment < -10:
        sentiment = MarketSentiment.NEGATIVE
    else:
        sentiment = MarketSentiment.NEUTRAL

    coefficients = np.array([entry.coefficient for entry in entries], dtype=float)
    probabilities = np.array([entry.probability for entry in entries], dtype=float)

    return MarketSummary(
        overall_sentiment=sentiment,
        avg_coefficient=round(float(coefficients.mean()), 2),
        confidence_range=round(float(probabilities.max() - probabilities.min()), 2),
        market_strength=market_strength(len(entries)),
        total_scores_analyzed=len(entries),
    )


def dominant_pattern(entries: Sequence[DerivedEntry]) -> str:
    """
    Return "low-scoring" or "high-scoring" for the set.

    Low-scoring wins only with a strict majority; ties go to high-scoring.
    """
    low = sum(1 for entry in entries if entry.total_goals <= LOW_SCORING_MAX_GOALS)
    high = len(entries) - low
    return "low-scoring" if low > high else "high-scoring"


def pattern_scores(entries: Sequence[DerivedEntry]) -> list[float]:
    """
    Reward entries that match the set's dominant scoring pattern.

    Args:
        entries: Derived entries.

    Returns:
        1.25 for entries matching the dominant pattern, 1.0 otherwise.
    """
    if not entries:
        return []

    pattern = dominant_pattern(entries)
    scores = []
    for entry in entries:
        is_low = entry.total_goals <= LOW_SCORING_MAX_GOALS
        matches = is_low if pattern == "low-scoring" else not is_low
        scores.append(1.25 if matches else 1.0)
    return scores


def risk_scores(entries: Sequence[DerivedEntry]) -> list[float]:
    """
    Score each entry by coefficient bucket (lower odds are trusted more).

        c <= 3  -> 1.4
        c <= 6  -> 1.2
        c <= 10 -> 1.0
        else    -> 0.7
    """
    scores = []
    for entry in entries:
        if entry.coefficient <= 3:
            scores.append(1.4)
        elif entry.coefficient <= 6:
            scores.append(1.2)
        elif entry.coefficient <= 10:
            scores.append(1.0)
        else:
            scores.append(0.7)
    return scores
