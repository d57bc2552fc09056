"""
Feature Engineering Module

Derives per-entry numeric features from validated correct-score odds.
Every analyzer and the combiner work on these DerivedEntry objects rather
than on raw quotations.

Features computed:
- Implied probability (100 / coefficient)
- Value score (probability / coefficient)
- Market sentiment (quoted minus implied probability)
- Risk-adjusted probability (probability * (1 - coefficient / 20))
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable

import numpy as np
import pandas as pd

from .data_loader import OddsEntry, ScoreLine

RISK_ADJUSTMENT_HORIZON = 20.0


@dataclass(frozen=True)
class DerivedEntry:
    """Validated quotation plus its derived features and factor scores."""

    score: str
    coefficient: float
    probability: float
    implied_probability: float
    value_score: float
    market_sentiment: float
    risk_adjusted: float

    # Factor multipliers, filled in by the analyzers
    cluster_score: float = 1.0
    pattern_score: float = 1.0
    risk_score: float = 1.0

    # Combined ranking score
    final_score: float = 0.0

    @property
    def total_goals(self) -> int:
        return ScoreLine.parse(self.score).total_goals


def derive_entry(entry: OddsEntry) -> DerivedEntry:
    """
    Compute the derived features of a single quotation.

    Args:
        entry: Validated odds entry (coefficient is finite and > 0).

    Returns:
        DerivedEntry carrying the same score label.
    """
    implied = 100 / entry.coefficient
    return DerivedEntry(
        score=entry.score,
        coefficient=entry.coefficient,
        probability=entry.probability,
        implied_probability=implied,
        value_score=entry.probability / entry.coefficient,
        market_sentiment=entry.probability - implied,
        risk_adjusted=entry.probability * (1 - entry.coefficient / RISK_ADJUSTMENT_HORIZON),
    )


class FeatureEngineer:
    """
    Compute features and summary tables for a set of odds.

    This class provides methods to:
    - Derive per-entry features
    - Build an analysis DataFrame with risk bands and success labels
    - Compute set-level market metrics

    Example:
        >>> engineer = FeatureEngineer()
        >>> derived = engineer.derive(entries)
        >>> table = engineer.build_frame(entries)
    """

    HIGH_VALUE_THRESHOLD = 2.0

    def derive(self, entries: Iterable[OddsEntry]) -> list[DerivedEntry]:
        """
        Derive features for every entry, preserving input order.

        Args:
            entries: Validated odds entries.

        Returns:
            One DerivedEntry per input entry.
        """
        return [derive_entry(entry) for entry in entries]

    def build_frame(self, entries: Iterable[OddsEntry]) -> pd.DataFrame:
        """
        Build the odds analysis table.

        Columns are the DerivedEntry fields plus:
        - risk_band: coefficient band (VeryLow <= 3, Low <= 5, Moderate <= 8, High)
        - success_potential: probability band (Excellent >= 20, VeryGood >= 15,
          Good >= 10, Average)

        Args:
            entries: Validated odds entries.

        Returns:
            DataFrame sorted by probability (descending, stable).
        """
        derived = self.derive(entries)
        if not derived:
            return pd.DataFrame(columns=list(DerivedEntry.__dataclass_fields__) + [
                "risk_band",
                "success_potential",
            ])

        df = pd.DataFrame([asdict(entry) for entry in derived])
        df["risk_band"] = pd.cut(
            df["coefficient"],
            bins=[0, 3, 5, 8, np.inf],
            labels=["VeryLow", "Low", "Moderate", "High"],
        ).astype(str)
        df["success_potential"] = np.select(
            [df["probability"] >= 20, df["probability"] >= 15, df["probability"] >= 10],
            ["Excellent", "VeryGood", "Good"],
            default="Average",
        )

        return df.sort_values("probability", ascending=False, kind="stable").reset_index(
            drop=True
        )

    def market_metrics(self, entries: Iterable[OddsEntry]) -> dict[str, float | int | str]:
        """
        Compute set-level market metrics.

        Args:
            entries: Validated odds entries.

        Returns:
            Dictionary with total count, average probability and coefficient,
            a Bullish/Neutral/Bearish sentiment label and the number of
            high-value entries (value score >= 2).
        """
        derived = self.derive(entries)
        if not derived:
            return {
                "total_analyzed": 0,
                "avg_probability": 0.0,
                "avg_coefficient": 0.0,
                "market_sentiment": "Neutral",
                "high_value_scores": 0,
            }

        probabilities = np.array([entry.probability for entry in derived])
        coefficients = np.array([entry.coefficient for entry in derived])
        avg_probability = float(probabilities.mean())

        if avg_probability >= 12:
            sentiment = "Bullish"
        elif avg_probability >= 8:
            sentiment = "Neutral"
        else:
            sentiment = "Bearish"

        return {
            "total_analyzed": len(derived),
            "avg_probability": round(avg_probability, 2),
            "avg_coefficient": round(float(coefficients.mean()), 2),
            "market_sentiment": sentiment,
            "high_value_scores": sum(
                1 for entry in derived if entry.value_score >= self.HIGH_VALUE_THRESHOLD
            ),
        }
