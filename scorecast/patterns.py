"""
Pattern Detection Module

Looks for betting patterns across a large correct-score odds set and turns
them into recommendations. Unlike the prediction pipeline this needs a
reasonable sample and refuses to run on fewer than 10 valid entries.

Patterns detected:
- low_scoring: share of scores with at most 2 goals
- high_value: entries with probability / coefficient >= 2
- safe_bets: short odds (<= 4) with a high probability (>= 20)
- upsets: long odds (>= 8) that still carry a decent probability (>= 8)
- market_inefficiency: quoted probability 10+ points away from implied
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence

from .data_loader import OddsEntry, normalize_odds
from .predict import RiskLevel, round_half_up

logger = logging.getLogger(__name__)

PATTERN_WEIGHTS = {
    "safe_bets": 0.4,
    "high_value": 0.25,
    "low_scoring": 0.15,
    "market_inefficiency": 0.15,
    "upsets": 0.05,
}

PRIORITY_ORDER = {"HIGH": 3, "MEDIUM": 2, "LOW": 1}


class InsufficientDataError(ValueError):
    """Raised when an odds set is too small for the requested analysis."""


@dataclass(frozen=True)
class PatternResult:
    """One detected (or not) pattern."""

    detected: bool
    strength: float
    count: int
    top_scores: tuple[OddsEntry, ...] = ()
    avg_coefficient: Optional[float] = None


@dataclass(frozen=True)
class Recommendation:
    kind: str
    priority: str
    message: str
    scores: tuple[OddsEntry, ...]
    confidence: int


@dataclass(frozen=True)
class PatternRisk:
    score: int
    level: RiskLevel


@dataclass(frozen=True)
class PatternReport:
    """Full output of pattern detection."""

    total_scores_analyzed: int
    patterns: dict[str, PatternResult]
    recommendations: tuple[Recommendation, ...]
    confidence: int
    risk: PatternRisk
    patterns_detected: int = field(default=0)

    def to_dict(self) -> dict[str, Any]:
        def scores(entries):
            return [
                {"score": e.score, "coefficient": e.coefficient, "probability": e.probability}
                for e in entries
            ]

        return {
            "total_scores_analyzed": self.total_scores_analyzed,
            "patterns_detected": self.patterns_detected,
            "patterns": {
                name: {
                    "detected": p.detected,
                    "strength": p.strength,
                    "count": p.count,
                    "avg_coefficient": p.avg_coefficient,
                    "top_scores": scores(p.top_scores),
                }
                for name, p in self.patterns.items()
            },
            "recommendations": [
                {
                    "type": r.kind,
                    "priority": r.priority,
                    "message": r.message,
                    "confidence": r.confidence,
                    "scores": scores(r.scores),
                }
                for r in self.recommendations
            ],
            "confidence": self.confidence,
            "risk": {"score": self.risk.score, "level": self.risk.level.value},
        }


@dataclass
class PatternConfig:
    """Thresholds for pattern detection."""

    min_entries: int = 10
    low_scoring_max_goals: int = 2
    high_value_threshold: float = 2.0
    safe_bet_max_coefficient: float = 4.0
    safe_bet_min_probability: float = 20.0
    upset_min_coefficient: float = 8.0
    upset_min_probability: float = 8.0
    inefficiency_threshold: float = 10.0


def _by_probability(entries: Iterable[OddsEntry]) -> list[OddsEntry]:
    return sorted(entries, key=lambda e: e.probability, reverse=True)


class PatternDetector:
    """
    Detect betting patterns in a correct-score odds set.

    Example:
        >>> detector = PatternDetector()
        >>> report = detector.detect(odds)
        >>> for rec in report.recommendations:
        ...     print(rec.priority, rec.message)
    """

    def __init__(self, config: Optional[PatternConfig] = None):
        self.config = config or PatternConfig()

    def detect(self, odds: Optional[Iterable[Any]]) -> PatternReport:
        """
        Run all pattern detectors.

        Args:
            odds: Raw odds records.

        Returns:
            PatternReport.

        Raises:
            InsufficientDataError: If fewer than min_entries records are
                supplied or survive validation.
        """
        raw = list(odds) if odds is not None else []
        if len(raw) < self.config.min_entries:
            raise InsufficientDataError(
                f"At least {self.config.min_entries} scores are required for pattern "
                f"detection, got {len(raw)}"
            )

        entries = normalize_odds(raw)
        if len(entries) < self.config.min_entries:
            raise InsufficientDataError(
                f"Only {len(entries)} valid scores, {self.config.min_entries} required"
            )

        patterns = {
            "low_scoring": self.low_scoring(entries),
            "high_value": self.high_value(entries),
            "safe_bets": self.safe_bets(entries),
            "upsets": self.upsets(entries),
            "market_inefficiency": self.market_inefficiency(entries),
        }

        report = PatternReport(
            total_scores_analyzed=len(entries),
            patterns=patterns,
            recommendations=tuple(self.recommendations(patterns)),
            confidence=pattern_confidence(patterns),
            risk=pattern_risk(patterns),
            patterns_detected=sum(1 for p in patterns.values() if p.strength > 0.6),
        )
        logger.debug(
            "Detected %d strong patterns in %d scores", report.patterns_detected, len(entries)
        )
        return report

    def low_scoring(self, entries: Sequence[OddsEntry]) -> PatternResult:
        matches = [
            e for e in entries
            if e.score_line.total_goals <= self.config.low_scoring_max_goals
        ]
        strength = len(matches) / len(entries)
        avg_coefficient = (
            round(sum(e.coefficient for e in matches) / len(matches), 2) if matches else None
        )
        return PatternResult(
            detected=strength > 0.4,
            strength=round(strength, 2),
            count=len(matches),
            top_scores=tuple(_by_probability(matches)[:3]),
            avg_coefficient=avg_coefficient,
        )

    def high_value(self, entries: Sequence[OddsEntry]) -> PatternResult:
        matches = [
            e for e in entries
            if e.probability / e.coefficient >= self.config.high_value_threshold
        ]
        ranked = sorted(matches, key=lambda e: e.probability / e.coefficient, reverse=True)
        return PatternResult(
            detected=len(matches) > 0,
            strength=min(1.0, len(matches) / 5),
            count=len(matches),
            top_scores=tuple(ranked[:3]),
        )

    def safe_bets(self, entries: Sequence[OddsEntry]) -> PatternResult:
        matches = [
            e for e in entries
            if e.coefficient <= self.config.safe_bet_max_coefficient
            and e.probability >= self.config.safe_bet_min_probability
        ]
        return PatternResult(
            detected=len(matches) > 0,
            strength=min(1.0, len(matches) / 3),
            count=len(matches),
            top_scores=tuple(_by_probability(matches)[:2]),
        )

    def upsets(self, entries: Sequence[OddsEntry]) -> PatternResult:
        matches = [
            e for e in entries
            if e.coefficient >= self.config.upset_min_coefficient
            and e.probability >= self.config.upset_min_probability
        ]
        return PatternResult(
            detected=len(matches) > 0,
            strength=min(0.8, len(matches) / 4),
            count=len(matches),
            top_scores=tuple(_by_probability(matches)[:2]),
        )

    def market_inefficiency(self, entries: Sequence[OddsEntry]) -> PatternResult:
        matches = [
            e for e in entries
            if abs(e.probability - 100 / e.coefficient) >= self.config.inefficiency_threshold
        ]
        return PatternResult(
            detected=len(matches) > 0,
            strength=min(1.0, len(matches) / len(entries) * 2),
            count=len(matches),
            top_scores=tuple(_by_probability(matches)[:3]),
        )

    def recommendations(self, patterns: dict[str, PatternResult]) -> list[Recommendation]:
        """Turn strong patterns into recommendations, highest priority first."""
        recs = []

        safe = patterns["safe_bets"]
        if safe.detected and safe.strength > 0.7:
            recs.append(Recommendation(
                kind="SAFE_BET",
                priority="HIGH",
                message=f"{safe.count} safe bets detected - strong recommendation",
                scores=safe.top_scores,
                confidence=95,
            ))

        value = patterns["high_value"]
        if value.detected and value.strength > 0.6:
            recs.append(Recommendation(
                kind="HIGH_VALUE",
                priority="MEDIUM",
                message=f"{value.count} high-value opportunities identified",
                scores=value.top_scores,
                confidence=85,
            ))

        low = patterns["low_scoring"]
        if low.detected and low.strength > 0.6:
            recs.append(Recommendation(
                kind="LOW_SCORING_MATCH",
                priority="MEDIUM",
                message="Low-scoring match likely - favour 0-0, 1-0, 0-1",
                scores=low.top_scores,
                confidence=80,
            ))

        upsets = patterns["upsets"]
        if upsets.detected and upsets.strength > 0.5:
            recs.append(Recommendation(
                kind="UPSET_POTENTIAL",
                priority="LOW",
                message="Upset potential detected - risky but rewarding",
                scores=upsets.top_scores,
                confidence=60,
            ))

        return sorted(recs, key=lambda r: PRIORITY_ORDER[r.priority], reverse=True)


def pattern_confidence(patterns: dict[str, PatternResult]) -> int:
    """Weighted sum of detected pattern strengths, capped at 95."""
    total = sum(
        p.strength * PATTERN_WEIGHTS[name] * 100
        for name, p in patterns.items()
        if p.detected
    )
    return min(95, int(round_half_up(total)))


def pattern_risk(patterns: dict[str, PatternResult]) -> PatternRisk:
    """
    Assess risk from the detected patterns.

    Base 50; strong safe bets lower it by 20, strong upsets raise it by 15
    and strong market inefficiency by 10. Clamped to [10, 90].
    """
    risk = 50

    safe = patterns["safe_bets"]
    if safe.detected and safe.strength > 0.7:
        risk -= 20

    upsets = patterns["upsets"]
    if upsets.detected and upsets.strength > 0.6:
        risk += 15

    inefficiency = patterns["market_inefficiency"]
    if inefficiency.detected and inefficiency.strength > 0.7:
        risk += 10

    if risk <= 30:
        level = RiskLevel.VERY_LOW
    elif risk <= 45:
        level = RiskLevel.LOW
    elif risk <= 60:
        level = RiskLevel.MODERATE
    elif risk <= 75:
        level = RiskLevel.HIGH
    else:
        level = RiskLevel.VERY_HIGH

    return PatternRisk(score=max(10, min(90, risk)), level=level)
