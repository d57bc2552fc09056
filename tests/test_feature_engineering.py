"""Tests for derived features and the odds analysis table."""

import pytest

from scorecast.data_loader import OddsEntry, normalize_odds
from scorecast.feature_engineering import FeatureEngineer, derive_entry


def test_derive_entry_formulas():
    entry = derive_entry(OddsEntry(score="2-1", coefficient=4.0, probability=30.0))

    assert entry.score == "2-1"
    assert entry.implied_probability == pytest.approx(25.0)
    assert entry.value_score == pytest.approx(7.5)
    assert entry.market_sentiment == pytest.approx(5.0)
    assert entry.risk_adjusted == pytest.approx(30.0 * (1 - 4.0 / 20))
    assert entry.total_goals == 3


def test_derive_preserves_order_and_labels(simple_odds):
    entries = normalize_odds(simple_odds)
    derived = FeatureEngineer().derive(entries)
    assert [d.score for d in derived] == [e.score for e in entries]


def test_risk_adjusted_goes_negative_for_long_odds():
    entry = derive_entry(OddsEntry(score="4-4", coefficient=40.0, probability=2.0))
    assert entry.risk_adjusted == pytest.approx(-2.0)


class TestBuildFrame:
    def test_columns_and_sorting(self, simple_odds):
        df = FeatureEngineer().build_frame(normalize_odds(simple_odds))

        assert list(df["score"]) == ["2-1", "1-1", "0-0"]
        assert list(df["risk_band"]) == ["VeryLow", "Low", "Moderate"]
        assert list(df["success_potential"]) == ["Excellent", "Excellent", "Good"]

    def test_empty(self):
        df = FeatureEngineer().build_frame([])
        assert df.empty
        assert "risk_band" in df.columns


class TestMarketMetrics:
    def test_metrics(self, simple_odds):
        metrics = FeatureEngineer().market_metrics(normalize_odds(simple_odds))

        assert metrics["total_analyzed"] == 3
        assert metrics["avg_probability"] == pytest.approx(20.0)
        assert metrics["avg_coefficient"] == pytest.approx(5.0)
        assert metrics["market_sentiment"] == "Bullish"
        # 30/3 = 10 and 20/4 = 5 clear the value threshold, 10/8 doesn't
        assert metrics["high_value_scores"] == 2

    def test_empty(self):
        metrics = FeatureEngineer().market_metrics([])
        assert metrics["total_analyzed"] == 0
        assert metrics["market_sentiment"] == "Neutral"
