"""Tests for the prediction validation engine."""

from dataclasses import replace

import pytest

from scorecast.data_loader import normalize_odds
from scorecast.predict import ScorePredictor
from scorecast.validation import (
    PredictionValidator,
    ValidationConfig,
    assess_confidence_calibration,
    assess_market_consistency,
    assess_odds_quality,
    assess_prediction_realism,
    expected_confidence,
    recommendation_for,
    validate_prediction,
)


class TestOddsQuality:
    def test_rich_set_top_tier(self, rich_odds):
        # 40 (25 entries) + 25 (range 18.8) + 30 (mass 98%)
        assert assess_odds_quality(normalize_odds(rich_odds)) == 95

    def test_small_set(self, simple_odds):
        # range 5 -> 10, mass 60% -> 0
        assert assess_odds_quality(normalize_odds(simple_odds)) == 10

    def test_empty(self):
        assert assess_odds_quality([]) == 0

    def test_near_mass_band(self):
        odds = [{"score": f"{i}-0", "coefficient": 5.0, "probability": 17} for i in range(5)]
        # 10 (5 entries) + 0 (no range) + 20 (mass 85%)
        assert assess_odds_quality(normalize_odds(odds)) == 30


class TestPredictionRealism:
    def test_missing_from_odds(self, simple_odds):
        assert assess_prediction_realism("5-5", normalize_odds(simple_odds)) == 30

    def test_malformed_prediction(self, simple_odds):
        assert assess_prediction_realism("five-five", normalize_odds(simple_odds)) == 30

    def test_favourite(self, simple_odds):
        # 50 + 30 (plausible coefficient) + 20 (probability >= 15)
        assert assess_prediction_realism("2-1", normalize_odds(simple_odds)) == 100

    def test_long_shot(self):
        odds = normalize_odds([{"score": "4-3", "coefficient": 22.0, "probability": 6}])
        # 50 + 15 (coefficient <= 25) + 10 (probability >= 5)
        assert assess_prediction_realism("4-3", odds) == 75

    def test_no_input(self, simple_odds):
        assert assess_prediction_realism(None, normalize_odds(simple_odds)) == 50
        assert assess_prediction_realism("2-1", []) == 50


class TestConfidenceCalibration:
    def test_expected_confidence(self, simple_odds, rich_odds):
        # avg coefficient 5.0
        assert expected_confidence(normalize_odds(simple_odds)) == 65
        # 25 entries, avg coefficient 8.85
        assert expected_confidence(normalize_odds(rich_odds)) == 75

    @pytest.mark.parametrize(
        "confidence,expected", [(65, 100), (55, 100), (85, 80), (95, 60), (45, 80), (35, 60), (30, 40)]
    )
    def test_bands(self, simple_odds, confidence, expected):
        assert assess_confidence_calibration(confidence, normalize_odds(simple_odds)) == expected

    def test_far_off(self, rich_odds):
        assert assess_confidence_calibration(30, normalize_odds(rich_odds)) == 40

    def test_no_input(self, simple_odds):
        assert assess_confidence_calibration(None, normalize_odds(simple_odds)) == 50
        assert assess_confidence_calibration(70, []) == 50


class TestMarketConsistency:
    def test_consistent(self, simple_odds):
        assert assess_market_consistency(normalize_odds(simple_odds)) == 100

    def test_mixed(self):
        odds = normalize_odds([
            {"score": "1-0", "coefficient": 4.0, "probability": 25},  # exact
            {"score": "0-0", "coefficient": 4.0, "probability": 50},  # 25 off
            {"score": "1-1", "coefficient": 4.0, "probability": 70},  # 45 off
        ])
        assert assess_market_consistency(odds) == pytest.approx(60.0)

    def test_too_few_records(self):
        odds = normalize_odds([{"score": "1-0", "coefficient": 4.0, "probability": 25}])
        assert assess_market_consistency(odds) == 50

    def test_too_few_quoted(self):
        odds = normalize_odds([
            {"score": "1-0", "coefficient": 4.0, "probability": 25},
            {"score": "0-0", "coefficient": 4.0},
            {"score": "1-1", "coefficient": 4.0, "probability": 0},
        ])
        assert assess_market_consistency(odds) == 40

    def test_depth_bonus_capped(self, rich_odds):
        assert assess_market_consistency(normalize_odds(rich_odds)) <= 100


class TestRecommendation:
    @pytest.mark.parametrize(
        "score,prefix",
        [(95, "Excellent"), (80, "Good"), (70, "Sound"), (60, "Acceptable"), (59, "Risky")],
    )
    def test_ladder(self, score, prefix):
        assert recommendation_for(score).startswith(prefix)


class TestPredictionValidator:
    def test_valid_prediction(self, simple_odds):
        prediction = ScorePredictor().predict(simple_odds)
        result = PredictionValidator().validate(prediction)

        assert result.metrics == {
            "odds_quality": 10,
            "prediction_realism": 100,
            "confidence_calibration": 100,
            "market_consistency": 100,
        }
        # (10 + 100 + 100 + 100) / 4 = 77.5
        assert result.validation_score == 78
        assert result.is_valid
        assert result.recommendation.startswith("Sound")

    def test_prediction_not_in_odds(self, simple_odds):
        prediction = replace(ScorePredictor().predict(simple_odds), predicted_score="5-5")
        result = PredictionValidator().validate(prediction)

        assert result.metrics["prediction_realism"] <= 30
        assert result.validation_score == 60
        assert not result.is_valid

    def test_explicit_odds_override(self, simple_odds, rich_odds):
        prediction = ScorePredictor().predict(simple_odds)
        result = PredictionValidator().validate(prediction, rich_odds)
        assert result.metrics["odds_quality"] == 95

    def test_stricter_threshold(self, simple_odds):
        prediction = ScorePredictor().predict(simple_odds)
        result = PredictionValidator(ValidationConfig(threshold=80)).validate(prediction)
        assert result.validation_score == 78
        assert not result.is_valid

    def test_custom_weights(self, simple_odds):
        prediction = ScorePredictor().predict(simple_odds)
        config = ValidationConfig(
            odds_quality_weight=0.05,
            prediction_realism_weight=0.25,
            confidence_calibration_weight=0.25,
            market_consistency_weight=0.25,
        )
        result = PredictionValidator(config).validate(prediction)
        # (0.5 + 25 + 25 + 25) / 0.8 = 94.375
        assert result.validation_score == 94

    def test_fallback_prediction(self):
        prediction = ScorePredictor().predict([])
        result = validate_prediction(prediction)

        assert result.metrics["odds_quality"] == 0
        assert not result.is_valid
        assert 0 <= result.validation_score <= 100

    def test_result_serialises(self, simple_odds):
        result = validate_prediction(ScorePredictor().predict(simple_odds))
        data = result.to_dict()
        assert data["validation_score"] == 78
        assert set(data["metrics"]) == {
            "odds_quality",
            "prediction_realism",
            "confidence_calibration",
            "market_consistency",
        }


class TestLabelsAndConfig:
    def test_leading_zero_label_matches(self):
        odds = normalize_odds([{"score": "02-1", "coefficient": 3.0, "probability": 30}])
        assert assess_prediction_realism("02-1", odds) == 100
        assert assess_prediction_realism("2-1", odds) == 100

    def test_leading_zero_prediction_validated(self):
        odds = [
            {"score": "02-1", "coefficient": 3.0, "probability": 30},
            {"score": "1-1", "coefficient": 4.0, "probability": 20},
        ]
        result = validate_prediction(ScorePredictor().predict(odds))
        assert result.metrics["prediction_realism"] == 100

    @pytest.mark.parametrize(
        "weights",
        [(0, 0, 0, 0), (-0.25, 0.25, 0.25, 0.25)],
    )
    def test_bad_weights_rejected(self, weights):
        quality, realism, calibration, consistency = weights
        with pytest.raises(ValueError, match="weights"):
            ValidationConfig(
                odds_quality_weight=quality,
                prediction_realism_weight=realism,
                confidence_calibration_weight=calibration,
                market_consistency_weight=consistency,
            )

    def test_metrics_read_only(self, simple_odds):
        result = validate_prediction(ScorePredictor().predict(simple_odds))

        with pytest.raises(TypeError):
            result.metrics["odds_quality"] = 100
        assert result.metrics["odds_quality"] == 10
        assert isinstance(result.to_dict()["metrics"], dict)
