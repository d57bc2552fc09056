"""Tests for post-hoc accuracy tracking."""

from dataclasses import replace

import pytest

from scorecast.model_evaluation import ModelEvaluator, accuracy_report, tag_result
from scorecast.predict import RiskLevel, ScorePredictor


@pytest.fixture
def prediction(simple_odds):
    return ScorePredictor().predict(simple_odds)


class TestTagResult:
    def test_correct(self, prediction):
        outcome = tag_result(prediction, "2-1")
        assert outcome.correct
        assert outcome.actual_score == "2-1"

    def test_incorrect(self, prediction):
        assert not tag_result(prediction, "0-0").correct

    def test_whitespace_normalised(self, prediction):
        outcome = tag_result(prediction, " 2-1 ")
        assert outcome.actual_score == "2-1"
        assert outcome.correct

    @pytest.mark.parametrize("label", ["2:1", "", "two-one", None])
    def test_invalid_label(self, prediction, label):
        with pytest.raises(ValueError):
            tag_result(prediction, label)

    def test_prediction_untouched(self, prediction):
        outcome = tag_result(prediction, "1-1")
        assert outcome.prediction is prediction
        assert prediction.predicted_score == "2-1"


class TestEvaluate:
    @pytest.fixture
    def outcomes(self, prediction):
        confident = replace(
            prediction, confidence=88, risk_level=RiskLevel.LOW, algorithm_label="Clustering+"
        )
        return [
            tag_result(prediction, "2-1"),  # 64, High, Multi-Algorithm
            tag_result(prediction, "1-0"),
            tag_result(confident, "2-1"),
            tag_result(confident, "2-1"),
            tag_result(replace(confident, confidence=92), "0-0"),
        ]

    def test_overall(self, outcomes):
        report = ModelEvaluator().evaluate(outcomes, pending=2)

        assert report.total_predictions == 7
        assert report.completed_predictions == 5
        assert report.pending_predictions == 2
        assert report.correct_predictions == 3
        assert report.accuracy_rate == 60

    def test_high_confidence_and_low_risk(self, outcomes):
        report = ModelEvaluator().evaluate(outcomes)

        # 2 of the 3 predictions at 80+ (all Low risk) were right
        assert report.high_confidence_accuracy == 67
        assert report.low_risk_accuracy == 67

    def test_algorithm_performance(self, outcomes):
        report = ModelEvaluator().evaluate(outcomes)

        assert report.algorithm_performance == [
            {"name": "Multi-Algorithm", "total": 2, "correct": 1, "accuracy": 50},
            {"name": "Clustering+", "total": 3, "correct": 2, "accuracy": 67},
        ]

    def test_confidence_brackets(self, outcomes):
        brackets = ModelEvaluator().evaluate(outcomes).confidence_brackets

        assert list(brackets) == ["90+", "80-89", "70-79", "60-69", "<60"]
        assert brackets["90+"] == {"total": 1, "correct": 0, "accuracy": 0}
        assert brackets["80-89"] == {"total": 2, "correct": 2, "accuracy": 100}
        assert brackets["60-69"] == {"total": 2, "correct": 1, "accuracy": 50}
        assert brackets["<60"]["total"] == 0

    def test_outcomes_frame(self, outcomes):
        df = ModelEvaluator().outcomes_frame(outcomes)

        assert len(df) == 5
        assert list(df["risk_level"][:2]) == ["High", "High"]
        assert df["correct"].sum() == 3


class TestEmpty:
    def test_no_outcomes(self):
        report = accuracy_report([], pending=4)

        assert report.total_predictions == 4
        assert report.completed_predictions == 0
        assert report.accuracy_rate == 0
        assert report.high_confidence_accuracy == 0
        assert report.low_risk_accuracy == 0
        assert report.algorithm_performance == []
        assert all(b["total"] == 0 for b in report.confidence_brackets.values())

    def test_pending_defaults_to_zero(self, prediction):
        report = accuracy_report([tag_result(prediction, "2-1")])
        assert report.pending_predictions == 0
        assert report.accuracy_rate == 100


def test_leading_zero_labels_compare_as_scores():
    prediction = ScorePredictor().predict([
        {"score": "02-1", "coefficient": 3.0, "probability": 30},
        {"score": "1-1", "coefficient": 4.0, "probability": 20},
    ])

    assert prediction.predicted_score == "02-1"
    assert tag_result(prediction, "2-1").correct
    assert tag_result(prediction, "02-1").actual_score == "02-1"
    assert not tag_result(prediction, "1-2").correct
